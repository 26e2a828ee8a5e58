"""Scan candidate and scan policy dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png"})
DEFAULT_MAX_SIZE = 5_200_000  # just under the 5 MB upload limit


def normalize_extension(ext: str) -> str:
    """Return *ext* lower-cased with a leading dot, e.g. 'PNG' -> '.png'."""
    ext = ext.strip().lower()
    return ext if ext.startswith(".") else f".{ext}"


@dataclass(frozen=True, slots=True)
class ScanPolicy:
    """Filters applied while walking the root directory."""

    extensions: frozenset[str] = field(default=DEFAULT_EXTENSIONS)
    max_size: int = DEFAULT_MAX_SIZE
    recursive: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "extensions", frozenset(normalize_extension(e) for e in self.extensions)
        )

    def admits(self, path: Path, size_bytes: int) -> bool:
        """Whether a regular file of this size and name passes the filters."""
        return size_bytes <= self.max_size and path.suffix.lower() in self.extensions


@dataclass(frozen=True, slots=True)
class FileCandidate:
    """An image file selected for compression."""

    path: Path
    size_bytes: int
    extension: str
