"""Directory walk that collects compressible image files."""

from __future__ import annotations

import logging
import stat
from pathlib import Path

from tinyshrink.models.candidate import FileCandidate, ScanPolicy

log = logging.getLogger(__name__)


class ScanError(Exception):
    """Raised when the root or one of its entries cannot be read."""


def scan(root: Path | str, policy: ScanPolicy | None = None) -> list[FileCandidate]:
    """Return the candidates under *root* in sorted traversal order.

    Entries are visited by name; a subdirectory's results are spliced in at
    the position of the directory itself.  Symlinks are followed and no
    cycle detection is done.

    Raises:
        ScanError: If *root* is not a directory or any entry cannot be
            listed or stat'ed.  No partial results are returned.
    """
    policy = policy or ScanPolicy()
    root = Path(root).absolute()
    if not root.is_dir():
        raise ScanError(f"Not a directory: {root}")

    candidates: list[FileCandidate] = []
    _walk(root, policy, candidates)
    log.info("Found %d candidate(s) under %s", len(candidates), root)
    return candidates


def _walk(folder: Path, policy: ScanPolicy, out: list[FileCandidate]) -> None:
    try:
        entries = sorted(folder.iterdir(), key=lambda p: p.name)
    except OSError as e:
        raise ScanError(f"Cannot list {folder}: {e}") from e

    for entry in entries:
        try:
            st = entry.stat()
        except OSError as e:
            raise ScanError(f"Cannot stat {entry}: {e}") from e

        if stat.S_ISREG(st.st_mode):
            if policy.admits(entry, st.st_size):
                out.append(
                    FileCandidate(path=entry, size_bytes=st.st_size, extension=entry.suffix.lower())
                )
            else:
                log.debug("Filtered out: %s", entry)
        elif stat.S_ISDIR(st.st_mode) and policy.recursive:
            _walk(entry, policy, out)
