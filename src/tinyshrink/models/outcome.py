"""Results of submitting one file to the compression service."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Optimized:
    """The service produced a worthwhile smaller file, available at ``url``."""

    input_size: int
    output_size: int
    ratio: float
    url: str

    @property
    def saved(self) -> float:
        """Fraction of the original size removed."""
        return 1 - self.ratio


@dataclass(frozen=True, slots=True)
class AlreadyOptimal:
    """The gain is below the replacement threshold; the file is left alone."""

    input_size: int
    output_size: int
    ratio: float


@dataclass(frozen=True, slots=True)
class Rejected:
    """The service answered with a structured error."""

    error: str
    message: str = ""

    def __str__(self) -> str:
        return f"{self.error}: {self.message}" if self.message else self.error


CompressionOutcome = Optimized | AlreadyOptimal | Rejected
