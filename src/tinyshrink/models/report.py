"""Report rows and the per-run batch report."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class RowStatus(str, Enum):
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(slots=True)
class ReportRow:
    """One line of the final summary table.

    ``ratio`` is the fraction saved (``1 - output.ratio``) and is ``None``
    whenever the file was not replaced. ``elapsed`` covers the remote
    round-trip and is only set for replaced files.
    """

    path: Path
    input_size: int
    output_size: int
    status: RowStatus
    ratio: float | None = None
    elapsed: float | None = None
    message: str = ""


@dataclass(slots=True)
class BatchReport:
    """Everything a run produced, in processing order."""

    rows: list[ReportRow] = field(default_factory=list)
    processed: int = 0
    replaced: int = 0
    skipped: int = 0
    failed: int = 0
    saved_bytes: int = 0
    aborted: bool = False

    def append(self, row: ReportRow) -> None:
        self.rows.append(row)
