"""Render the end-of-run summary table."""

from __future__ import annotations

from pathlib import Path

import click

from tinyshrink.models.report import BatchReport, ReportRow, RowStatus
from tinyshrink.utils import bytes_to_human, display_path, format_elapsed, format_ratio

HEADERS = ("Name", "Original", "Optimized", "Ratio", "Time", "Status")

_STATUS_COLORS = {
    RowStatus.SUCCESS: "green",
    RowStatus.SKIPPED: "yellow",
    RowStatus.FAILED: "red",
}
# Column colours; status is coloured per value
_COLUMN_COLORS = ("blue", "red", "green", None, "cyan", None)
_RIGHT_ALIGNED = {1, 2, 3, 4}


def row_cells(row: ReportRow, root: Path | None = None) -> tuple[str, ...]:
    """Return the plain-text cells for *row*."""
    return (
        display_path(row.path, root),
        bytes_to_human(row.input_size),
        "-" if row.status is RowStatus.FAILED else bytes_to_human(row.output_size),
        format_ratio(row.ratio),
        "-" if row.elapsed is None else format_elapsed(row.elapsed),
        row.status.value,
    )


def render(
    report: BatchReport | list[ReportRow],
    root: Path | None = None,
    color: bool = True,
) -> str:
    """Return the summary table for *report* as text.

    Widths are computed on the plain cells and colour is applied after
    padding, so the columns line up whether or not the terminal shows
    ANSI styles.
    """
    rows = report.rows if isinstance(report, BatchReport) else list(report)
    if not rows:
        return "No files were processed."

    table = [row_cells(r, root) for r in rows]
    widths = [max(len(h), *(len(cells[i]) for cells in table)) for i, h in enumerate(HEADERS)]

    def fmt(text: str, i: int) -> str:
        if i == len(HEADERS) - 1:
            return text
        return text.rjust(widths[i]) if i in _RIGHT_ALIGNED else text.ljust(widths[i])

    lines = [
        "  ".join(click.style(fmt(h, i), bold=True) if color else fmt(h, i) for i, h in enumerate(HEADERS)),
        "  ".join("-" * w for w in widths),
    ]
    for row, cells in zip(rows, table):
        out = []
        for i, text in enumerate(cells):
            padded = fmt(text, i)
            if color:
                fg = _STATUS_COLORS[row.status] if i == len(cells) - 1 else _COLUMN_COLORS[i]
                if i == 3 and row.ratio is None:
                    fg = "red"
                padded = click.style(padded, fg=fg) if fg else padded
            out.append(padded)
        lines.append("  ".join(out))
    return "\n".join(lines)


def render_summary(report: BatchReport) -> str:
    """One-line totals shown under the table."""
    parts = [
        f"{report.replaced} replaced",
        f"{report.skipped} skipped",
        f"{report.failed} failed",
        f"{bytes_to_human(report.saved_bytes)} saved",
    ]
    line = ", ".join(parts)
    if report.aborted:
        line += " (batch aborted)"
    return line
