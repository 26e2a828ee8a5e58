"""CLI interface for tinyshrink."""

from __future__ import annotations

import logging
import signal
import sys
import threading
from pathlib import Path

import click

from tinyshrink.core.client import DEFAULT_TIMEOUT, SHRINK_URL, CompressionClient
from tinyshrink.core.reporter import render, render_summary
from tinyshrink.core.runner import BatchRunner, CandidateState, RunnerPolicy
from tinyshrink.core.scanner import ScanError, scan
from tinyshrink.models.candidate import DEFAULT_EXTENSIONS, DEFAULT_MAX_SIZE, FileCandidate, ScanPolicy
from tinyshrink.settings import Settings
from tinyshrink.utils import display_path


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _progress_printer(root: Path):
    """Echo one line per finished file; failures go to stderr immediately."""

    def on_progress(candidate: FileCandidate, state: CandidateState, detail: str) -> None:
        name = display_path(candidate.path, root)
        if state is CandidateState.REPLACED:
            click.echo(f"  {click.style('✓', fg='green')} {name}")
        elif state is CandidateState.ALREADY_OPTIMAL:
            click.echo(f"  {click.style('·', fg='bright_black')} {name}: already optimized")
        elif state is CandidateState.CANCELLED:
            click.echo(f"  {click.style('✗', fg='yellow')} {name}: cancelled", err=True)
        elif state.is_failure:
            label = state.value.replace("_", " ")
            click.echo(f"  {click.style('✗', fg='red')} {name}: {label}: {detail}", err=True)

    return on_progress


@click.command()
@click.argument("root", type=click.Path(file_okay=False, path_type=Path))
@click.option("-r", "--recursive/--no-recursive", default=False, help="Descend into subdirectories")
@click.option("-e", "--ext", "extensions", multiple=True, help="Allowed extension (repeatable), e.g. -e png")
@click.option(
    "--max-size",
    type=click.IntRange(min=0),
    default=DEFAULT_MAX_SIZE,
    show_default=True,
    help="Skip files larger than this many bytes",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=DEFAULT_TIMEOUT,
    show_default=True,
    help="Per-request deadline in seconds",
)
@click.option("--endpoint", default=SHRINK_URL, help="Shrink endpoint URL")
@click.option("--report-failures", is_flag=True, help="Add failed files to the summary table")
@click.option(
    "--abort-on-write-error/--continue-on-write-error",
    default=True,
    help="Stop the batch when a file cannot be overwritten",
)
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
def main(
    root: Path,
    recursive: bool,
    extensions: tuple[str, ...],
    max_size: int,
    timeout: float,
    endpoint: str,
    report_failures: bool,
    abort_on_write_error: bool,
    verbose: int,
) -> None:
    """Compress the images under ROOT in place via TinyPNG, one file at a time."""
    _setup_logging(verbose)

    policy = ScanPolicy(
        extensions=frozenset(extensions or DEFAULT_EXTENSIONS),
        max_size=max_size,
        recursive=recursive,
    )
    try:
        candidates = scan(root, policy)
    except ScanError as exc:
        click.echo(click.style(f"Scan failed: {exc}", fg="red"), err=True)
        sys.exit(1)

    root = root.absolute()
    if not candidates:
        click.echo("No matching images found.")
        return

    runner = BatchRunner(
        CompressionClient(endpoint=endpoint, timeout=timeout),
        RunnerPolicy(report_failures=report_failures, abort_on_write_error=abort_on_write_error),
        on_progress=_progress_printer(root),
    )

    click.echo(f"\nCompressing {len(candidates)} file(s)...\n")

    cancel = threading.Event()
    previous = signal.signal(signal.SIGINT, lambda signum, frame: cancel.set())
    try:
        report = runner.run(candidates, cancel=cancel)
    finally:
        signal.signal(signal.SIGINT, previous)

    click.echo()
    click.echo(render(report, root=root))
    click.echo(f"\n{render_summary(report)}\n")
    if report.aborted:
        sys.exit(1)


def run() -> None:
    """Console-script entry point; settings.json supplies option defaults."""
    main(default_map=Settings().as_default_map())
