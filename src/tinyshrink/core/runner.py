"""Sequential batch runner: one file in flight at a time."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from tinyshrink.core.client import CompressionClient, RequestCancelled, TransportError
from tinyshrink.models.candidate import FileCandidate
from tinyshrink.models.outcome import AlreadyOptimal, Optimized, Rejected
from tinyshrink.models.report import BatchReport, ReportRow, RowStatus
from tinyshrink.utils import replace_file

log = logging.getLogger(__name__)


class CandidateState(str, Enum):
    PENDING = "pending"
    SUBMITTED = "submitted"
    ALREADY_OPTIMAL = "already_optimal"
    OPTIMIZED_PENDING_FETCH = "optimized_pending_fetch"
    REPLACED = "replaced"
    REJECTED = "rejected"
    TRANSPORT_ERROR = "transport_error"
    WRITE_ERROR = "write_error"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL

    @property
    def is_failure(self) -> bool:
        return self in _FAILURES


_FAILURES = frozenset({
    CandidateState.REJECTED,
    CandidateState.TRANSPORT_ERROR,
    CandidateState.WRITE_ERROR,
})
_TERMINAL = _FAILURES | {
    CandidateState.ALREADY_OPTIMAL,
    CandidateState.REPLACED,
    CandidateState.CANCELLED,
}

# (candidate, new_state, detail); detail carries the error message on failures
ProgressCallback = Callable[[FileCandidate, CandidateState, str], None]


@dataclass(frozen=True, slots=True)
class RunnerPolicy:
    """How the runner reacts to failures."""

    report_failures: bool = False
    abort_on_write_error: bool = True


class BatchRunner:
    """Drives each candidate through submit, fetch and replace.

    The next candidate is not started until the current one reaches a
    terminal state.  Remote failures end only the current candidate; a
    failed overwrite stops the whole batch unless the policy says otherwise.
    """

    def __init__(
        self,
        client: CompressionClient,
        policy: RunnerPolicy | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self.client = client
        self.policy = policy or RunnerPolicy()
        self._on_progress = on_progress

    def run(
        self,
        candidates: list[FileCandidate],
        cancel: threading.Event | None = None,
    ) -> BatchReport:
        """Process *candidates* in order and return the accumulated report."""
        report = BatchReport()

        for candidate in candidates:
            if cancel is not None and cancel.is_set():
                log.warning("Batch cancelled before %s", candidate.path)
                report.aborted = True
                break

            state = self._process(candidate, report, cancel)
            report.processed += 1

            if state is CandidateState.CANCELLED:
                report.aborted = True
                break
            if state is CandidateState.WRITE_ERROR and self.policy.abort_on_write_error:
                log.error("Aborting batch after write failure on %s", candidate.path)
                report.aborted = True
                break

        return report

    def _process(
        self,
        candidate: FileCandidate,
        report: BatchReport,
        cancel: threading.Event | None,
    ) -> CandidateState:
        """Run one candidate to a terminal state, appending its row if any."""
        self._emit(candidate, CandidateState.PENDING)
        started = time.monotonic()

        try:
            data = candidate.path.read_bytes()
        except OSError as e:
            return self._fail(candidate, report, CandidateState.TRANSPORT_ERROR, f"Cannot read file: {e}")

        self._emit(candidate, CandidateState.SUBMITTED)
        try:
            outcome = self.client.submit(data, cancel=cancel)
        except RequestCancelled:
            self._emit(candidate, CandidateState.CANCELLED)
            return CandidateState.CANCELLED
        except TransportError as e:
            return self._fail(candidate, report, CandidateState.TRANSPORT_ERROR, str(e), len(data))

        match outcome:
            case Rejected():
                return self._fail(candidate, report, CandidateState.REJECTED, str(outcome), len(data))
            case AlreadyOptimal():
                report.append(
                    ReportRow(
                        path=candidate.path,
                        input_size=outcome.input_size or len(data),
                        output_size=outcome.output_size,
                        status=RowStatus.SKIPPED,
                    )
                )
                report.skipped += 1
                self._emit(candidate, CandidateState.ALREADY_OPTIMAL, f"ratio {outcome.ratio:.3f}")
                return CandidateState.ALREADY_OPTIMAL
            case Optimized():
                return self._replace(candidate, outcome, report, started, cancel)

        raise TypeError(f"Unexpected outcome: {outcome!r}")

    def _replace(
        self,
        candidate: FileCandidate,
        outcome: Optimized,
        report: BatchReport,
        started: float,
        cancel: threading.Event | None,
    ) -> CandidateState:
        self._emit(candidate, CandidateState.OPTIMIZED_PENDING_FETCH)
        try:
            body = self.client.fetch(outcome.url, expected_size=outcome.output_size, cancel=cancel)
        except RequestCancelled:
            self._emit(candidate, CandidateState.CANCELLED)
            return CandidateState.CANCELLED
        except TransportError as e:
            return self._fail(candidate, report, CandidateState.TRANSPORT_ERROR, str(e), outcome.input_size)

        try:
            replace_file(candidate.path, body)
        except OSError as e:
            return self._fail(candidate, report, CandidateState.WRITE_ERROR, str(e), outcome.input_size)

        report.append(
            ReportRow(
                path=candidate.path,
                input_size=outcome.input_size,
                output_size=outcome.output_size,
                status=RowStatus.SUCCESS,
                ratio=outcome.saved,
                elapsed=time.monotonic() - started,
            )
        )
        report.replaced += 1
        report.saved_bytes += max(0, candidate.size_bytes - len(body))
        self._emit(candidate, CandidateState.REPLACED)
        return CandidateState.REPLACED

    def _fail(
        self,
        candidate: FileCandidate,
        report: BatchReport,
        state: CandidateState,
        message: str,
        input_size: int | None = None,
    ) -> CandidateState:
        log.warning("%s: %s (%s)", state.value.replace("_", " ").capitalize(), candidate.path, message)
        report.failed += 1
        if self.policy.report_failures:
            size = candidate.size_bytes if input_size is None else input_size
            report.append(
                ReportRow(
                    path=candidate.path,
                    input_size=size,
                    output_size=0,
                    status=RowStatus.FAILED,
                    message=message,
                )
            )
        self._emit(candidate, state, message)
        return state

    def _emit(self, candidate: FileCandidate, state: CandidateState, detail: str = "") -> None:
        log.debug("%s -> %s", candidate.path, state.value)
        if self._on_progress:
            self._on_progress(candidate, state, detail)
