"""Tinyshrink data models."""

from tinyshrink.models.candidate import FileCandidate, ScanPolicy
from tinyshrink.models.outcome import AlreadyOptimal, CompressionOutcome, Optimized, Rejected
from tinyshrink.models.report import BatchReport, ReportRow, RowStatus

__all__ = [
    "AlreadyOptimal",
    "BatchReport",
    "CompressionOutcome",
    "FileCandidate",
    "Optimized",
    "Rejected",
    "ReportRow",
    "RowStatus",
    "ScanPolicy",
]
