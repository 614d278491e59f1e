"""Data structures used across the application."""

from __future__ import annotations

from typing import Literal, Optional, TypedDict

ResultsStatus = Literal["loading", "error", "success"]
NoticeLevel = Literal["success", "error"]


class ScanSubmission(TypedDict):
    """Acknowledgment returned by the scan endpoint; only the id is kept."""

    scan_id: str


class ScanReport(TypedDict):
    """Report for one submitted URL."""

    positives: int
    total: int
    url: str


class ResultsState(TypedDict):
    """State of the results screen for a single visit."""

    status: ResultsStatus
    url: str
    report: Optional[ScanReport]
    error: Optional[str]
    error_kind: Optional[str]


class Notice(TypedDict):
    """A user-facing notice raised by the settings screen."""

    level: NoticeLevel
    title: str
    message: str


__all__ = ["ScanSubmission", "ScanReport", "ResultsState", "Notice"]
