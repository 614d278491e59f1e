"""Exceptions raised by the credential store and the scan client."""

from __future__ import annotations

__all__ = [
    "StorageError",
    "ScanError",
    "CredentialMissingError",
    "SubmissionError",
    "ReportError",
    "MalformedResponseError",
    "ScanCancelled",
]


class StorageError(Exception):
    """The settings file could not be read or written."""


class ScanError(Exception):
    """Base class for failures of a submit/report sequence."""

    kind = "scan"


class CredentialMissingError(ScanError):
    """No API key is configured; raised before any network call."""

    kind = "credential_missing"


class SubmissionError(ScanError):
    """The scan submission request failed."""

    kind = "submission"


class ReportError(ScanError):
    """The report request failed."""

    kind = "report"


class MalformedResponseError(ScanError):
    """The service answered, but not with the expected JSON fields."""

    kind = "malformed"


class ScanCancelled(ScanError):
    kind = "cancelled"
