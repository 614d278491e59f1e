"""Screen state for the results and settings pages."""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

import requests

from url_check.constants import (
    MSG_ANALYZING,
    MSG_CREDENTIAL_MISSING,
    MSG_KEY_LOAD_FAILED,
    MSG_KEY_SAVE_FAILED,
    MSG_KEY_SAVED,
    MSG_MALFORMED,
    MSG_REPORT_FAILED,
    MSG_SCAN_FAILED,
    MSG_STORAGE_READ,
    MSG_SUBMISSION_FAILED,
)
from url_check.credential_store import CredentialStore
from url_check.errors import (
    CredentialMissingError,
    MalformedResponseError,
    ReportError,
    ScanCancelled,
    ScanError,
    StorageError,
    SubmissionError,
)
from url_check.models import Notice, ResultsState, ScanReport
from url_check.scanner import CancellationToken, WaitStrategy, scan

__all__ = [
    "verdict",
    "verdict_color",
    "error_message",
    "ResultsPresenter",
    "SettingsPresenter",
]

logger = logging.getLogger(__name__)

ScanFunc = Callable[..., ScanReport]

_ERROR_MESSAGES: Dict[type, str] = {
    CredentialMissingError: MSG_CREDENTIAL_MISSING,
    SubmissionError: MSG_SUBMISSION_FAILED,
    ReportError: MSG_REPORT_FAILED,
    MalformedResponseError: MSG_MALFORMED,
}


def verdict(report: ScanReport) -> str:
    """Return "Malicious" when any engine flagged the URL, else "Safe"."""
    return "Malicious" if report["positives"] > 0 else "Safe"


def verdict_color(report: ScanReport) -> str:
    """Colour used to emphasise the verdict."""
    return "red" if report["positives"] > 0 else "green"


def error_message(exc: ScanError) -> str:
    """Map a scan failure to the message shown on the results screen."""
    return _ERROR_MESSAGES.get(type(exc), MSG_SCAN_FAILED)


class ResultsPresenter:
    """Drive one visit of the results screen.

    The state starts as ``loading`` and ends in either ``error`` or
    ``success``. A new visit needs a new presenter.
    """

    def __init__(
        self,
        store: CredentialStore,
        url: str,
        *,
        scan_func: ScanFunc = scan,
        wait: Optional[WaitStrategy] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.store = store
        self.url = url
        self._scan = scan_func
        self._wait = wait
        self._session = session
        self.token = CancellationToken()
        self.state: ResultsState = {
            "status": "loading",
            "url": url,
            "report": None,
            "error": None,
            "error_kind": None,
        }

    @property
    def closed(self) -> bool:
        """True once the screen has been torn down."""
        return self.token.cancelled

    def _fail(self, message: str, kind: str) -> None:
        """Move to the error state unless the screen is closed."""
        if self.closed:
            return
        self.state["status"] = "error"
        self.state["error"] = message
        self.state["error_kind"] = kind

    def load(self) -> ResultsState:
        """Read the key and run the scan, unless the visit already finished."""
        if self.state["status"] != "loading" or self.closed:
            return self.state

        try:
            api_key = self.store.get()
        except StorageError:
            logger.exception("Could not read API key")
            self._fail(MSG_STORAGE_READ, "storage")
            return self.state

        if not api_key:
            self._fail(MSG_CREDENTIAL_MISSING, CredentialMissingError.kind)
            return self.state

        try:
            report = self._scan(
                api_key,
                self.url,
                session=self._session,
                wait=self._wait,
                token=self.token,
            )
        except ScanCancelled:
            logger.info("Scan of %s cancelled", self.url)
            return self.state
        except ScanError as exc:
            self._fail(error_message(exc), exc.kind)
            return self.state

        if not self.closed:
            self.state["status"] = "success"
            self.state["report"] = report
        return self.state

    def close(self) -> None:
        """Tear the screen down; a pending scan stops at its next checkpoint."""
        self.token.cancel()

    def render(self) -> List[str]:
        """Return the text lines shown for the current state."""
        status = self.state["status"]
        if status == "loading":
            return [MSG_ANALYZING]
        if status == "error":
            return [self.state["error"] or MSG_SCAN_FAILED]
        report = self.state["report"]
        if report is None:
            return [MSG_SCAN_FAILED]
        return [
            "Scan Results",
            f"URL: {self.url}",
            f"Detections: {report['positives']} / {report['total']}",
            f"Status: {verdict(report)}",
        ]


class SettingsPresenter:
    """Load and save the API key shown in the settings form."""

    def __init__(self, store: CredentialStore) -> None:
        self.store = store
        self.api_key = ""
        self.notice: Optional[Notice] = None

    def load(self) -> str:
        """Populate the field with the stored key, if any."""
        try:
            saved = self.store.get()
        except StorageError:
            logger.exception("Could not load API key")
            self.notice = {"level": "error", "title": "Error", "message": MSG_KEY_LOAD_FAILED}
            return self.api_key
        if saved:
            self.api_key = saved
        return self.api_key

    def save(self, value: str) -> Notice:
        """Store `value` and return the notice to show."""
        self.api_key = value
        try:
            self.store.set(value)
        except StorageError:
            logger.exception("Could not save API key")
            self.notice = {"level": "error", "title": "Error", "message": MSG_KEY_SAVE_FAILED}
        else:
            self.notice = {"level": "success", "title": "Success", "message": MSG_KEY_SAVED}
        return self.notice
