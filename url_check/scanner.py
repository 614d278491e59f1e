"""VirusTotal v2 URL scan client: submit, wait, then fetch the report."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from url_check.constants import (
    DEFAULT_TIMEOUT,
    SCAN_DELAY_SECONDS,
    USER_AGENT,
    VT_REPORT_ENDPOINT,
    VT_SCAN_ENDPOINT,
)
from url_check.errors import (
    CredentialMissingError,
    MalformedResponseError,
    ReportError,
    ScanCancelled,
    SubmissionError,
)
from url_check.models import ScanReport, ScanSubmission

__all__ = [
    "build_session",
    "CancellationToken",
    "FixedDelayWait",
    "WaitStrategy",
    "submit_url",
    "fetch_report",
    "scan",
]

logger = logging.getLogger(__name__)

ReportFetcher = Callable[[], ScanReport]


class CancellationToken:
    """Cancellation flag shared between a screen and its pending scan."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation of the pending scan."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        """Return True once `cancel` has been called."""
        return self._event.is_set()

    def wait(self, seconds: float) -> bool:
        """Sleep up to `seconds`; return True if cancelled meanwhile."""
        return self._event.wait(seconds)

    def raise_if_cancelled(self) -> None:
        """Raise `ScanCancelled` if cancellation was requested."""
        if self.cancelled:
            raise ScanCancelled("scan cancelled")


WaitStrategy = Callable[[ReportFetcher, CancellationToken], ScanReport]


class FixedDelayWait:
    """Wait a fixed delay, then fetch the report once.

    The delay is not a completion signal: the service may still be analysing
    the URL when the report is requested.
    """

    def __init__(self, delay: float = SCAN_DELAY_SECONDS) -> None:
        self.delay = delay

    def __call__(self, fetch: ReportFetcher, token: CancellationToken) -> ScanReport:
        """Sleep on `token`, then call `fetch` once."""
        if self.delay > 0 and token.wait(self.delay):
            raise ScanCancelled("scan cancelled while waiting for the report")
        return fetch()


def build_session() -> requests.Session:
    """Create a `requests.Session` with transport retries disabled."""
    session = requests.Session()
    retry = Retry(total=0, read=False, raise_on_status=False)
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers.update({
        "User-Agent": USER_AGENT,
        "Accept": "application/json",
    })
    return session


def _json_body(resp: requests.Response) -> Dict[str, Any]:
    """Decode a response body that must be a JSON object."""
    try:
        body = resp.json()
    except ValueError as exc:
        raise MalformedResponseError("response is not valid JSON") from exc
    if not isinstance(body, dict):
        raise MalformedResponseError("response is not a JSON object")
    return body


def _is_count(value: Any) -> bool:
    """Return True for a real integer count (booleans excluded)."""
    return isinstance(value, int) and not isinstance(value, bool)


def _is_success(status_code: int) -> bool:
    """Any 2xx except 204, which the v2 API sends when the quota is exhausted."""
    return 200 <= status_code < 300 and status_code != 204


def submit_url(
    session: requests.Session, api_key: str, url: str, timeout: int = DEFAULT_TIMEOUT
) -> ScanSubmission:
    """Register `url` for analysis and return the scan id."""
    try:
        resp = session.post(
            VT_SCAN_ENDPOINT,
            data={"apikey": api_key, "url": url},
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            timeout=timeout,
        )
    except requests.exceptions.RequestException as exc:
        logger.warning("Scan submission for %s failed: %s", url, type(exc).__name__)
        raise SubmissionError(type(exc).__name__) from exc

    if not _is_success(resp.status_code):
        logger.warning("Scan submission for %s returned HTTP %s", url, resp.status_code)
        raise SubmissionError(f"http_{resp.status_code}")

    body = _json_body(resp)
    scan_id = body.get("scan_id")
    if not isinstance(scan_id, str) or not scan_id:
        raise MalformedResponseError("submission response has no scan_id")
    logger.info("Submitted %s, scan_id=%s", url, scan_id)
    return {"scan_id": scan_id}


def fetch_report(
    session: requests.Session,
    api_key: str,
    scan_id: str,
    url: str = "",
    timeout: int = DEFAULT_TIMEOUT,
) -> ScanReport:
    """Query the report for `scan_id`."""
    try:
        resp = session.get(
            VT_REPORT_ENDPOINT,
            params={"apikey": api_key, "resource": scan_id},
            timeout=timeout,
        )
    except requests.exceptions.RequestException as exc:
        logger.warning("Report request for %s failed: %s", scan_id, type(exc).__name__)
        raise ReportError(type(exc).__name__) from exc

    if not _is_success(resp.status_code):
        logger.warning("Report request for %s returned HTTP %s", scan_id, resp.status_code)
        raise ReportError(f"http_{resp.status_code}")

    body = _json_body(resp)
    positives = body.get("positives")
    total = body.get("total")
    if not _is_count(positives) or not _is_count(total):
        raise MalformedResponseError("report has no positives/total counts")
    report_url = body.get("url")
    return {
        "positives": positives,
        "total": total,
        "url": report_url if isinstance(report_url, str) else url,
    }


def scan(
    api_key: Optional[str],
    url: str,
    *,
    session: Optional[requests.Session] = None,
    wait: Optional[WaitStrategy] = None,
    token: Optional[CancellationToken] = None,
    timeout: int = DEFAULT_TIMEOUT,
) -> ScanReport:
    """Submit `url`, wait, and return the parsed report.

    Raises a `ScanError` subclass on failure. A session passed in by the
    caller is left open.
    """
    if not api_key:
        raise CredentialMissingError("credential not configured")

    token = token or CancellationToken()
    wait = wait or FixedDelayWait()
    owns_session = session is None
    active = session if session is not None else build_session()
    try:
        token.raise_if_cancelled()
        submission = submit_url(active, api_key, url, timeout=timeout)

        def fetch() -> ScanReport:
            token.raise_if_cancelled()
            return fetch_report(active, api_key, submission["scan_id"], url, timeout=timeout)

        report = wait(fetch, token)
        logger.info(
            "Report for %s: %s/%s detections", url, report["positives"], report["total"]
        )
        return report
    finally:
        if owns_session:
            active.close()
