"""Tests for the results and settings screen presenters."""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Optional

import pytest

from url_check.constants import (
    MSG_ANALYZING,
    MSG_CREDENTIAL_MISSING,
    MSG_KEY_LOAD_FAILED,
    MSG_KEY_SAVE_FAILED,
    MSG_KEY_SAVED,
    MSG_MALFORMED,
    MSG_REPORT_FAILED,
    MSG_SCAN_FAILED,
    MSG_SUBMISSION_FAILED,
)
from url_check.credential_store import JsonCredentialStore
from url_check.errors import (
    MalformedResponseError,
    ReportError,
    ScanCancelled,
    StorageError,
    SubmissionError,
)
from url_check.models import ScanReport
from url_check.presenters import ResultsPresenter, SettingsPresenter, verdict, verdict_color


class _MemoryStore:
    """In-memory stand-in for the credential store."""

    def __init__(
        self, value: Optional[str] = None, *, fail_get: bool = False, fail_set: bool = False
    ) -> None:
        self.value = value
        self.fail_get = fail_get
        self.fail_set = fail_set

    def get(self) -> Optional[str]:
        if self.fail_get:
            raise StorageError("read failed")
        return self.value

    def set(self, value: str) -> None:
        if self.fail_set:
            raise StorageError("write failed")
        self.value = value


class _FakeScan:
    """Records calls and returns a canned report or raises."""

    def __init__(self, report: Optional[ScanReport] = None, exc: Optional[Exception] = None) -> None:
        self.report = report
        self.exc = exc
        self.calls: List[Any] = []

    def __call__(self, api_key: str, url: str, **kwargs: Any) -> ScanReport:
        self.calls.append((api_key, url, kwargs))
        if self.exc is not None:
            raise self.exc
        assert self.report is not None
        return self.report


def test_missing_key_goes_to_error_without_scanning() -> None:
    """No key means an error state and no scan call."""
    fake = _FakeScan(report={"positives": 0, "total": 70, "url": "http://example.com"})
    presenter = ResultsPresenter(_MemoryStore(), "http://example.com", scan_func=fake)

    state = presenter.load()

    assert state["status"] == "error"
    assert state["error"] == MSG_CREDENTIAL_MISSING
    assert state["error_kind"] == "credential_missing"
    assert fake.calls == []


def test_empty_key_counts_as_missing() -> None:
    """An empty stored key is treated like a missing one."""
    fake = _FakeScan()
    presenter = ResultsPresenter(_MemoryStore(""), "http://example.com", scan_func=fake)

    assert presenter.load()["status"] == "error"
    assert fake.calls == []


def test_storage_failure_on_results_is_error() -> None:
    """A store read failure ends the visit in the error state."""
    presenter = ResultsPresenter(_MemoryStore(fail_get=True), "http://example.com", scan_func=_FakeScan())

    state = presenter.load()

    assert state["status"] == "error"
    assert state["error_kind"] == "storage"


def test_safe_report_renders_safe() -> None:
    """Zero positives render as Safe with the literal counts."""
    fake = _FakeScan(report={"positives": 0, "total": 70, "url": "http://example.com"})
    presenter = ResultsPresenter(_MemoryStore("KEY123"), "http://example.com", scan_func=fake)

    assert presenter.render() == [MSG_ANALYZING]
    state = presenter.load()

    assert state["status"] == "success"
    assert fake.calls[0][:2] == ("KEY123", "http://example.com")
    assert fake.calls[0][2]["token"] is presenter.token
    lines = presenter.render()
    assert "Detections: 0 / 70" in lines
    assert "Status: Safe" in lines
    assert "URL: http://example.com" in lines


def test_positive_report_renders_malicious() -> None:
    """Any positive renders as Malicious."""
    fake = _FakeScan(report={"positives": 5, "total": 70, "url": "http://example.com"})
    presenter = ResultsPresenter(_MemoryStore("KEY123"), "http://example.com", scan_func=fake)

    presenter.load()

    lines = presenter.render()
    assert "Detections: 5 / 70" in lines
    assert "Status: Malicious" in lines


@pytest.mark.parametrize(
    "exc, message, kind",
    [
        (SubmissionError("offline"), MSG_SUBMISSION_FAILED, "submission"),
        (ReportError("http_500"), MSG_REPORT_FAILED, "report"),
        (MalformedResponseError("no counts"), MSG_MALFORMED, "malformed"),
    ],
)
def test_scan_failures_show_retry_message(exc: Exception, message: str, kind: str) -> None:
    """Each scan failure kind maps to its own retry message."""
    presenter = ResultsPresenter(_MemoryStore("KEY123"), "http://example.com", scan_func=_FakeScan(exc=exc))

    state = presenter.load()

    assert state["status"] == "error"
    assert state["error"] == message
    assert state["error_kind"] == kind
    assert state["report"] is None
    assert presenter.render() == [message]
    assert message.endswith("Please try again.")


def test_terminal_state_does_not_rescan() -> None:
    """Once finished, loading again does not rescan."""
    fake = _FakeScan(report={"positives": 1, "total": 2, "url": "u"})
    presenter = ResultsPresenter(_MemoryStore("KEY123"), "u", scan_func=fake)

    presenter.load()
    presenter.load()

    assert len(fake.calls) == 1


def test_closed_presenter_does_not_scan() -> None:
    """A presenter closed before loading never scans."""
    fake = _FakeScan(report={"positives": 1, "total": 2, "url": "u"})
    presenter = ResultsPresenter(_MemoryStore("KEY123"), "u", scan_func=fake)

    presenter.close()
    state = presenter.load()

    assert state["status"] == "loading"
    assert fake.calls == []


def test_close_during_scan_discards_update() -> None:
    """A result arriving after teardown must not change the state."""
    presenter: ResultsPresenter

    def scan_then_close(api_key: str, url: str, **kwargs: Any) -> ScanReport:
        presenter.close()
        return {"positives": 3, "total": 70, "url": url}

    presenter = ResultsPresenter(_MemoryStore("KEY123"), "u", scan_func=scan_then_close)
    state = presenter.load()

    assert state["status"] == "loading"
    assert state["report"] is None


def test_cancelled_scan_leaves_state_loading() -> None:
    """A cancelled scan leaves the torn-down visit untouched."""
    fake = _FakeScan(exc=ScanCancelled("gone"))
    presenter = ResultsPresenter(_MemoryStore("KEY123"), "u", scan_func=fake)

    assert presenter.load()["status"] == "loading"


def test_verdict_helpers() -> None:
    """Verdict label and colour depend only on positives."""
    assert verdict({"positives": 0, "total": 70, "url": ""}) == "Safe"
    assert verdict({"positives": 1, "total": 70, "url": ""}) == "Malicious"
    assert verdict_color({"positives": 0, "total": 70, "url": ""}) == "green"
    assert verdict_color({"positives": 9, "total": 70, "url": ""}) == "red"


def test_settings_round_trip(tmp_path: Path) -> None:
    """Saving then reloading the settings screen shows the saved key."""
    store = JsonCredentialStore(tmp_path / "settings.json")

    notice = SettingsPresenter(store).save("KEY123")
    reloaded = SettingsPresenter(store)

    assert notice == {"level": "success", "title": "Success", "message": MSG_KEY_SAVED}
    assert reloaded.load() == "KEY123"
    assert reloaded.api_key == "KEY123"
    assert reloaded.notice is None


def test_settings_load_without_key_leaves_field_empty() -> None:
    """With nothing stored the field stays empty."""
    presenter = SettingsPresenter(_MemoryStore())

    assert presenter.load() == ""


def test_settings_failures_raise_error_notices() -> None:
    """Read and write failures produce error notices."""
    loading = SettingsPresenter(_MemoryStore(fail_get=True))
    loading.load()
    assert loading.notice is not None
    assert loading.notice["message"] == MSG_KEY_LOAD_FAILED

    store = _MemoryStore("old", fail_set=True)
    saving = SettingsPresenter(store)
    notice = saving.save("new")
    assert notice["level"] == "error"
    assert notice["message"] == MSG_KEY_SAVE_FAILED
    assert store.value == "old"
    assert saving.api_key == "new"


def test_render_without_report_falls_back_to_generic_message() -> None:
    """A success state that lost its report renders the generic failure text."""
    presenter = ResultsPresenter(_MemoryStore("KEY123"), "u", scan_func=_FakeScan())
    presenter.state["status"] = "success"

    assert presenter.render() == [MSG_SCAN_FAILED]
