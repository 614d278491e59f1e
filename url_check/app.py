#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Flask pages and command line entry for the VirusTotal URL check."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Dict, List, Optional

from flask import Flask, jsonify, render_template, request

from url_check.constants import LOG_LEVEL, MSG_ANALYZING, SETTINGS_FILE
from url_check.credential_store import CredentialStore, JsonCredentialStore
from url_check.presenters import ResultsPresenter, SettingsPresenter, verdict, verdict_color

app = Flask(__name__)
app.config.update(
    CREDENTIAL_STORE=JsonCredentialStore(SETTINGS_FILE),
    SCAN_WAIT=None,
    HTTP_SESSION=None,
)

logger = logging.getLogger(__name__)


def _store() -> CredentialStore:
    """Credential store configured for the app."""
    return app.config["CREDENTIAL_STORE"]


def run_results(store: CredentialStore, url: str, **kwargs: Any) -> ResultsPresenter:
    """Run one results visit to completion and tear it down."""
    presenter = ResultsPresenter(store, url, **kwargs)
    try:
        presenter.load()
    finally:
        presenter.close()
    return presenter


def results_payload(presenter: ResultsPresenter) -> Dict[str, Any]:
    """JSON body returned by the results endpoint."""
    report = presenter.state["report"]
    return {
        "state": presenter.state,
        "lines": presenter.render(),
        "verdict": verdict(report) if report else None,
        "color": verdict_color(report) if report else None,
    }


@app.route("/")
def index():
    """Home page with the URL form."""
    return render_template("index.html")


@app.route("/results")
def results():
    """Results page, rendered in the Loading state."""
    scanned = request.args.get("scannedData", "")
    return render_template("results.html", scanned_data=scanned, loading_text=MSG_ANALYZING)


@app.route("/api/results", methods=["POST"])
def api_results():
    """Run one results visit for `scannedData` and return its state as JSON."""
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        scanned = payload.get("scannedData")
    else:
        scanned = request.form.get("scannedData")
    if not isinstance(scanned, str) or not scanned:
        return jsonify({"error": "scannedData is required"}), 400
    presenter = run_results(
        _store(),
        scanned,
        wait=app.config["SCAN_WAIT"],
        session=app.config["HTTP_SESSION"],
    )
    return jsonify(results_payload(presenter))


@app.route("/settings", methods=["GET", "POST"])
def settings():
    """Show the settings form, or save the submitted key."""
    presenter = SettingsPresenter(_store())
    if request.method == "POST":
        presenter.save(request.form.get("api_key", ""))
    else:
        presenter.load()
    return render_template("settings.html", api_key=presenter.api_key, notice=presenter.notice)


# ---------- CLI entry ----------
def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line options."""
    p = argparse.ArgumentParser(description="Check a URL against VirusTotal.")
    group = p.add_mutually_exclusive_group()
    group.add_argument("--check", metavar="URL", help="Scan a URL and print the verdict.")
    group.add_argument("--set-key", metavar="KEY", help="Store the VirusTotal API key.")
    p.add_argument("--port", type=int, default=8080, help="Port for the web server (default: 8080).")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Command line entry point; returns the process exit code."""
    logging.basicConfig(
        level=LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    args = parse_args(argv)
    store = _store()

    if args.check:
        presenter = run_results(store, args.check)
        for line in presenter.render():
            print(line)
        return 0 if presenter.state["status"] == "success" else 1

    if args.set_key is not None:
        notice = SettingsPresenter(store).save(args.set_key)
        print(f"[{notice['title']}] {notice['message']}")
        return 0 if notice["level"] == "success" else 1

    app.run(host="0.0.0.0", port=args.port, debug=False)
    return 0


if __name__ == "__main__":
    sys.exit(main())
