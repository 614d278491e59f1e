"""Shared configuration constants for the application."""

from __future__ import annotations

import os
from pathlib import Path

DEFAULT_TIMEOUT = int(os.getenv("URLCHECK_TIMEOUT", "10"))
SCAN_DELAY_SECONDS = float(os.getenv("URLCHECK_SCAN_DELAY", "3.0"))
SETTINGS_FILE = Path(os.getenv("URLCHECK_SETTINGS_FILE", "data/settings.json"))
LOG_LEVEL = os.getenv("URLCHECK_LOG_LEVEL", "INFO")

API_KEY_STORAGE_KEY = "virusTotalApiKey"

VT_SCAN_ENDPOINT = "https://www.virustotal.com/vtapi/v2/url/scan"
VT_REPORT_ENDPOINT = "https://www.virustotal.com/vtapi/v2/url/report"

USER_AGENT = "url-check/0.1 (+https://www.virustotal.com/vtapi/v2)"

MSG_ANALYZING = "Analyzing URL..."
MSG_CREDENTIAL_MISSING = "Please set your VirusTotal API key in the settings"
MSG_STORAGE_READ = "Failed to read the stored API key. Please try again."
MSG_SCAN_FAILED = "Failed to check URL. Please try again."
MSG_SUBMISSION_FAILED = "Failed to submit URL to VirusTotal. Please try again."
MSG_REPORT_FAILED = "Failed to fetch the VirusTotal report. Please try again."
MSG_MALFORMED = "VirusTotal returned an unexpected response. Please try again."

MSG_KEY_SAVED = "API key saved successfully"
MSG_KEY_SAVE_FAILED = "Failed to save API key"
MSG_KEY_LOAD_FAILED = "Failed to load API key"

_EXPORTED_NAMES = (
    "DEFAULT_TIMEOUT",
    "SCAN_DELAY_SECONDS",
    "SETTINGS_FILE",
    "LOG_LEVEL",
    "API_KEY_STORAGE_KEY",
    "VT_SCAN_ENDPOINT",
    "VT_REPORT_ENDPOINT",
    "USER_AGENT",
    "MSG_ANALYZING",
    "MSG_CREDENTIAL_MISSING",
    "MSG_STORAGE_READ",
    "MSG_SCAN_FAILED",
    "MSG_SUBMISSION_FAILED",
    "MSG_REPORT_FAILED",
    "MSG_MALFORMED",
    "MSG_KEY_SAVED",
    "MSG_KEY_SAVE_FAILED",
    "MSG_KEY_LOAD_FAILED",
)

__all__ = [name for name in _EXPORTED_NAMES if name in globals()]
