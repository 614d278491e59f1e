"""Check a URL against the VirusTotal v2 API."""

__version__ = "0.1.0"
