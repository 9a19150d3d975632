"""Scan orchestration."""

from .scan import ScanResult, run_scan  # noqa: F401
