"""Report writers for Imagesweep."""

from .run_report import build_run_report, write_run_report

__all__ = ["build_run_report", "write_run_report"]
