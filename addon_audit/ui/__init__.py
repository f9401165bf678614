"""User interaction helpers."""

from .progress import BatchProgress, ProgressActivity, ProgressState
from .report import format_failure, render_report, render_summary_table, report_lines

__all__ = [
    "BatchProgress",
    "ProgressActivity",
    "ProgressState",
    "format_failure",
    "render_report",
    "render_summary_table",
    "report_lines",
]
