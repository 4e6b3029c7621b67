"""Reporting for comparison results."""

from tabular_compare.reporting.comparison_report import (
    ReportRow,
    build_report_rows,
    display_comparison_report,
    display_comparison_summary,
    generate_report_text,
    save_report_json,
    summarize,
)

__all__ = [
    "ReportRow",
    "build_report_rows",
    "display_comparison_report",
    "display_comparison_summary",
    "generate_report_text",
    "save_report_json",
    "summarize",
]
