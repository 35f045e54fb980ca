"""PDF report package."""

from expense_tracker.reports.layout import (
    PageWriter,
    ReportGenerationError,
    format_money,
    render_expense_report,
    suggest_report_filename,
    wrap_text,
)

__all__ = [
    "PageWriter",
    "ReportGenerationError",
    "format_money",
    "render_expense_report",
    "suggest_report_filename",
    "wrap_text",
]
