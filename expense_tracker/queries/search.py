"""
Expense Search

Free-text filter for the admin table: a record matches when any of its
visible fields contains the search term (case-insensitive). IDs and
locations are not searchable.
"""

from typing import Iterable

from expense_tracker.models.expense import ExpenseRecord


def searchable_values(record: ExpenseRecord) -> list[str]:
    """Every field value a user can search by, as text."""
    values = [
        record.category_label,
        record.employee_name or "",
        record.panel_name or "",
        record.details,
        str(record.amount),
        record.currency,
        record.description_english,
        record.description_bangla,
        record.date.strftime("%Y-%m-%d"),
        record.paid_by,
        record.approved_by,
    ]
    return [value for value in values if value]


def matches(record: ExpenseRecord, term: str) -> bool:
    needle = term.strip().lower()
    if not needle:
        return True
    return any(needle in value.lower() for value in searchable_values(record))


def filter_expenses(records: Iterable[ExpenseRecord], term: str) -> list[ExpenseRecord]:
    """
    Records matching `term`, in their original order.

    A blank term matches everything.
    """
    return [record for record in records if matches(record, term or "")]
