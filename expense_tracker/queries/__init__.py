"""Query package."""

from expense_tracker.queries.search import filter_expenses, matches

__all__ = ["filter_expenses", "matches"]
