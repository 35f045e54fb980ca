"""
Storage Services Package

Provides the abstract interface and the Google Sheets implementation of
expense storage.
"""

from expense_tracker.services.storage.interface import (
    ConnectionError,
    ExpenseStorageInterface,
    StorageError,
    StorageNotConfiguredError,
)
from expense_tracker.services.storage.google_sheets import (
    EXPENSE_COLUMNS,
    GoogleSheetsClient,
    GoogleSheetsExpenseStorage,
)

__all__ = [
    # Interfaces
    "ExpenseStorageInterface",
    # Exceptions
    "ConnectionError",
    "StorageError",
    "StorageNotConfiguredError",
    # Google Sheets implementation
    "EXPENSE_COLUMNS",
    "GoogleSheetsClient",
    "GoogleSheetsExpenseStorage",
]
