"""Services package."""

from expense_tracker.services.storage import (
    ConnectionError,
    ExpenseStorageInterface,
    GoogleSheetsClient,
    GoogleSheetsExpenseStorage,
    StorageError,
    StorageNotConfiguredError,
)

__all__ = [
    # Storage services
    "ConnectionError",
    "ExpenseStorageInterface",
    "GoogleSheetsClient",
    "GoogleSheetsExpenseStorage",
    "StorageError",
    "StorageNotConfiguredError",
]
