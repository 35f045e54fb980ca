"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap Google Sheets for another document store later
2. Use in-memory storage for testing
3. Keep the flows decoupled from the storage implementation

The interface is intentionally small: the app only ever appends an expense
and lists everything newest first.
"""

from abc import ABC, abstractmethod

from expense_tracker.models.expense import ExpenseRecord


class ExpenseStorageInterface(ABC):
    """
    Abstract interface for expense storage operations.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    async def append_expense(self, record: ExpenseRecord) -> bool:
        """
        Append one expense to storage.

        Args:
            record: The expense to save

        Returns:
            True if saved successfully

        Raises:
            StorageNotConfiguredError: If the backend has no configuration
            StorageError: If the save fails
        """
        pass

    @abstractmethod
    async def list_expenses(self) -> list[ExpenseRecord]:
        """
        List every stored expense, newest date first.

        Stored values that cannot be read are replaced with safe defaults
        (current time for dates, zero for amounts) instead of failing.

        Raises:
            StorageNotConfiguredError: If the backend has no configuration
            StorageError: If the backend cannot be read
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageNotConfiguredError(StorageError):
    """Storage settings (spreadsheet ID, credentials) are missing."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
