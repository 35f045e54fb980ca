"""
Data Models Package

This package contains all Pydantic models used in the Expense Tracker.
All data flowing through the system must conform to these schemas.
"""

from expense_tracker.models.expense import (
    Approver,
    Currency,
    DomainPanelFund,
    EmployeeExpenses,
    ExpenseCategory,
    ExpenseDraft,
    ExpenseRecord,
    GeneralCategory,
    GeolocationFix,
    KnownCategory,
    SaveOutcome,
    TranslationRequest,
    TranslationSuggestion,
    ValidationIssue,
    ValidationResult,
    build_category,
)
from expense_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Expense models
    "Approver",
    "Currency",
    "DomainPanelFund",
    "EmployeeExpenses",
    "ExpenseCategory",
    "ExpenseDraft",
    "ExpenseRecord",
    "GeneralCategory",
    "GeolocationFix",
    "KnownCategory",
    "SaveOutcome",
    "TranslationRequest",
    "TranslationSuggestion",
    "ValidationIssue",
    "ValidationResult",
    "build_category",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
