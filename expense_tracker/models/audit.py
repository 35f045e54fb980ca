"""
Audit Models for the Expense Tracker

Every user-visible action (adding an expense, generating a report, saving
to the remote store, asking the translation assistant) produces an event.
Events go to the structured log so a failed save or report can be traced
back to the action that caused it.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Local entry
    EXPENSE_ADDED = "expense_added"
    TRANSLATION_APPLIED = "translation_applied"

    # Reports
    REPORT_GENERATED = "report_generated"
    REPORT_FAILED = "report_failed"

    # Persistence
    EXPENSES_SAVED = "expenses_saved"
    SAVE_FAILED = "save_failed"
    EXPENSES_FETCHED = "expenses_fetched"
    STORED_VALUE_REPLACED = "stored_value_replaced"

    # Translation assistant
    TRANSLATION_REQUESTED = "translation_requested"
    TRANSLATION_FAILED = "translation_failed"

    # System events
    CONFIGURATION_ERROR = "configuration_error"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """A single audit event."""

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'expense', 'report')"
    )
    entity_id: Optional[str] = None
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one 'Generate PDF & Save' click)"
    )

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None
    is_user_action: bool = False

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_added(expense_id, "VPS", "10.00", "USD")
        event = AuditEventBuilder.report_generated(filename, 3, 2, correlation_id)
    """

    @staticmethod
    def expense_added(
        expense_id: str,
        category: str,
        amount: str,
        currency: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Expense added locally: {category} {amount} {currency}",
            details={
                "category": category,
                "amount": amount,
                "currency": currency,
            },
            is_user_action=True,
        )

    @staticmethod
    def translation_applied(
        expense_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSLATION_APPLIED,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description="Bangla description updated locally",
            is_user_action=True,
        )

    @staticmethod
    def report_generated(
        filename: str,
        expense_count: int,
        size_bytes: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REPORT_GENERATED,
            entity_type="report",
            entity_id=filename,
            correlation_id=correlation_id,
            description=f"Report generated with {expense_count} expense(s)",
            details={
                "expense_count": expense_count,
                "size_bytes": size_bytes,
            },
        )

    @staticmethod
    def report_failed(
        error_message: str,
        expense_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REPORT_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="report",
            correlation_id=correlation_id,
            description="Report generation failed",
            error_message=error_message,
            details={"expense_count": expense_count},
        )

    @staticmethod
    def expenses_saved(
        count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSES_SAVED,
            entity_type="expense",
            correlation_id=correlation_id,
            description=f"Saved {count} expense(s) to the remote store",
            details={"count": count},
        )

    @staticmethod
    def save_failed(
        error_message: str,
        saved_before_failure: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="expense",
            correlation_id=correlation_id,
            description="Saving expenses to the remote store failed",
            error_message=error_message,
            details={"saved_before_failure": saved_before_failure},
        )

    @staticmethod
    def expenses_fetched(
        count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSES_FETCHED,
            entity_type="expense",
            correlation_id=correlation_id,
            description=f"Fetched {count} expense(s) from the remote store",
            details={"count": count},
        )

    @staticmethod
    def stored_value_replaced(
        expense_id: str,
        field: str,
        stored_value: str,
        replacement: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORED_VALUE_REPLACED,
            severity=AuditSeverity.WARNING,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Invalid or missing '{field}' on stored expense, using fallback",
            details={
                "field": field,
                "stored_value": stored_value,
                "replacement": replacement,
            },
        )

    @staticmethod
    def translation_requested(
        expense_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSLATION_REQUESTED,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description="Tax optimization suggestion requested",
            is_user_action=True,
        )

    @staticmethod
    def translation_failed(
        expense_id: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSLATION_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description="Tax optimization suggestion failed",
            error_message=error_message,
        )

    @staticmethod
    def configuration_error(
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CONFIGURATION_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"Service not configured: {service}",
            error_message=error_message,
            details={"service": service},
            correlation_id=correlation_id,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
