"""
Audit Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Traceability of saves and reports
2. Debugging capability when the remote store or the AI service fails
3. A record of stored values that had to be replaced on read

The audit logger writes structured JSON through structlog. Correlation IDs
tie together the events of one user action.
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from expense_tracker.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """Central audit logging service."""

    def __init__(self):
        self._logger = structlog.get_logger("expense_tracker.audit")

    def log(self, event: AuditEvent) -> None:
        """Log an audit event at the level matching its severity."""
        log_dict = event.to_log_dict()

        if event.severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    def log_expense_added(
        self,
        expense_id: str,
        category: str,
        amount: str,
        currency: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.expense_added(
            expense_id=expense_id,
            category=category,
            amount=amount,
            currency=currency,
            correlation_id=correlation_id,
        ))

    def log_translation_applied(
        self,
        expense_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.translation_applied(
            expense_id=expense_id,
            correlation_id=correlation_id,
        ))

    def log_report_generated(
        self,
        filename: str,
        expense_count: int,
        size_bytes: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.report_generated(
            filename=filename,
            expense_count=expense_count,
            size_bytes=size_bytes,
            correlation_id=correlation_id,
        ))

    def log_report_failed(
        self,
        error_message: str,
        expense_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.report_failed(
            error_message=error_message,
            expense_count=expense_count,
            correlation_id=correlation_id,
        ))

    def log_expenses_saved(
        self,
        count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.expenses_saved(
            count=count,
            correlation_id=correlation_id,
        ))

    def log_save_failed(
        self,
        error_message: str,
        saved_before_failure: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.save_failed(
            error_message=error_message,
            saved_before_failure=saved_before_failure,
            correlation_id=correlation_id,
        ))

    def log_expenses_fetched(
        self,
        count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.expenses_fetched(
            count=count,
            correlation_id=correlation_id,
        ))

    def log_stored_value_replaced(
        self,
        expense_id: str,
        field: str,
        stored_value: str,
        replacement: str,
    ) -> None:
        self.log(AuditEventBuilder.stored_value_replaced(
            expense_id=expense_id,
            field=field,
            stored_value=stored_value,
            replacement=replacement,
        ))

    def log_translation_requested(
        self,
        expense_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.translation_requested(
            expense_id=expense_id,
            correlation_id=correlation_id,
        ))

    def log_translation_failed(
        self,
        expense_id: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.translation_failed(
            expense_id=expense_id,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_configuration_error(
        self,
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.configuration_error(
            service=service,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., "Generate PDF & Save").
    Pass it through all subsequent operations.
    """
    return uuid4()
