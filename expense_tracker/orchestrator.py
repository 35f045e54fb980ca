"""
Main Orchestrator for the Expense Tracker

This module ties the components together and defines the flows the UI uses:
1. Entry (form draft → validated expense → local list, newest first)
2. Report (expenses + location → PDF bytes + suggested filename)
3. Save (local expenses → remote store → structured outcome)
4. Translation (expense → assistant suggestion → user applies it)

DESIGN DECISION: Expenses live in the caller's list until the user saves.
Flows return new lists instead of mutating shared state, and failures are
reported once with no automatic retry. The user repeats the action.
"""

from datetime import date
from typing import Optional, Sequence
from uuid import UUID

from pydantic import ValidationError

from expense_tracker.agents import (
    TranslationAssistant,
    TranslationError,
    build_translation_request,
)
from expense_tracker.audit import AuditLogger, create_correlation_id
from expense_tracker.config import ReportSettings, get_settings
from expense_tracker.models.expense import (
    ExpenseDraft,
    ExpenseRecord,
    GeolocationFix,
    SaveOutcome,
    TranslationSuggestion,
    ValidationResult,
)
from expense_tracker.reports import (
    ReportGenerationError,
    format_money,
    render_expense_report,
    suggest_report_filename,
)
from expense_tracker.services.storage import (
    ExpenseStorageInterface,
    GoogleSheetsExpenseStorage,
    StorageNotConfiguredError,
)
from expense_tracker.validation import ExpenseValidator


NO_TRANSLATION_TO_OPTIMIZE = "No Bangla description provided to optimize."


class ExpenseReportFlow:
    """
    Orchestrates expense entry, reporting, saving and translation help.

    Flow for the entry page:
    1. Add expenses locally (validated)
    2. Optionally ask the assistant for better Bangla wording
    3. Generate the PDF (download), then save to the remote store

    The admin page uses fetch_expenses and generate_report only.
    """

    def __init__(
        self,
        storage: Optional[ExpenseStorageInterface] = None,
        assistant: Optional[TranslationAssistant] = None,
        validator: Optional[ExpenseValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        report_settings: Optional[ReportSettings] = None,
    ):
        self._audit_logger = audit_logger or AuditLogger()
        self._storage = storage or GoogleSheetsExpenseStorage(audit_logger=self._audit_logger)
        self._assistant = assistant
        self._validator = validator or ExpenseValidator()
        self._report_settings = report_settings or get_settings().report

    @property
    def has_assistant(self) -> bool:
        return self._assistant is not None

    # ------------------------------------------------------------------
    # Entry
    # ------------------------------------------------------------------

    def validate_draft(self, draft: ExpenseDraft) -> ValidationResult:
        return self._validator.validate(draft)

    def add_expense(
        self,
        records: Sequence[ExpenseRecord],
        draft: ExpenseDraft,
        location: Optional[GeolocationFix] = None,
        correlation_id: Optional[UUID] = None,
    ) -> list[ExpenseRecord]:
        """
        Validate a draft and put the new expense at the top of the list.

        Raises:
            ValueError: If the draft is invalid
        """
        record = self._validator.to_record(draft, location=location)
        self._audit_logger.log_expense_added(
            expense_id=record.id,
            category=record.category_label,
            amount=format_money(record.amount),
            currency=record.currency,
            correlation_id=correlation_id,
        )
        return [record, *records]

    def update_bangla_description(
        self,
        records: Sequence[ExpenseRecord],
        expense_id: str,
        description_bangla: str,
        correlation_id: Optional[UUID] = None,
    ) -> list[ExpenseRecord]:
        """Replace one expense's Bangla description; other expenses are untouched."""
        updated = []
        for record in records:
            if record.id == expense_id:
                record = record.model_copy(update={"description_bangla": description_bangla})
                self._audit_logger.log_translation_applied(
                    expense_id=expense_id,
                    correlation_id=correlation_id,
                )
            updated.append(record)
        return updated

    # ------------------------------------------------------------------
    # Report
    # ------------------------------------------------------------------

    def generate_report(
        self,
        records: Sequence[ExpenseRecord],
        location: Optional[GeolocationFix] = None,
        filename_prefix: Optional[str] = None,
        today: Optional[date] = None,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[bytes, str]:
        """
        Render the PDF report.

        Returns:
            (pdf_bytes, suggested_filename)

        Raises:
            ReportGenerationError: If the report cannot be produced
        """
        correlation_id = correlation_id or create_correlation_id()
        prefix = filename_prefix or self._report_settings.filename_prefix
        filename = suggest_report_filename(prefix, today)

        try:
            pdf_bytes = render_expense_report(
                records,
                location=location,
                settings=self._report_settings,
            )
        except ReportGenerationError as e:
            self._audit_logger.log_report_failed(
                error_message=str(e),
                expense_count=len(records),
                correlation_id=correlation_id,
            )
            raise

        self._audit_logger.log_report_generated(
            filename=filename,
            expense_count=len(records),
            size_bytes=len(pdf_bytes),
            correlation_id=correlation_id,
        )
        return pdf_bytes, filename

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    async def save_expenses(
        self,
        records: Sequence[ExpenseRecord],
        correlation_id: Optional[UUID] = None,
    ) -> SaveOutcome:
        """
        Append every expense to the remote store.

        Never raises: failures come back as SaveOutcome(success=False) so the
        caller can keep its local expenses and let the user try again.
        """
        correlation_id = correlation_id or create_correlation_id()

        if not records:
            return SaveOutcome(success=True, message="No expenses to save.", count=0)

        saved = 0
        try:
            for record in records:
                await self._storage.append_expense(record)
                saved += 1
        except StorageNotConfiguredError as e:
            self._audit_logger.log_configuration_error(
                service="google_sheets",
                error_message=str(e),
                correlation_id=correlation_id,
            )
            return SaveOutcome(
                success=False,
                message=str(e),
                count=saved,
                error_kind="configuration",
            )
        except Exception as e:
            self._audit_logger.log_save_failed(
                error_message=str(e),
                saved_before_failure=saved,
                correlation_id=correlation_id,
            )
            return SaveOutcome(
                success=False,
                message=(
                    f"Failed to save expenses. Server error: {e}. "
                    f"{saved} of {len(records)} expense(s) were saved before the error."
                ),
                count=saved,
                error_kind="storage",
            )

        self._audit_logger.log_expenses_saved(count=saved, correlation_id=correlation_id)
        return SaveOutcome(
            success=True,
            message=f"Successfully saved {saved} expense(s).",
            count=saved,
        )

    async def fetch_expenses(
        self,
        correlation_id: Optional[UUID] = None,
    ) -> list[ExpenseRecord]:
        """
        All stored expenses, newest first.

        Raises:
            StorageError: If the store is not configured or cannot be read
        """
        records = await self._storage.list_expenses()
        self._audit_logger.log_expenses_fetched(
            count=len(records),
            correlation_id=correlation_id,
        )
        return records

    # ------------------------------------------------------------------
    # Translation assistant
    # ------------------------------------------------------------------

    async def suggest_translation(
        self,
        record: ExpenseRecord,
        fallback_location: Optional[GeolocationFix] = None,
        correlation_id: Optional[UUID] = None,
    ) -> TranslationSuggestion:
        """
        Ask the assistant for tax-compliant Bangla wording.

        Raises:
            TranslationError: If the expense has no Bangla description, or
                the assistant is unavailable or fails
        """
        self._audit_logger.log_translation_requested(
            expense_id=record.id,
            correlation_id=correlation_id,
        )

        if not record.description_bangla:
            raise TranslationError(NO_TRANSLATION_TO_OPTIMIZE)

        if self._assistant is None:
            error = TranslationError(
                "Translation assistant is not configured. Set GEMINI_API_KEY."
            )
            self._audit_logger.log_configuration_error(
                service="gemini",
                error_message=str(error),
                correlation_id=correlation_id,
            )
            raise error

        request = build_translation_request(record, fallback_location)
        try:
            return await self._assistant.optimize(request)
        except TranslationError as e:
            self._audit_logger.log_translation_failed(
                expense_id=record.id,
                error_message=str(e.__cause__ or e),
                correlation_id=correlation_id,
            )
            raise


def create_app_components() -> ExpenseReportFlow:
    """
    Factory function to create the application flow.

    Storage configuration is checked when the store is first used, so a
    missing spreadsheet shows up as a save/fetch error. A missing Gemini key
    leaves the translation assistant switched off.
    """
    audit_logger = AuditLogger()

    assistant = None
    try:
        assistant = TranslationAssistant()
    except ValidationError as e:
        audit_logger.log_configuration_error(service="gemini", error_message=str(e))

    return ExpenseReportFlow(
        storage=GoogleSheetsExpenseStorage(audit_logger=audit_logger),
        assistant=assistant,
        audit_logger=audit_logger,
    )
