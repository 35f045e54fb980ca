"""
Expense Form Validation

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - REQUIRED FIELDS:
- Category, currency, approver chosen from the known options
- Details, both descriptions and payer filled in
- Positive amount, a date
- Employee name for Employee Expenses, panel name for Domain Panel Fund

STAGE 2 - SANITY CHECKS:
- Dates in the future beyond the configured tolerance

Every problem is reported at once so the form can show them together.
Validation NEVER silently fixes issues.
"""

from datetime import datetime, timedelta
from typing import Optional

from expense_tracker.config import AppSettings, get_settings
from expense_tracker.models.expense import (
    Approver,
    Currency,
    ExpenseDraft,
    ExpenseRecord,
    GeolocationFix,
    KnownCategory,
    ValidationIssue,
    ValidationResult,
    build_category,
)


REQUIRED_TEXT_FIELDS = {
    "details": "Other expense details are required.",
    "description_english": "English description is required.",
    "description_bangla": "Bangla description is required.",
    "paid_by": "Paid by is required.",
}


class ExpenseValidator:
    """Validates expense form input before it becomes an ExpenseRecord."""

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app

    def _validate_required(self, draft: ExpenseDraft) -> list[ValidationIssue]:
        """Stage 1: required fields and option lists."""
        issues = []

        if draft.category not in {c.value for c in KnownCategory}:
            issues.append(ValidationIssue(
                field="category",
                issue_type="missing" if not draft.category else "invalid_value",
                message="Expense type is required.",
                severity="error",
            ))
        elif draft.category == KnownCategory.EMPLOYEE_EXPENSES.value and not draft.employee_name:
            issues.append(ValidationIssue(
                field="employee_name",
                issue_type="missing",
                message="Employee Name is required.",
                severity="error",
            ))
        elif draft.category == KnownCategory.DOMAIN_PANEL_FUND.value and not draft.panel_name:
            issues.append(ValidationIssue(
                field="panel_name",
                issue_type="missing",
                message="Domain Panel Name is required.",
                severity="error",
            ))

        for field, message in REQUIRED_TEXT_FIELDS.items():
            if not getattr(draft, field):
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="missing",
                    message=message,
                    severity="error",
                ))

        if draft.amount is None:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Amount must be a number.",
                severity="error",
            ))
        elif not draft.amount.is_finite() or draft.amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be positive.",
                severity="error",
            ))

        if draft.currency not in {c.value for c in Currency}:
            issues.append(ValidationIssue(
                field="currency",
                issue_type="missing" if not draft.currency else "invalid_value",
                message="Currency is required.",
                severity="error",
            ))

        if draft.approved_by not in {a.value for a in Approver}:
            issues.append(ValidationIssue(
                field="approved_by",
                issue_type="missing" if not draft.approved_by else "invalid_value",
                message="Approver is required.",
                severity="error",
            ))

        if draft.date is None:
            issues.append(ValidationIssue(
                field="date",
                issue_type="missing",
                message="Date is required.",
                severity="error",
            ))

        return issues

    def _validate_semantic(self, draft: ExpenseDraft) -> list[ValidationIssue]:
        """Stage 2: sanity checks that only warn."""
        issues = []

        if draft.date is not None:
            tolerance = timedelta(days=self._settings.future_date_tolerance_days)
            now = datetime.now(draft.date.tzinfo)
            if draft.date > now + tolerance:
                issues.append(ValidationIssue(
                    field="date",
                    issue_type="future_date",
                    message=f"Expense date ({draft.date:%Y-%m-%d}) is in the future",
                    severity="warning",
                ))

        return issues

    def validate(self, draft: ExpenseDraft) -> ValidationResult:
        """Run both stages and collect every issue."""
        issues = self._validate_required(draft) + self._validate_semantic(draft)
        return ValidationResult(
            is_valid=not any(issue.severity == "error" for issue in issues),
            issues=issues,
        )

    def to_record(
        self,
        draft: ExpenseDraft,
        location: Optional[GeolocationFix] = None,
    ) -> ExpenseRecord:
        """
        Build an ExpenseRecord from a draft.

        Raises:
            ValueError: If the draft does not pass validation
        """
        result = self.validate(draft)
        if not result.is_valid:
            messages = "; ".join(
                issue.message for issue in result.issues if issue.severity == "error"
            )
            raise ValueError(f"Invalid expense: {messages}")

        return ExpenseRecord(
            category=build_category(draft.category, draft.employee_name, draft.panel_name),
            details=draft.details,
            amount=draft.amount,
            currency=draft.currency,
            description_english=draft.description_english,
            description_bangla=draft.description_bangla,
            date=draft.date,
            paid_by=draft.paid_by,
            approved_by=draft.approved_by,
            location=location,
        )

    @staticmethod
    def get_user_friendly_summary(result: ValidationResult) -> str:
        if result.is_valid and not result.issues:
            return "All details look good."
        lines = []
        for issue in result.issues:
            prefix = "Error" if issue.severity == "error" else "Warning"
            lines.append(f"{prefix}: {issue.message}")
        return "\n".join(lines)
