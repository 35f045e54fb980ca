"""Tests for expense form validation."""

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from expense_tracker.config import AppSettings
from expense_tracker.models.expense import (
    DomainPanelFund,
    EmployeeExpenses,
    ExpenseDraft,
    GeneralCategory,
    GeolocationFix,
)
from expense_tracker.validation import ExpenseValidator


@pytest.fixture
def validator() -> ExpenseValidator:
    return ExpenseValidator(settings=AppSettings(future_date_tolerance_days=1))


def make_draft(**overrides) -> ExpenseDraft:
    fields = dict(
        category="VPS",
        details="Monthly VPS renewal",
        amount=Decimal("25.00"),
        currency="USD",
        description_english="VPS hosting for March",
        description_bangla="মার্চের ভিপিএস হোস্টিং",
        date=datetime(2024, 3, 5),
        paid_by="Rahim",
        approved_by="YEAMIN ADIB",
    )
    fields.update(overrides)
    return ExpenseDraft(**fields)


def error_messages(result) -> list[str]:
    return [issue.message for issue in result.issues if issue.severity == "error"]


class TestRequiredFields:

    def test_complete_draft_is_valid(self, validator):
        result = validator.validate(make_draft())

        assert result.is_valid
        assert result.issues == []

    def test_empty_draft_reports_every_problem(self, validator):
        result = validator.validate(ExpenseDraft())

        assert not result.is_valid
        assert error_messages(result) == [
            "Expense type is required.",
            "Other expense details are required.",
            "English description is required.",
            "Bangla description is required.",
            "Paid by is required.",
            "Amount must be a number.",
            "Currency is required.",
            "Approver is required.",
            "Date is required.",
        ]

    def test_employee_expenses_need_employee_name(self, validator):
        result = validator.validate(make_draft(category="Employee Expenses"))

        assert error_messages(result) == ["Employee Name is required."]

    def test_blank_employee_name_is_missing(self, validator):
        result = validator.validate(
            make_draft(category="Employee Expenses", employee_name="   ")
        )

        assert error_messages(result) == ["Employee Name is required."]

    def test_domain_panel_fund_needs_panel_name(self, validator):
        result = validator.validate(make_draft(category="Domain Panel Fund"))

        assert error_messages(result) == ["Domain Panel Name is required."]

    def test_unknown_category_rejected(self, validator):
        result = validator.validate(make_draft(category="Snacks"))

        assert result.issues[0].issue_type == "invalid_value"
        assert error_messages(result) == ["Expense type is required."]

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5")])
    def test_amount_must_be_positive(self, validator, amount):
        result = validator.validate(make_draft(amount=amount))

        assert error_messages(result) == ["Amount must be positive."]

    def test_unknown_currency_rejected(self, validator):
        result = validator.validate(make_draft(currency="GBP"))

        assert error_messages(result) == ["Currency is required."]

    def test_unknown_approver_rejected(self, validator):
        result = validator.validate(make_draft(approved_by="Someone Else"))

        assert error_messages(result) == ["Approver is required."]


class TestSanityChecks:

    def test_far_future_date_warns_but_stays_valid(self, validator):
        result = validator.validate(make_draft(date=datetime.now() + timedelta(days=30)))

        assert result.is_valid
        assert len(result.warnings) == 1
        assert "in the future" in result.warnings[0]

    def test_date_within_tolerance_is_fine(self, validator):
        result = validator.validate(make_draft(date=datetime.now() + timedelta(hours=2)))

        assert result.warnings == []


class TestToRecord:

    def test_builds_general_category(self, validator):
        record = validator.to_record(make_draft())

        assert record.category == GeneralCategory(name="VPS")
        assert record.amount == Decimal("25.00")
        assert record.location is None

    def test_builds_employee_variant(self, validator):
        record = validator.to_record(
            make_draft(category="Employee Expenses", employee_name="Karim Uddin")
        )

        assert isinstance(record.category, EmployeeExpenses)
        assert record.employee_name == "Karim Uddin"
        assert record.panel_name is None

    def test_ignores_sub_field_of_other_category(self, validator):
        record = validator.to_record(
            make_draft(
                category="Domain Panel Fund",
                panel_name="ResellerClub",
                employee_name="Karim Uddin",
            )
        )

        assert record.category == DomainPanelFund(panel_name="ResellerClub")
        assert record.employee_name is None

    def test_attaches_location(self, validator):
        location = GeolocationFix(latitude=23.81, longitude=90.41)

        record = validator.to_record(make_draft(), location=location)

        assert record.location == location

    def test_invalid_draft_raises_with_all_messages(self, validator):
        with pytest.raises(ValueError) as exc_info:
            validator.to_record(make_draft(paid_by="", currency=""))

        message = str(exc_info.value)
        assert message.startswith("Invalid expense:")
        assert "Paid by is required." in message
        assert "Currency is required." in message

    def test_each_record_gets_fresh_id(self, validator):
        first = validator.to_record(make_draft())
        second = validator.to_record(make_draft())

        assert first.id != second.id


class TestSummary:

    def test_clean_summary(self, validator):
        result = validator.validate(make_draft())

        assert ExpenseValidator.get_user_friendly_summary(result) == "All details look good."

    def test_summary_lists_errors(self, validator):
        result = validator.validate(make_draft(paid_by=""))

        assert ExpenseValidator.get_user_friendly_summary(result) == "Error: Paid by is required."
