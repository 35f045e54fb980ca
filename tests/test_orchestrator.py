"""Flow tests: in-memory storage, fake Gemini model, real PDF rendering."""

import asyncio
import json
from datetime import date, datetime
from decimal import Decimal

import pytest

from expense_tracker.agents import TranslationAssistant, TranslationError
from expense_tracker.config import AppSettings, GeminiSettings, ReportSettings
from expense_tracker.models.expense import ExpenseDraft, GeolocationFix
from expense_tracker.orchestrator import ExpenseReportFlow
from expense_tracker.reports import ReportGenerationError
from expense_tracker.services.storage import StorageError, StorageNotConfiguredError
from expense_tracker.validation import ExpenseValidator


@pytest.fixture
def make_flow(memory_storage, report_settings):
    def _make(storage=None, assistant=None, settings=None) -> ExpenseReportFlow:
        return ExpenseReportFlow(
            storage=storage or memory_storage(),
            assistant=assistant,
            validator=ExpenseValidator(settings=AppSettings()),
            report_settings=settings or report_settings,
        )

    return _make


def make_draft(**overrides) -> ExpenseDraft:
    fields = dict(
        category="License",
        details="cPanel license",
        amount=Decimal("15.00"),
        currency="USD",
        description_english="cPanel license for April",
        description_bangla="এপ্রিলের সিপ্যানেল লাইসেন্স",
        date=datetime(2024, 4, 1),
        paid_by="Rahim",
        approved_by="RAIYAN BASHAR",
    )
    fields.update(overrides)
    return ExpenseDraft(**fields)


class TestEntry:

    def test_new_expense_goes_first(self, make_flow, make_expense):
        flow = make_flow()
        existing = [make_expense()]

        records = flow.add_expense(existing, make_draft())

        assert len(records) == 2
        assert records[0].category_label == "License"
        assert records[1] is existing[0]
        assert len(existing) == 1

    def test_location_attached_to_new_expense(self, make_flow):
        location = GeolocationFix(latitude=23.81, longitude=90.41)

        [record] = make_flow().add_expense([], make_draft(), location=location)

        assert record.location == location

    def test_invalid_draft_leaves_list_alone(self, make_flow, make_expense):
        flow = make_flow()

        with pytest.raises(ValueError, match="Amount must be positive."):
            flow.add_expense([make_expense()], make_draft(amount=Decimal("0")))

    def test_validate_draft_reports_issues(self, make_flow):
        result = make_flow().validate_draft(make_draft(paid_by=""))
        assert not result.is_valid

    def test_update_bangla_description_touches_one_expense(self, make_flow, make_expense):
        first, second = make_expense(), make_expense()

        updated = make_flow().update_bangla_description([first, second], second.id, "নতুন বর্ণনা")

        assert updated[0] == first
        assert updated[1].description_bangla == "নতুন বর্ণনা"
        assert updated[1].id == second.id
        assert second.description_bangla != "নতুন বর্ণনা"

    def test_update_unknown_id_changes_nothing(self, make_flow, make_expense):
        records = [make_expense()]
        assert make_flow().update_bangla_description(records, "missing", "x") == records


class TestReport:

    def test_returns_pdf_and_filename(self, make_flow, make_expense, pdf_text):
        pdf_bytes, filename = make_flow().generate_report(
            [make_expense()], today=date(2024, 3, 5),
        )

        assert filename == "SNBD_Expense_Report_2024-03-05.pdf"
        assert "Expense For: VPS" in pdf_text(pdf_bytes)

    def test_filename_prefix_override(self, make_flow):
        _, filename = make_flow().generate_report([], filename_prefix="Admin", today=date(2024, 3, 5))
        assert filename == "Admin_Expense_Report_2024-03-05.pdf"

    def test_failure_is_reraised(self, make_flow, make_expense, tmp_path):
        flow = make_flow(settings=ReportSettings(bangla_font_path=str(tmp_path / "none.ttf")))

        with pytest.raises(ReportGenerationError, match="Could not generate PDF"):
            flow.generate_report([make_expense()])


class TestSave:

    def test_nothing_to_save(self, make_flow, memory_storage):
        storage = memory_storage()

        outcome = asyncio.run(make_flow(storage=storage).save_expenses([]))

        assert outcome.success
        assert outcome.count == 0
        assert outcome.message == "No expenses to save."
        assert storage.records == []

    def test_saves_every_expense(self, make_flow, memory_storage, make_expense):
        storage = memory_storage()
        records = [make_expense(), make_expense(), make_expense()]

        outcome = asyncio.run(make_flow(storage=storage).save_expenses(records))

        assert outcome.success
        assert outcome.count == 3
        assert outcome.message == "Successfully saved 3 expense(s)."
        assert storage.records == records

    def test_partial_failure_reports_progress(self, make_flow, memory_storage, make_expense):
        storage = memory_storage(fail_after=1)
        records = [make_expense(), make_expense(), make_expense()]

        outcome = asyncio.run(make_flow(storage=storage).save_expenses(records))

        assert not outcome.success
        assert outcome.error_kind == "storage"
        assert outcome.count == 1
        assert "Server error: backend unavailable" in outcome.message
        assert "1 of 3 expense(s) were saved before the error." in outcome.message

    def test_missing_configuration(self, make_flow, memory_storage, make_expense):
        storage = memory_storage(
            fail_after=0,
            error=StorageNotConfiguredError("Server configuration error: spreadsheet ID missing"),
        )

        outcome = asyncio.run(make_flow(storage=storage).save_expenses([make_expense()]))

        assert not outcome.success
        assert outcome.error_kind == "configuration"
        assert outcome.count == 0
        assert outcome.message == "Server configuration error: spreadsheet ID missing"

    def test_unexpected_error_is_a_storage_failure(self, make_flow, memory_storage, make_expense):
        storage = memory_storage(fail_after=0, error=RuntimeError("socket closed"))

        outcome = asyncio.run(make_flow(storage=storage).save_expenses([make_expense()]))

        assert outcome.error_kind == "storage"
        assert "socket closed" in outcome.message


class TestFetch:

    def test_fetch_returns_newest_first(self, make_flow, memory_storage, make_expense):
        storage = memory_storage()
        older = make_expense(date=datetime(2024, 1, 1))
        newer = make_expense(date=datetime(2024, 6, 1))
        storage.records = [older, newer]

        assert asyncio.run(make_flow(storage=storage).fetch_expenses()) == [newer, older]

    def test_fetch_failure_propagates(self, make_flow, memory_storage):
        storage = memory_storage(fail_after=0)

        with pytest.raises(StorageError):
            asyncio.run(make_flow(storage=storage).fetch_expenses())


class TestSuggestTranslation:

    def test_without_assistant(self, make_flow, make_expense):
        flow = make_flow()

        assert not flow.has_assistant
        with pytest.raises(TranslationError, match="not configured"):
            asyncio.run(flow.suggest_translation(make_expense()))

    def test_uses_fallback_location(self, make_flow, make_expense, gemini_model):
        model = gemini_model(reply=json.dumps({"optimizedTranslation": "খরচ", "reasoning": "ok"}))
        assistant = TranslationAssistant(settings=GeminiSettings(api_key="test-key"), model=model)
        flow = make_flow(assistant=assistant)

        suggestion = asyncio.run(
            flow.suggest_translation(
                make_expense(),
                fallback_location=GeolocationFix(latitude=23.8, longitude=90.4),
            )
        )

        assert suggestion.optimized_translation == "খরচ"
        assert "Expense Location: Latitude: 23.8, Longitude: 90.4" in model.prompts[0]

    def test_blank_bangla_description_is_not_sent(self, make_flow, make_expense, gemini_model):
        model = gemini_model(reply=json.dumps({"optimizedTranslation": "খরচ"}))
        assistant = TranslationAssistant(settings=GeminiSettings(api_key="test-key"), model=model)

        with pytest.raises(TranslationError, match="No Bangla description provided to optimize."):
            asyncio.run(
                make_flow(assistant=assistant).suggest_translation(
                    make_expense(description_bangla="")
                )
            )
        assert model.prompts == []

    def test_failure_is_reraised(self, make_flow, make_expense, gemini_model):
        model = gemini_model(error=RuntimeError("quota exceeded"))
        assistant = TranslationAssistant(settings=GeminiSettings(api_key="test-key"), model=model)

        with pytest.raises(TranslationError):
            asyncio.run(make_flow(assistant=assistant).suggest_translation(make_expense()))
