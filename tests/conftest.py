"""
Shared fixtures.

No real API calls in tests: Google Sheets and Gemini are replaced by the
small fakes below.
"""

from datetime import datetime
from decimal import Decimal
from io import BytesIO
from typing import Optional

import pytest
from pypdf import PdfReader

from expense_tracker.config import ReportSettings
from expense_tracker.models.expense import (
    ExpenseRecord,
    GeneralCategory,
)
from expense_tracker.services.storage import ExpenseStorageInterface, StorageError


class InMemoryExpenseStorage(ExpenseStorageInterface):
    """Storage double that keeps expenses in a list."""

    def __init__(self, fail_after: Optional[int] = None, error: Optional[Exception] = None):
        self.records: list[ExpenseRecord] = []
        self._fail_after = fail_after
        self._error = error or StorageError("backend unavailable")

    async def append_expense(self, record: ExpenseRecord) -> bool:
        if self._fail_after is not None and len(self.records) >= self._fail_after:
            raise self._error
        self.records.append(record)
        return True

    async def list_expenses(self) -> list[ExpenseRecord]:
        if self._fail_after is not None:
            raise self._error
        return sorted(self.records, key=lambda r: r.date, reverse=True)


class FakeGeminiResponse:
    def __init__(self, text: str):
        self.text = text


class FakeGeminiModel:
    """Records prompts and replies with canned text (or raises)."""

    def __init__(self, reply: str = "", error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.prompts: list[str] = []

    async def generate_content_async(self, prompt: str) -> FakeGeminiResponse:
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return FakeGeminiResponse(self.reply)


@pytest.fixture
def report_settings() -> ReportSettings:
    return ReportSettings(company_name="SNBD HOST", filename_prefix="SNBD", bangla_font_path=None)


@pytest.fixture
def make_expense():
    """Factory for valid expenses with overridable fields."""

    def _make(**overrides) -> ExpenseRecord:
        fields = dict(
            category=GeneralCategory(name="VPS"),
            details="Monthly VPS renewal",
            amount=Decimal("25.00"),
            currency="USD",
            description_english="VPS hosting for March",
            description_bangla="মার্চের ভিপিএস হোস্টিং",
            date=datetime(2024, 3, 5, 10, 30),
            paid_by="Rahim",
            approved_by="YEAMIN ADIB",
        )
        fields.update(overrides)
        return ExpenseRecord(**fields)

    return _make


@pytest.fixture
def memory_storage():
    """The in-memory storage class, so tests can pick failure modes."""
    return InMemoryExpenseStorage


@pytest.fixture
def gemini_model():
    """The fake Gemini model class."""
    return FakeGeminiModel


@pytest.fixture
def read_pdf():
    def _read(pdf_bytes: bytes) -> PdfReader:
        return PdfReader(BytesIO(pdf_bytes))

    return _read


@pytest.fixture
def pdf_text(read_pdf):
    """All text of a PDF, page by page."""

    def _text(pdf_bytes: bytes) -> str:
        return "\n".join(page.extract_text() for page in read_pdf(pdf_bytes).pages)

    return _text
