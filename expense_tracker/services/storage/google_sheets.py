"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is used as the storage backend because:
1. The approvers can view and export expenses directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Not suitable for high-volume data (a small business is fine)
- No server-side ordering (we sort in Python)
- Every cell comes back as a string, so reads must tolerate bad values

The implementation follows the abstract interface, so the store can be
swapped without changing the flows.
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional
from uuid import uuid4

import gspread
from google.oauth2.service_account import Credentials
from pydantic import ValidationError

from expense_tracker.audit import AuditLogger
from expense_tracker.config import GoogleSheetsSettings, get_settings
from expense_tracker.models.expense import (
    TAGGED_CATEGORY_LABELS,
    ExpenseCategory,
    ExpenseRecord,
    GeolocationFix,
    build_category,
)
from expense_tracker.services.storage.interface import (
    ConnectionError,
    ExpenseStorageInterface,
    StorageError,
    StorageNotConfiguredError,
)


# Column mappings for the Expenses sheet
EXPENSE_COLUMNS = [
    "id",
    "category",
    "employee_name",
    "panel_name",
    "details",
    "amount",
    "currency",
    "description_english",
    "description_bangla",
    "date",
    "paid_by",
    "approved_by",
    "latitude",
    "longitude",
]

MISSING_TEXT = "N/A"
MISSING_DETAILS = "No details"


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Settings are read on first use so the app can start (and show a clear
    configuration error) even when storage is not set up.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings

    @property
    def settings(self) -> GoogleSheetsSettings:
        if self._settings is None:
            try:
                self._settings = get_settings().google_sheets
            except ValidationError as e:
                raise StorageNotConfiguredError(
                    "Server configuration error: Google Sheets spreadsheet ID or "
                    "credentials path is missing. Set GOOGLE_SHEETS_SPREADSHEET_ID and "
                    "GOOGLE_SHEETS_CREDENTIALS_PATH in the server environment."
                ) from e
        return self._settings

    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            settings = self.settings
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise StorageNotConfiguredError(
                    f"Google credentials file not found: {settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(self.settings.spreadsheet_id)
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self.settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_expenses_sheet(self) -> gspread.Worksheet:
        """Get or create the Expenses worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self.settings.expenses_sheet_name)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=self.settings.expenses_sheet_name,
                rows=1000,
                cols=len(EXPENSE_COLUMNS),
            )
            sheet.append_row(EXPENSE_COLUMNS)
        return sheet


class GoogleSheetsExpenseStorage(ExpenseStorageInterface):
    """
    Google Sheets implementation of expense storage.

    Expenses are stored as rows in a worksheet with one expense per row.
    """

    def __init__(
        self,
        client: Optional[GoogleSheetsClient] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._client = client or GoogleSheetsClient()
        self._audit_logger = audit_logger or AuditLogger()

    def _record_to_row(self, record: ExpenseRecord) -> list:
        """Convert an ExpenseRecord to a spreadsheet row."""
        return [
            record.id,
            record.category_label,
            record.employee_name or "",
            record.panel_name or "",
            record.details,
            str(record.amount),
            record.currency,
            record.description_english,
            record.description_bangla,
            record.date.isoformat(),
            record.paid_by,
            record.approved_by,
            str(record.location.latitude) if record.location else "",
            str(record.location.longitude) if record.location else "",
        ]

    def _row_to_record(self, row: list) -> ExpenseRecord:
        """
        Convert a spreadsheet row to an ExpenseRecord.

        Unreadable dates become "now" and unreadable amounts become zero;
        both substitutions are logged.
        """
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index].strip() if row[index] else default
            except IndexError:
                return default

        expense_id = safe_get(0) or uuid4().hex

        category = self._read_category(
            expense_id, safe_get(1, MISSING_TEXT), safe_get(2), safe_get(3),
        )

        stored_amount = safe_get(5)
        try:
            amount = Decimal(stored_amount)
            if not amount.is_finite() or amount < 0:
                raise InvalidOperation(stored_amount)
        except InvalidOperation:
            self._audit_logger.log_stored_value_replaced(
                expense_id, "amount", stored_amount, "0",
            )
            amount = Decimal("0")

        stored_date = safe_get(9)
        try:
            expense_date = datetime.fromisoformat(stored_date)
            if expense_date.tzinfo is not None:
                # Keep every date naive local time so they stay comparable
                expense_date = expense_date.astimezone().replace(tzinfo=None)
        except ValueError:
            expense_date = datetime.now()
            self._audit_logger.log_stored_value_replaced(
                expense_id, "date", stored_date, expense_date.isoformat(),
            )

        location = None
        if safe_get(12) and safe_get(13):
            try:
                location = GeolocationFix(
                    latitude=float(safe_get(12)),
                    longitude=float(safe_get(13)),
                )
            except (ValueError, ValidationError):
                location = None

        return ExpenseRecord(
            id=expense_id,
            category=category,
            details=safe_get(4, MISSING_DETAILS),
            amount=amount,
            currency=safe_get(6, MISSING_TEXT),
            description_english=safe_get(7, MISSING_TEXT),
            description_bangla=safe_get(8, MISSING_TEXT),
            date=expense_date,
            paid_by=safe_get(10, MISSING_TEXT),
            approved_by=safe_get(11, MISSING_TEXT),
            location=location,
        )

    def _read_category(
        self,
        expense_id: str,
        label: str,
        employee_name: str,
        panel_name: str,
    ) -> ExpenseCategory:
        """
        Rebuild the stored category.

        A tagged category whose sub-field is missing or unreadable keeps its
        label with "N/A" as the sub-field. Any other unreadable label is
        replaced by "N/A".
        """
        try:
            return build_category(label, employee_name, panel_name)
        except ValueError:
            pass

        if label in TAGGED_CATEGORY_LABELS:
            self._audit_logger.log_stored_value_replaced(
                expense_id, "category", f"{label}: {employee_name or panel_name}", MISSING_TEXT,
            )
            return build_category(label, MISSING_TEXT, MISSING_TEXT)

        self._audit_logger.log_stored_value_replaced(
            expense_id, "category", label, MISSING_TEXT,
        )
        return build_category(MISSING_TEXT)

    async def append_expense(self, record: ExpenseRecord) -> bool:
        """Append an expense row to Google Sheets."""
        sheet = self._get_sheet()
        try:
            sheet.append_row(self._record_to_row(record), value_input_option="RAW")
            return True
        except Exception as e:
            raise StorageError(f"Failed to save expense: {e}")

    async def list_expenses(self) -> list[ExpenseRecord]:
        """List all expenses, newest first."""
        sheet = self._get_sheet()
        try:
            all_rows = sheet.get_all_values()[1:]  # Skip header
        except Exception as e:
            raise StorageError(f"Failed to list expenses: {e}")

        records = []
        for row in all_rows:
            if not row or not any(cell.strip() for cell in row):  # Skip empty rows
                continue
            try:
                records.append(self._row_to_record(row))
            except ValidationError as e:
                self._audit_logger.log_error(
                    error_type="malformed_expense_row",
                    error_message=str(e),
                    details={"expense_id": row[0]},
                )

        # Sort by date descending (newest first)
        records.sort(key=lambda r: r.date, reverse=True)
        return records

    def _get_sheet(self) -> gspread.Worksheet:
        try:
            return self._client.get_expenses_sheet()
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to open expenses sheet: {e}")
