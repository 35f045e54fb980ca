"""
Expense Report Layout Engine

Turns a list of expenses into a printable, black-and-white PDF.

The layout is a single top-to-bottom text flow:
1. Title, generation timestamp and (optional) location
2. One block per expense: labeled lines plus three word-wrapped text blocks
3. A signature block ("Authorized by ...") with a rule to sign on

A PageWriter owns the vertical cursor. Every line asks it for space first;
when the cursor falls below the bottom margin plus a buffer, the writer
starts a new page and resets the cursor to the top margin.

DESIGN DECISION: Headings are not kept together with their first wrapped
line. A "Details:" heading can end one page while its text starts the next.
"""

import hashlib
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from io import BytesIO
from pathlib import Path
from typing import Optional, Sequence

import structlog
from reportlab.lib.pagesizes import A4
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from expense_tracker.config import ReportSettings, get_settings
from expense_tracker.models.expense import ExpenseRecord, GeolocationFix


logger = structlog.get_logger(__name__)


# Page geometry (points; 72 pt = 1 inch)
PAGE_SIZE = A4
MARGIN_TOP = 72
MARGIN_BOTTOM = 72
MARGIN_LEFT = 72
MARGIN_RIGHT = 72

# Typography
FONT_NAME = "Helvetica"
FONT_SIZE = 10
TITLE_FONT_SIZE = 20
META_FONT_SIZE = FONT_SIZE - 2
LINE_SPACING = 15
META_LINE_SPACING = META_FONT_SIZE + 5
SECTION_SPACING = 20
INDENT = 10
WRAP_INSET = 20

# Pagination
MIN_SPACE_BUFFER = 50
SIGNATURE_BLOCK_HEIGHT = 50
SIGNATURE_RULE_LENGTH = 200

BANGLA_FONT_NAME = "ExpenseReportBangla"


class ReportGenerationError(Exception):
    """The report could not be produced. No partial document exists."""
    pass


def wrap_text(
    text: str,
    max_width: float,
    font_name: str = FONT_NAME,
    font_size: float = FONT_SIZE,
) -> list[str]:
    """
    Greedily pack words into lines no wider than max_width.

    Each newline in the input starts a new paragraph. A word that is wider
    than max_width on its own gets a line to itself. Empty input yields a
    single blank line, never zero lines.
    """
    lines: list[str] = []
    for paragraph in (text or "").splitlines() or [""]:
        current = ""
        for word in paragraph.split():
            candidate = f"{current} {word}" if current else word
            if not current or stringWidth(candidate, font_name, font_size) <= max_width:
                current = candidate
            else:
                lines.append(current)
                current = word
        lines.append(current)
    return lines


class PageWriter:
    """
    Cursor over a reportlab canvas.

    Tracks the next writable baseline (y, measured from the bottom of the
    page as PDF does) and how many pages have been started.
    """

    def __init__(
        self,
        pdf_canvas: canvas.Canvas,
        page_size: tuple[float, float] = PAGE_SIZE,
        margin_top: float = MARGIN_TOP,
        margin_bottom: float = MARGIN_BOTTOM,
        margin_left: float = MARGIN_LEFT,
        margin_right: float = MARGIN_RIGHT,
        min_space: float = MIN_SPACE_BUFFER,
    ):
        self.canvas = pdf_canvas
        self.width, self.height = page_size
        self.margin_top = margin_top
        self.margin_bottom = margin_bottom
        self.margin_left = margin_left
        self.margin_right = margin_right
        self.min_space = min_space
        self.page_count = 1
        self.y = self.top

    @property
    def top(self) -> float:
        return self.height - self.margin_top

    @property
    def content_width(self) -> float:
        return self.width - self.margin_left - self.margin_right

    @property
    def content_height(self) -> float:
        return self.height - self.margin_top - self.margin_bottom

    @property
    def remaining_space(self) -> float:
        return self.y - self.margin_bottom

    def new_page(self) -> None:
        self.canvas.showPage()
        self.page_count += 1
        self.y = self.top

    def ensure_space(self, minimum: Optional[float] = None) -> bool:
        """
        Start a new page if less than `minimum` points remain.

        Returns True if a new page was started.
        """
        minimum = self.min_space if minimum is None else minimum
        if self.remaining_space < minimum:
            self.new_page()
            return True
        return False

    def write_line(
        self,
        text: str,
        font_name: str = FONT_NAME,
        font_size: float = FONT_SIZE,
        indent: float = 0,
        advance: float = LINE_SPACING,
        check_space: bool = True,
    ) -> None:
        if check_space:
            self.ensure_space()
        # Font state does not survive showPage(), so set it for every line
        self.canvas.setFont(font_name, font_size)
        self.canvas.drawString(self.margin_left + indent, self.y, text)
        self.y -= advance

    def skip(self, amount: float) -> None:
        self.y -= amount

    def draw_rule(self, length: float, thickness: float = 1) -> None:
        self.canvas.setLineWidth(thickness)
        self.canvas.line(self.margin_left, self.y, self.margin_left + length, self.y)


def write_header(
    writer: PageWriter,
    company_name: str,
    generated_at: datetime,
    location: Optional[GeolocationFix] = None,
) -> None:
    """Title, timestamp and optional location line."""
    writer.write_line(
        f"{company_name} Expense Report",
        font_size=TITLE_FONT_SIZE,
        advance=TITLE_FONT_SIZE + SECTION_SPACING / 2,
    )
    writer.write_line(
        f"Generated on: {generated_at.strftime('%Y-%m-%d %H:%M:%S')}",
        font_size=META_FONT_SIZE,
        advance=META_LINE_SPACING,
    )
    if location is not None:
        writer.write_line(
            f"Location: Lat {location.latitude:.4f}, Lon {location.longitude:.4f}",
            font_size=META_FONT_SIZE,
            advance=META_LINE_SPACING,
        )
    writer.skip(SECTION_SPACING)


def write_text_block(
    writer: PageWriter,
    heading: str,
    text: str,
    font_name: str = FONT_NAME,
) -> None:
    """A heading line followed by the wrapped, indented text."""
    lines = wrap_text(text, writer.content_width - WRAP_INSET, font_name, FONT_SIZE)
    writer.write_line(heading)
    for line in lines:
        writer.write_line(line, font_name=font_name, indent=INDENT)


def write_expense(
    writer: PageWriter,
    record: ExpenseRecord,
    localized_font: str = FONT_NAME,
) -> None:
    """Emit one expense block."""
    writer.write_line(f"Expense For: {record.category_label}")
    if record.employee_name:
        writer.write_line(f"Employee Name: {record.employee_name}", indent=INDENT)
    if record.panel_name:
        writer.write_line(f"Domain Panel: {record.panel_name}", indent=INDENT)
    writer.write_line(f"Amount: {format_amount(record)}")
    writer.write_line(f"Date: {record.date.strftime('%Y-%m-%d')}")
    writer.write_line(f"Paid By: {record.paid_by}")
    writer.write_line(f"Approved By: {record.approved_by}")

    write_text_block(writer, "Details:", record.details)
    write_text_block(writer, "Desc (EN):", record.description_english)
    write_text_block(writer, "Desc (BN):", record.description_bangla, font_name=localized_font)

    writer.skip(SECTION_SPACING / 2)


def write_signature_block(writer: PageWriter, company_name: str) -> None:
    """
    Closing authorization line and a rule to sign on.

    Goes at the top of a fresh page if the current one is nearly full,
    otherwise straight after the half-section gap that closes the last
    expense.
    """
    if writer.remaining_space < SIGNATURE_BLOCK_HEIGHT:
        writer.new_page()
    writer.write_line(f"Authorized by {company_name}", check_space=False)
    writer.draw_rule(SIGNATURE_RULE_LENGTH)


def format_money(amount: Decimal) -> str:
    """Two decimals, halves rounded away from zero (0.125 -> 0.13)."""
    return str(amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def format_amount(record: ExpenseRecord) -> str:
    return f"{format_money(record.amount)} {record.currency}"


def suggest_report_filename(prefix: str, today: Optional[date] = None) -> str:
    """<Prefix>_Expense_Report_<YYYY-MM-DD>.pdf"""
    today = today or date.today()
    return f"{prefix}_Expense_Report_{today.isoformat()}.pdf"


def _register_localized_font(font_path: str) -> str:
    """
    Register the TrueType font at font_path and return its registered name.

    Each resolved path gets its own name, so a different path is always
    loaded from disk rather than served from an earlier registration.
    """
    resolved = str(Path(font_path).resolve())
    digest = hashlib.sha1(resolved.encode("utf-8")).hexdigest()[:12]
    font_name = f"{BANGLA_FONT_NAME}-{digest}"
    if font_name not in pdfmetrics.getRegisteredFontNames():
        pdfmetrics.registerFont(TTFont(font_name, resolved))
    return font_name


def render_expense_report(
    records: Sequence[ExpenseRecord],
    location: Optional[GeolocationFix] = None,
    settings: Optional[ReportSettings] = None,
    generated_at: Optional[datetime] = None,
) -> bytes:
    """
    Render the expense report as PDF bytes.

    Works for an empty list: the result then holds just the title,
    timestamp and signature block.

    Raises:
        ReportGenerationError: If fonts cannot be loaded or measured, or the
            document cannot be drawn or serialized
    """
    settings = settings or get_settings().report
    generated_at = generated_at or datetime.now()

    try:
        localized_font = FONT_NAME
        if settings.bangla_font_path:
            localized_font = _register_localized_font(settings.bangla_font_path)

        buffer = BytesIO()
        pdf_canvas = canvas.Canvas(buffer, pagesize=PAGE_SIZE)
        pdf_canvas.setTitle(f"{settings.company_name} Expense Report")
        pdf_canvas.setAuthor(settings.company_name)

        writer = PageWriter(pdf_canvas)
        write_header(writer, settings.company_name, generated_at, location)
        for record in records:
            write_expense(writer, record, localized_font=localized_font)
        write_signature_block(writer, settings.company_name)

        pdf_canvas.save()
    except Exception as e:
        raise ReportGenerationError(f"Could not generate PDF: {e}") from e

    logger.debug(
        "report_rendered",
        expense_count=len(records),
        page_count=writer.page_count,
    )
    return buffer.getvalue()
