"""
Core Data Models for the Expense Tracker

These models define the schemas for every expense flowing through the system:
the form, the table, the PDF report and the remote store all speak ExpenseRecord.

DESIGN DECISION: The expense category is a tagged variant.
Employee Expenses carry an employee name, Domain Panel Fund carries a panel
name, and every other category carries nothing. A record with an employee
name on a VPS expense simply cannot be constructed.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Optional, Union
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# =============================================================================
# ENUMS - Known option lists (stored data may still hold free text)
# =============================================================================

class KnownCategory(str, Enum):
    """Categories offered by the expense form."""
    VPS = "VPS"
    LICENSE = "License"
    EMPLOYEE_EXPENSES = "Employee Expenses"
    DOMAIN_PANEL_FUND = "Domain Panel Fund"


class Currency(str, Enum):
    """Currencies offered by the expense form."""
    USD = "USD"
    BDT = "BDT"
    EURO = "EURO"


class Approver(str, Enum):
    """People allowed to approve an expense."""
    YEAMIN_ADIB = "YEAMIN ADIB"
    RAIYAN_BASHAR = "RAIYAN BASHAR"


TAGGED_CATEGORY_LABELS = {
    KnownCategory.EMPLOYEE_EXPENSES.value,
    KnownCategory.DOMAIN_PANEL_FUND.value,
}


# =============================================================================
# CATEGORY VARIANTS
# =============================================================================

class EmployeeExpenses(BaseModel):
    """An expense paid on behalf of an employee."""
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    kind: Literal["employee_expenses"] = "employee_expenses"
    employee_name: str = Field(..., min_length=1, max_length=200)

    @property
    def label(self) -> str:
        return KnownCategory.EMPLOYEE_EXPENSES.value


class DomainPanelFund(BaseModel):
    """Money moved into a domain reseller panel."""
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    kind: Literal["domain_panel_fund"] = "domain_panel_fund"
    panel_name: str = Field(..., min_length=1, max_length=200)

    @property
    def label(self) -> str:
        return KnownCategory.DOMAIN_PANEL_FUND.value


class GeneralCategory(BaseModel):
    """Any category without category-specific data (VPS, License, free text)."""
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    kind: Literal["general"] = "general"
    name: str = Field(..., min_length=1, max_length=200)

    @field_validator("name")
    @classmethod
    def reject_tagged_labels(cls, v: str) -> str:
        """Tagged categories must carry their sub-field."""
        if v in TAGGED_CATEGORY_LABELS:
            raise ValueError(
                f"'{v}' requires its own category data and cannot be a general category"
            )
        return v

    @property
    def label(self) -> str:
        return self.name


ExpenseCategory = Annotated[
    Union[EmployeeExpenses, DomainPanelFund, GeneralCategory],
    Field(discriminator="kind"),
]


def build_category(
    label: str,
    employee_name: Optional[str] = None,
    panel_name: Optional[str] = None,
) -> Union[EmployeeExpenses, DomainPanelFund, GeneralCategory]:
    """
    Create the category variant matching a label.

    Sub-fields that do not belong to the label are ignored.

    Raises:
        ValueError: If a tagged label is missing its sub-field
    """
    label = (label or "").strip()
    if label == KnownCategory.EMPLOYEE_EXPENSES.value:
        if not employee_name or not employee_name.strip():
            raise ValueError("Employee Name is required.")
        return EmployeeExpenses(employee_name=employee_name)
    if label == KnownCategory.DOMAIN_PANEL_FUND.value:
        if not panel_name or not panel_name.strip():
            raise ValueError("Domain Panel Name is required.")
        return DomainPanelFund(panel_name=panel_name)
    return GeneralCategory(name=label)


# =============================================================================
# CORE MODELS
# =============================================================================

class GeolocationFix(BaseModel):
    """Where an expense or a report was produced."""

    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    city: Optional[str] = None
    country: Optional[str] = None

    def describe(self) -> str:
        return f"Latitude: {self.latitude}, Longitude: {self.longitude}"


class ExpenseRecord(BaseModel):
    """
    One submitted outlay.

    The amount is only required to be non-negative here because records read
    back from storage fall back to zero when the stored value is unreadable.
    New expenses go through ExpenseValidator, which requires a positive amount.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(
        default_factory=lambda: uuid4().hex,
        description="Unique expense ID"
    )
    category: ExpenseCategory
    details: str = Field(
        default="",
        description="Free-text details about the expense"
    )
    amount: Annotated[
        Decimal,
        Field(ge=0, description="Amount in the expense currency")
    ]
    currency: str = Field(
        ...,
        min_length=1,
        description="Currency code; stored data may hold free text"
    )
    description_english: str = ""
    description_bangla: str = ""
    date: datetime = Field(
        ...,
        description="When the expense was made"
    )
    paid_by: str = ""
    approved_by: str = ""
    location: Optional[GeolocationFix] = None

    @property
    def category_label(self) -> str:
        return self.category.label

    @property
    def employee_name(self) -> Optional[str]:
        if isinstance(self.category, EmployeeExpenses):
            return self.category.employee_name
        return None

    @property
    def panel_name(self) -> Optional[str]:
        if isinstance(self.category, DomainPanelFund):
            return self.category.panel_name
        return None


class ExpenseDraft(BaseModel):
    """
    Raw form input before validation.

    Everything is loosely typed so the validator can report every problem
    at once instead of failing on the first one.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    category: str = ""
    employee_name: Optional[str] = None
    panel_name: Optional[str] = None
    details: str = ""
    amount: Optional[Decimal] = None
    currency: str = ""
    description_english: str = ""
    description_bangla: str = ""
    date: Optional[datetime] = None
    paid_by: str = ""
    approved_by: str = ""


# =============================================================================
# SERVICE RESULT MODELS
# =============================================================================

class SaveOutcome(BaseModel):
    """Result of sending expenses to the remote store."""

    success: bool
    message: str
    count: int = Field(default=0, ge=0)
    error_kind: Optional[Literal["configuration", "storage"]] = None


class TranslationRequest(BaseModel):
    """Input for the tax-optimization translation assistant."""

    details: str
    current_translation: Optional[str] = None
    location_description: str


class TranslationSuggestion(BaseModel):
    """Suggested Bangla wording and why it helps with tax compliance."""

    optimized_translation: str = Field(..., min_length=1)
    reasoning: str = ""


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'suspicious_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """Result of validating an expense draft."""

    validated_at: datetime = Field(
        default_factory=datetime.utcnow
    )
    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "warning"]
