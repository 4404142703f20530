"""
Finance Data Models

These models define the schemas for everything the dashboard and the
add-transaction forms deal with:
1. Rows fetched from the categories/transactions tables
2. Drafts built by the forms before they are submitted
3. Aggregates computed for display

DESIGN DECISION: Money is Decimal end to end. Rows arriving from the
provider as floats or strings are coerced once, at the model boundary.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from storefront.models.account import utc_now


# =============================================================================
# ENUMS
# =============================================================================

class TransactionType(str, Enum):
    """Direction of money."""
    INCOME = "income"
    EXPENSE = "expense"


class InputMethod(str, Enum):
    """Provenance tag on a transaction."""
    MANUAL = "manual"
    VOICE = "voice"
    PHOTO = "photo"


DEFAULT_CATEGORY_COLOR = "#3B82F6"


# =============================================================================
# STORED ROWS
# =============================================================================

class Category(BaseModel):
    """A user-defined bucket for transactions."""

    model_config = ConfigDict(str_strip_whitespace=True)

    id: str
    user_id: str
    name: str = Field(..., min_length=1, max_length=100)
    type: TransactionType
    color: str = DEFAULT_CATEGORY_COLOR
    created_at: datetime = Field(default_factory=utc_now)


class Transaction(BaseModel):
    """
    A recorded income or expense.

    `category` is only populated when the row was fetched together
    with its category.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    id: str
    user_id: str
    category_id: Optional[str] = None
    amount: Decimal = Field(..., ge=0)
    description: Optional[str] = None
    type: TransactionType
    input_method: InputMethod = InputMethod.MANUAL
    receipt_image_url: Optional[str] = None
    transaction_date: date
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    category: Optional[Category] = None

    @property
    def signed_amount(self) -> Decimal:
        return self.amount if self.type == TransactionType.INCOME else -self.amount


# =============================================================================
# DRAFTS (form input before submission)
# =============================================================================

class CategoryDraft(BaseModel):
    """A category the user is about to create."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=100)
    type: TransactionType = TransactionType.INCOME
    color: str = Field(
        default=DEFAULT_CATEGORY_COLOR,
        pattern="^#[0-9A-Fa-f]{6}$"
    )


class TransactionDraft(BaseModel):
    """
    What the add-transaction form collected.

    Amount stays a raw string here so the validator can report
    "missing" and "not a number" separately instead of failing
    model construction.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    amount: str = ""
    description: str = ""
    type: TransactionType = TransactionType.INCOME
    category_id: Optional[str] = None
    input_method: InputMethod = InputMethod.MANUAL
    transaction_date: Optional[date] = None

    @field_validator('category_id')
    @classmethod
    def empty_category_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class VoiceDraft(BaseModel):
    """Fields guessed from a spoken transcript."""

    amount: Optional[str] = None
    type: Optional[TransactionType] = None
    description: str


# =============================================================================
# AGGREGATES
# =============================================================================

class DashboardStats(BaseModel):
    """Totals shown in the dashboard cards."""

    total_income: Decimal = Decimal("0")
    total_expenses: Decimal = Decimal("0")
    net_profit: Decimal = Decimal("0")
    transaction_count: int = Field(default=0, ge=0)


class DayBucket(BaseModel):
    """One point of the daily trend chart."""

    day: date
    label: str = Field(..., description="Display label, e.g. 'Oct 19'")
    income: Decimal = Decimal("0")
    expenses: Decimal = Decimal("0")
    profit: Decimal = Decimal("0")


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'too_large')"
    )
    message: str
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$"
    )


class ValidationResult(BaseModel):
    """Result of checking a form before it is submitted."""

    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_messages(self) -> list[str]:
        return [i.message for i in self.issues if i.severity == "error"]


class DashboardData(BaseModel):
    """Everything the dashboard page renders."""

    stats: DashboardStats = Field(default_factory=DashboardStats)
    recent: list[Transaction] = Field(default_factory=list)
    chart: list[DayBucket] = Field(default_factory=list)
    fetch_failed: bool = False
    chart_failed: bool = False
