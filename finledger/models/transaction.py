"""
Core Ledger Models for finledger

These models define the strict schemas for ledger data and for the
summaries derived from it. They are designed to:
1. Enforce amount/type/category rules at construction
2. Serialize to exactly the persisted JSON shape (camelCase keys)
3. Stay immutable once created

DESIGN DECISION: Amounts are plain floats. Totals are produced by float
addition and are never rounded, so existing totals do not shift.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# ENUMS & VOCABULARIES
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a ledger entry."""
    INCOME = "income"
    EXPENSE = "expense"


# Categories offered by the entry form. Others are accepted with a warning.
INCOME_CATEGORIES = ("Salary", "Freelance", "Investments", "Gift", "Other")
EXPENSE_CATEGORIES = (
    "Food",
    "Transport",
    "Entertainment",
    "Bills",
    "Shopping",
    "Rent",
    "Education",
    "Health",
    "Other",
)


def categories_for(transaction_type: TransactionType) -> tuple[str, ...]:
    """Known categories for a transaction type."""
    if transaction_type == TransactionType.INCOME:
        return INCOME_CATEGORIES
    return EXPENSE_CATEGORIES


# =============================================================================
# CORE TRANSACTION MODEL
# =============================================================================

class Transaction(BaseModel):
    """
    A single ledger entry.

    CRITICAL: Transactions are never mutated after creation.
    The only way to remove one is a full ledger reset.
    """
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    id: str = Field(
        ...,
        min_length=1,
        description="Unique, monotonically distinguishable id"
    )
    user_id: str = Field(
        ...,
        min_length=1,
        alias="userId",
        description="Id of the owning account"
    )
    amount: float = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Positive amount; direction comes from type"
    )
    type: TransactionType
    category: str = Field(..., min_length=1)
    description: str = ""
    date: datetime = Field(
        ...,
        description="When the transaction happened (timezone-aware)"
    )

    @field_validator('date')
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """Naive timestamps are read as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @property
    def is_income(self) -> bool:
        return self.type == TransactionType.INCOME

    def to_storage_dict(self) -> dict:
        """Serialize in the persisted shape."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# SUMMARY MODELS (dashboard rows)
# =============================================================================

class MonthlySummary(BaseModel):
    """Income/expense totals for one month bucket, e.g. "Apr 2023"."""

    month: str
    income: float = 0.0
    expense: float = 0.0


class DailySummary(BaseModel):
    """Income/expense totals for one weekday bucket, e.g. "Mon"."""

    day: str
    income: float = 0.0
    expense: float = 0.0


class CategorySummary(BaseModel):
    """Total for one (category, type) pair."""

    category: str
    amount: float
    type: TransactionType


class LedgerOverview(BaseModel):
    """Headline numbers for the current user's dashboard."""

    total_income: float = 0.0
    total_expense: float = 0.0
    balance: float = 0.0
    transaction_count: int = Field(default=0, ge=0)


class PlatformOverview(BaseModel):
    """Headline numbers across all users (admin dashboard)."""

    total_users: int = Field(ge=0)
    total_transactions: int = Field(ge=0)
    total_income: float = 0.0
    total_expense: float = 0.0


# =============================================================================
# VALIDATION & RESULT MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'unknown_category')"
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
    suggested_fix: Optional[str] = None


class ValidationResult(BaseModel):
    """Result of validating user input before it reaches a store."""

    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[str] = Field(
        default_factory=list,
        description="Non-blocking warnings"
    )

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def first_error(self) -> Optional[str]:
        for issue in self.issues:
            if issue.severity == "error":
                return issue.message
        return None


class OperationResult(BaseModel):
    """
    Outcome of a ledger write requested by the presentation layer.

    ValidationFailure, AuthorizationGap and PersistenceFailure all end
    up here with success=False and a user-facing message.
    """

    success: bool
    message: str
    transaction: Optional[Transaction] = None
    issues: list[ValidationIssue] = Field(default_factory=list)
