"""
Input Validation

DESIGN DECISION: Form input is validated before it reaches a store.
Stores still enforce their invariants (the pydantic models reject a
non-positive amount), but the validator turns bad input into readable
issues instead of exceptions.

Errors block the write. Warnings (unknown category, unusually large
amount) are reported but never block.

IMPORTANT: Validation NEVER silently fixes issues.
"""

import math
import re
from typing import Any, Optional

from finledger.config import AppSettings, AuthSettings, get_settings
from finledger.models.account import EMAIL_MAX_LENGTH, NAME_MAX_LENGTH
from finledger.models.transaction import (
    TransactionType,
    ValidationIssue,
    ValidationResult,
    categories_for,
)


_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def parse_amount(value: Any) -> Optional[float]:
    """
    Read an amount the way the entry form does.

    Accepts numbers and numeric strings; returns None for anything
    that is not a finite number.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(amount):
        return None
    return amount


def parse_type(value: Any) -> Optional[TransactionType]:
    """Read a transaction type from an enum member or its string value."""
    if isinstance(value, TransactionType):
        return value
    try:
        return TransactionType(str(value).strip().lower())
    except ValueError:
        return None


def _result(issues: list[ValidationIssue]) -> ValidationResult:
    return ValidationResult(
        is_valid=not any(issue.severity == "error" for issue in issues),
        issues=issues,
        warnings=[issue.message for issue in issues if issue.severity == "warning"],
    )


class TransactionValidator:
    """Validates add-transaction and registration input."""

    def __init__(
        self,
        app_settings: Optional[AppSettings] = None,
        auth_settings: Optional[AuthSettings] = None,
    ):
        settings = None
        if app_settings is None or auth_settings is None:
            settings = get_settings()
        self._app = app_settings or settings.app
        self._auth = auth_settings or settings.auth

    def validate_transaction(
        self,
        amount: Any,
        transaction_type: Any,
        category: Any,
    ) -> ValidationResult:
        """
        Validate the fields of an add-transaction request.

        Checks:
        - Amount present, numeric and greater than zero
        - Type is income or expense
        - Category present
        - Category known for the type (warning only)
        - Amount below the sanity threshold (warning only)
        """
        issues = []

        parsed_amount = parse_amount(amount)
        if amount is None or (isinstance(amount, str) and not amount.strip()):
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Amount is required",
                severity="error",
            ))
        elif parsed_amount is None or parsed_amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be a positive number",
                severity="error",
                suggested_fix="Enter an amount greater than zero",
            ))
        elif parsed_amount > self._app.max_transaction_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({parsed_amount:,.2f}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        parsed_type = parse_type(transaction_type)
        if parsed_type is None:
            issues.append(ValidationIssue(
                field="type",
                issue_type="invalid_value",
                message="Transaction type is required",
                severity="error",
                suggested_fix="Choose income or expense",
            ))

        category = "" if category is None else str(category).strip()
        if not category:
            issues.append(ValidationIssue(
                field="category",
                issue_type="missing",
                message="Category is required",
                severity="error",
            ))
        elif parsed_type is not None and category not in categories_for(parsed_type):
            issues.append(ValidationIssue(
                field="category",
                issue_type="unknown_category",
                message=f"'{category}' is not a standard {parsed_type.value} category",
                severity="warning",
                suggested_fix=", ".join(categories_for(parsed_type)),
            ))

        return _result(issues)

    def validate_registration(
        self,
        name: Optional[str],
        email: Optional[str],
        secret: Optional[str],
    ) -> ValidationResult:
        """Validate the fields of a registration request."""
        issues = []

        name = (name or "").strip()
        if not name:
            issues.append(ValidationIssue(
                field="name",
                issue_type="missing",
                message="Name is required",
                severity="error",
            ))
        elif len(name) > NAME_MAX_LENGTH:
            issues.append(ValidationIssue(
                field="name",
                issue_type="too_long",
                message=f"Name must be at most {NAME_MAX_LENGTH} characters",
                severity="error",
            ))

        email = (email or "").strip()
        if not email:
            issues.append(ValidationIssue(
                field="email",
                issue_type="missing",
                message="Email is required",
                severity="error",
            ))
        elif len(email) > EMAIL_MAX_LENGTH:
            issues.append(ValidationIssue(
                field="email",
                issue_type="too_long",
                message=f"Email must be at most {EMAIL_MAX_LENGTH} characters",
                severity="error",
            ))
        elif not _EMAIL_PATTERN.match(email):
            issues.append(ValidationIssue(
                field="email",
                issue_type="invalid_format",
                message="Please enter a valid email address",
                severity="error",
            ))

        if len(secret or "") < self._auth.min_secret_length:
            issues.append(ValidationIssue(
                field="secret",
                issue_type="too_short",
                message=(
                    f"Password must be at least {self._auth.min_secret_length} "
                    "characters"
                ),
                severity="error",
            ))

        return _result(issues)

    @staticmethod
    def get_user_friendly_summary(result: ValidationResult) -> str:
        """
        Generate a user-friendly summary of validation results.

        This is what a form shows under its fields.
        """
        if result.is_valid and not result.warnings:
            return "All checks passed."

        lines = []
        errors = [issue for issue in result.issues if issue.severity == "error"]
        if errors:
            lines.append("Please fix the following:")
            for issue in errors:
                lines.append(f"   • {issue.message}")
                if issue.suggested_fix:
                    lines.append(f"     {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
