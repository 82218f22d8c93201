"""Tests for input validation."""

import pytest

from finledger.config import AppSettings, AuthSettings
from finledger.models import TransactionType
from finledger.validation import TransactionValidator, parse_amount, parse_type


class TestParsing:
    """Tests for the form field parsers."""

    @pytest.mark.parametrize("value,expected", [
        (2500, 2500.0),
        ("2500", 2500.0),
        (" 12.75 ", 12.75),
        ("-5", -5.0),
        ("", None),
        ("abc", None),
        (None, None),
        (True, None),
        ("nan", None),
        (float("inf"), None),
    ])
    def test_parse_amount(self, value, expected):
        assert parse_amount(value) == expected

    def test_parse_type(self):
        assert parse_type("income") == TransactionType.INCOME
        assert parse_type(" Expense ") == TransactionType.EXPENSE
        assert parse_type(TransactionType.EXPENSE) == TransactionType.EXPENSE
        assert parse_type("transfer") is None
        assert parse_type(None) is None


class TestTransactionValidation:
    """Tests for validate_transaction()."""

    def test_valid_transaction(self, validator):
        result = validator.validate_transaction("2500", "expense", "Transport")
        assert result.is_valid is True
        assert result.issues == []

    def test_missing_amount(self, validator):
        result = validator.validate_transaction("  ", "expense", "Food")
        assert result.is_valid is False
        assert result.first_error == "Amount is required"

    @pytest.mark.parametrize("amount", ["0", "-10", "ten", 0])
    def test_non_positive_or_non_numeric_amount(self, validator, amount):
        result = validator.validate_transaction(amount, "expense", "Food")
        assert result.first_error == "Amount must be a positive number"

    def test_invalid_type(self, validator):
        result = validator.validate_transaction(10, "transfer", "Food")
        assert result.first_error == "Transaction type is required"

    def test_missing_category(self, validator):
        result = validator.validate_transaction(10, "expense", "   ")
        assert result.first_error == "Category is required"

    def test_non_string_category_is_read_as_text(self, validator):
        result = validator.validate_transaction(10, "expense", 7)
        assert result.is_valid is True
        assert "'7' is not a standard expense category" in result.warnings[0]

    def test_unknown_category_is_only_a_warning(self, validator):
        result = validator.validate_transaction(10, "expense", "Salary")
        assert result.is_valid is True
        assert len(result.warnings) == 1
        assert "not a standard expense category" in result.warnings[0]

    def test_high_amount_is_only_a_warning(self):
        validator = TransactionValidator(
            AppSettings(max_transaction_amount=1000), AuthSettings(),
        )
        result = validator.validate_transaction(5000, "income", "Salary")
        assert result.is_valid is True
        assert "unusually high" in result.warnings[0]

    def test_reports_every_error(self, validator):
        result = validator.validate_transaction(None, None, None)
        assert result.error_count == 3
        assert [issue.field for issue in result.issues] == ["amount", "type", "category"]


class TestRegistrationValidation:
    """Tests for validate_registration()."""

    def test_valid_registration(self, validator):
        assert validator.validate_registration("New", "new@example.com", "pw").is_valid

    @pytest.mark.parametrize("name,email,secret,message", [
        ("", "new@example.com", "pw", "Name is required"),
        ("New", "", "pw", "Email is required"),
        ("New", "not-an-email", "pw", "Please enter a valid email address"),
        ("New", "new@example.com", "", "Password must be at least 1 characters"),
    ])
    def test_invalid_registration(self, validator, name, email, secret, message):
        result = validator.validate_registration(name, email, secret)
        assert result.is_valid is False
        assert result.first_error == message

    def test_overlong_name_and_email(self, validator):
        result = validator.validate_registration("n" * 201, "a" * 600 + "@x.com", "pw")

        assert result.is_valid is False
        assert [issue.message for issue in result.issues] == [
            "Name must be at most 200 characters",
            "Email must be at most 320 characters",
        ]

    def test_secret_is_not_trimmed(self, validator):
        assert validator.validate_registration("New", "new@example.com", " ").is_valid

    def test_minimum_secret_length_is_configurable(self):
        validator = TransactionValidator(AppSettings(), AuthSettings(min_secret_length=8))
        result = validator.validate_registration("New", "new@example.com", "short")
        assert result.first_error == "Password must be at least 8 characters"


class TestSummary:
    """Tests for get_user_friendly_summary()."""

    def test_all_clear(self, validator):
        result = validator.validate_transaction(10, "expense", "Food")
        assert TransactionValidator.get_user_friendly_summary(result) == "All checks passed."

    def test_lists_errors_and_warnings(self):
        validator = TransactionValidator(
            AppSettings(max_transaction_amount=100), AuthSettings(),
        )
        result = validator.validate_transaction(500, "expense", "")

        summary = TransactionValidator.get_user_friendly_summary(result)

        assert "Please fix the following:" in summary
        assert "Category is required" in summary
        assert "Please verify the following:" in summary
        assert "unusually high" in summary
