"""Input validation package."""

from finledger.validation.validator import (
    TransactionValidator,
    parse_amount,
    parse_type,
)

__all__ = ["TransactionValidator", "parse_amount", "parse_type"]
