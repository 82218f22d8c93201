"""
Data Models Package

This package contains all Pydantic models used in finledger.
All data flowing through the system must conform to these schemas.
"""

from finledger.models.account import (
    EMAIL_MAX_LENGTH,
    NAME_MAX_LENGTH,
    Account,
    AuthResult,
    AuthState,
    Session,
)
from finledger.models.transaction import (
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    CategorySummary,
    DailySummary,
    LedgerOverview,
    MonthlySummary,
    OperationResult,
    PlatformOverview,
    Transaction,
    TransactionType,
    ValidationIssue,
    ValidationResult,
    categories_for,
)
from finledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Account models
    "EMAIL_MAX_LENGTH",
    "NAME_MAX_LENGTH",
    "Account",
    "AuthResult",
    "AuthState",
    "Session",
    # Ledger models
    "EXPENSE_CATEGORIES",
    "INCOME_CATEGORIES",
    "CategorySummary",
    "DailySummary",
    "LedgerOverview",
    "MonthlySummary",
    "OperationResult",
    "PlatformOverview",
    "Transaction",
    "TransactionType",
    "ValidationIssue",
    "ValidationResult",
    "categories_for",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
