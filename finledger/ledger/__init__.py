"""Ledger package: the transaction store."""

from finledger.ledger.seed import SEED_TRANSACTIONS
from finledger.ledger.store import (
    InvalidTransactionError,
    LedgerError,
    OwnershipError,
    PersistenceError,
    TransactionStore,
    sort_newest_first,
    utc_now,
)

__all__ = [
    "SEED_TRANSACTIONS",
    "InvalidTransactionError",
    "LedgerError",
    "OwnershipError",
    "PersistenceError",
    "TransactionStore",
    "sort_newest_first",
    "utc_now",
]
