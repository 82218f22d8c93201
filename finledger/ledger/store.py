"""
Transaction Store

Holds the full ledger, persists it, and answers scoped queries.

GUARANTEES:
- Read-after-write: once add() returns, all()/for_owner() include the
  new transaction and the durable copy already contains it.
- The in-memory ledger is replaced only after the durable write
  succeeds. A failed write leaves both on the previous ledger.
- Only the active session may add transactions, and only for itself.

The whole ledger is rewritten on every mutation; there is no
incremental log. That keeps the persisted value a plain JSON array.
"""

from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Optional, Union

from pydantic import ValidationError

from finledger.audit import AuditLogger, log_event
from finledger.auth.session import SessionManager
from finledger.config import get_settings
from finledger.ledger.seed import SEED_TRANSACTIONS
from finledger.models.audit import AuditEventBuilder
from finledger.models.transaction import Transaction, TransactionType
from finledger.services.storage import (
    TRANSACTIONS_KEY,
    CorruptDataError,
    KeyValueStorageInterface,
    StorageError,
)


Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class OwnershipError(LedgerError):
    """The add was not made by the active session for itself."""
    pass


class InvalidTransactionError(LedgerError):
    """The requested transaction violates the model rules."""
    pass


class PersistenceError(LedgerError):
    """The ledger could not be written; nothing was changed."""
    pass


def sort_newest_first(transactions: Iterable[Transaction]) -> list[Transaction]:
    """Date descending; equal dates keep reverse insertion order."""
    indexed = list(enumerate(transactions))
    indexed.sort(key=lambda pair: (pair[1].date, pair[0]), reverse=True)
    return [transaction for _, transaction in indexed]


class TransactionStore:
    """
    The ledger and its scoped views.

    The ledger is loaded (or seeded) when the store is constructed.
    """

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        sessions: SessionManager,
        audit_logger: Optional[AuditLogger] = None,
        seed: Iterable[dict] = SEED_TRANSACTIONS,
        clock: Optional[Clock] = None,
        recent_limit: Optional[int] = None,
    ):
        """
        Args:
            storage: Key-value store holding the persisted ledger
            sessions: Source of the active session for ownership checks
            audit_logger: Optional audit trail
            seed: Records installed when no persisted ledger exists
            clock: Returns "now"; used for default dates and ids
            recent_limit: Default size of recent(). Defaults to
                          FINLEDGER_ANALYTICS_RECENT_LIMIT.
        """
        self._storage = storage
        self._sessions = sessions
        self._audit_logger = audit_logger
        self._seed = tuple(seed)
        self._clock = clock or utc_now
        if recent_limit is None:
            recent_limit = get_settings().analytics.recent_limit
        self._recent_limit = recent_limit

        self._last_token = 0
        self._ledger: list[Transaction] = self._load()

    def __len__(self) -> int:
        return len(self._ledger)

    # ------------------------------------------------------------------
    # Loading & persistence
    # ------------------------------------------------------------------

    def _seed_ledger(self) -> list[Transaction]:
        return [Transaction.model_validate(record) for record in self._seed]

    def _load(self) -> list[Transaction]:
        """
        Read the persisted ledger, installing the seed if there is none.

        Raises:
            CorruptDataError: If the persisted ledger cannot be read back
            PersistenceError: If the seed cannot be written
        """
        data = self._storage.get_json(TRANSACTIONS_KEY)

        if data is None:
            ledger = self._seed_ledger()
            self._commit(ledger)
            self._remember_tokens(ledger)
            log_event(self._audit_logger, AuditEventBuilder.ledger_seeded(len(ledger)))
            return ledger

        if not isinstance(data, list):
            raise CorruptDataError(
                f"Persisted '{TRANSACTIONS_KEY}' is not a JSON array"
            )
        try:
            ledger = [Transaction.model_validate(record) for record in data]
        except ValidationError as e:
            log_event(
                self._audit_logger,
                AuditEventBuilder.system_error("corrupt_ledger", str(e)),
            )
            raise CorruptDataError(f"Persisted ledger is invalid: {e}")

        self._remember_tokens(ledger)
        log_event(self._audit_logger, AuditEventBuilder.ledger_loaded(len(ledger)))
        return ledger

    def _commit(self, ledger: list[Transaction]) -> None:
        """Write ledger durably, then make it the in-memory ledger."""
        try:
            self._storage.set_json(
                TRANSACTIONS_KEY,
                [transaction.to_storage_dict() for transaction in ledger],
            )
        except StorageError as e:
            log_event(
                self._audit_logger,
                AuditEventBuilder.persistence_failed(TRANSACTIONS_KEY, str(e)),
            )
            raise PersistenceError(f"Could not save the ledger: {e}") from e
        self._ledger = ledger

    def _remember_tokens(self, ledger: Iterable[Transaction]) -> None:
        for transaction in ledger:
            if transaction.id.isdigit():
                self._last_token = max(self._last_token, int(transaction.id))

    def _next_id(self) -> str:
        """Wall-clock milliseconds, bumped so ids strictly increase."""
        token = int(self._clock().timestamp() * 1000)
        if token <= self._last_token:
            token = self._last_token + 1
        self._last_token = token
        return str(token)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def add(
        self,
        owner_id: str,
        amount: float,
        transaction_type: Union[TransactionType, str],
        category: str,
        description: str = "",
        date: Optional[Union[datetime, str]] = None,
    ) -> Transaction:
        """
        Append a transaction owned by the active session.

        Raises:
            OwnershipError: No active session, or owner_id is not its id
            InvalidTransactionError: Amount, type or category is invalid
            PersistenceError: The ledger could not be saved
        """
        session = self._sessions.current
        if session is None or session.id != owner_id:
            reason = (
                "no active session"
                if session is None
                else "owner does not match the active session"
            )
            log_event(
                self._audit_logger,
                AuditEventBuilder.transaction_rejected(
                    session.id if session else None,
                    reason,
                    {"owner_id": owner_id},
                ),
            )
            raise OwnershipError(f"Cannot add a transaction for '{owner_id}': {reason}")

        try:
            transaction = Transaction(
                id=self._next_id(),
                user_id=owner_id,
                amount=amount,
                type=transaction_type,
                category=category,
                description=description or "",
                date=date if date is not None else self._clock(),
            )
        except ValidationError as e:
            log_event(
                self._audit_logger,
                AuditEventBuilder.transaction_rejected(owner_id, "invalid fields"),
            )
            raise InvalidTransactionError(str(e)) from e

        self._commit([*self._ledger, transaction])

        log_event(
            self._audit_logger,
            AuditEventBuilder.transaction_added(
                transaction.id,
                owner_id,
                transaction.amount,
                transaction.type.value,
                transaction.category,
            ),
        )
        return transaction

    def reset(self, reseed: bool = True) -> int:
        """
        Replace the whole ledger with the seed (or nothing).

        Returns the number of transactions in the new ledger.
        """
        ledger = self._seed_ledger() if reseed else []
        self._commit(ledger)
        session = self._sessions.current
        log_event(
            self._audit_logger,
            AuditEventBuilder.ledger_reset(len(ledger), session.id if session else None),
        )
        return len(ledger)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def all(self) -> list[Transaction]:
        """Full ledger, newest first."""
        return sort_newest_first(self._ledger)

    def for_owner(self, owner_id: str, newest_first: bool = True) -> list[Transaction]:
        """
        Transactions whose user_id is owner_id.

        With newest_first=False they come back in insertion order.
        """
        owned = [t for t in self._ledger if t.user_id == owner_id]
        if newest_first:
            return sort_newest_first(owned)
        return owned

    def recent(self, owner_id: str, limit: Optional[int] = None) -> list[Transaction]:
        """The first `limit` of for_owner(); empty with no active session."""
        if self._sessions.current is None:
            return []
        if limit is None:
            limit = self._recent_limit
        if limit <= 0:
            return []
        return self.for_owner(owner_id)[:limit]

    def search(
        self,
        owner_id: str,
        term: str = "",
        type_filter: Optional[Any] = None,
    ) -> list[Transaction]:
        """
        for_owner() narrowed by a search term and a type.

        term matches description or category, case-insensitively.
        type_filter is "income", "expense", or None/"all" for both.
        """
        needle = (term or "").strip().lower()
        wanted = None
        if type_filter not in (None, "", "all"):
            wanted = TransactionType(type_filter)

        results = []
        for transaction in self.for_owner(owner_id):
            if wanted is not None and transaction.type != wanted:
                continue
            if needle and not (
                needle in transaction.description.lower()
                or needle in transaction.category.lower()
            ):
                continue
            results.append(transaction)
        return results
