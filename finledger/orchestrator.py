"""
Main Orchestrator for finledger

Ties the components together and exposes the surface the presentation
layer talks to:
1. Sessions:  login, register, logout, current_session
2. Ledger:    add_transaction, all/user/recent/search transactions
3. Analytics: monthly_data, daily_data, category_data, overviews

DESIGN DECISION: The orchestrator is the error boundary.
Components raise typed exceptions; the orchestrator turns every
ValidationFailure, AuthorizationGap and PersistenceFailure into a
result object with a user-facing message. Reads with no session
return empty results instead of failing.
"""

from datetime import datetime
from typing import Any, Optional, Union

from finledger.analytics import AnalyticsAggregator
from finledger.audit import AuditLogger, log_event, set_log_level
from finledger.auth import CredentialStore, SessionManager
from finledger.config import Settings, get_settings
from finledger.ledger import (
    InvalidTransactionError,
    OwnershipError,
    PersistenceError,
    TransactionStore,
)
from finledger.ledger.store import Clock
from finledger.models.account import AuthResult, Session
from finledger.models.audit import AuditEventBuilder
from finledger.models.transaction import (
    CategorySummary,
    DailySummary,
    LedgerOverview,
    MonthlySummary,
    OperationResult,
    PlatformOverview,
    Transaction,
)
from finledger.services.storage import (
    FileStorage,
    InMemoryStorage,
    KeyValueStorageInterface,
)
from finledger.validation import TransactionValidator, parse_amount, parse_type


NOT_LOGGED_IN_MESSAGE = "You must be logged in to add transactions"


class FinanceLedger:
    """
    Application facade over sessions, the ledger and analytics.

    Construction restores any persisted session and loads (or seeds)
    the ledger, mirroring application start-up.
    """

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        credentials: Optional[CredentialStore] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[Settings] = None,
        clock: Optional[Clock] = None,
        latency_seconds: Optional[float] = None,
    ):
        settings = settings or get_settings()
        auth_settings = settings.auth
        analytics_settings = settings.analytics

        self._storage = storage
        self._audit_logger = audit_logger
        self._credentials = credentials if credentials is not None else CredentialStore()
        self._validator = TransactionValidator(settings.app, auth_settings)

        if latency_seconds is None:
            latency_seconds = auth_settings.latency_seconds
        self._sessions = SessionManager(
            self._credentials,
            storage,
            latency_seconds=latency_seconds,
            validator=self._validator,
            audit_logger=audit_logger,
        )
        self._sessions.restore()

        self._store = TransactionStore(
            storage,
            self._sessions,
            audit_logger=audit_logger,
            clock=clock,
            recent_limit=analytics_settings.recent_limit,
        )
        self._analytics = AnalyticsAggregator(
            self._store,
            self._sessions,
            credentials=self._credentials,
            settings=analytics_settings,
            clock=clock,
        )

    # ------------------------------------------------------------------
    # Components
    # ------------------------------------------------------------------

    @property
    def sessions(self) -> SessionManager:
        return self._sessions

    @property
    def store(self) -> TransactionStore:
        return self._store

    @property
    def analytics(self) -> AnalyticsAggregator:
        return self._analytics

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    @property
    def current_session(self) -> Optional[Session]:
        return self._sessions.current

    @property
    def is_authenticated(self) -> bool:
        return self._sessions.is_authenticated

    async def login(self, email: str, secret: str) -> AuthResult:
        return await self._sessions.login(email, secret)

    async def register(self, name: str, email: str, secret: str) -> AuthResult:
        return await self._sessions.register(name, email, secret)

    def logout(self) -> AuthResult:
        return self._sessions.logout()

    def list_users(self) -> list[Session]:
        """Every account without secrets. Admin sessions only."""
        session = self._sessions.current
        if session is None or not session.is_admin:
            return []
        return self._credentials.sessions()

    # ------------------------------------------------------------------
    # Ledger
    # ------------------------------------------------------------------

    def add_transaction(
        self,
        amount: Any,
        transaction_type: Any,
        category: Any,
        description: Any = "",
        date: Optional[Union[datetime, str]] = None,
    ) -> OperationResult:
        """
        Record a transaction for the current session.

        Never raises: every failure comes back as success=False.
        """
        session = self._sessions.current
        if session is None:
            log_event(
                self._audit_logger,
                AuditEventBuilder.transaction_rejected(None, "no active session"),
            )
            return OperationResult(success=False, message=NOT_LOGGED_IN_MESSAGE)

        category = "" if category is None else str(category).strip()
        description = "" if description is None else str(description)

        validation = self._validator.validate_transaction(
            amount, transaction_type, category
        )
        if not validation.is_valid:
            log_event(
                self._audit_logger,
                AuditEventBuilder.transaction_rejected(
                    session.id,
                    "validation failed",
                    {"issues": [issue.model_dump() for issue in validation.issues]},
                ),
            )
            return OperationResult(
                success=False,
                message=validation.first_error or "Invalid transaction",
                issues=validation.issues,
            )

        try:
            transaction = self._store.add(
                session.id,
                parse_amount(amount),
                parse_type(transaction_type),
                category,
                description,
                date=date,
            )
        except (OwnershipError, InvalidTransactionError) as e:
            return OperationResult(
                success=False,
                message=str(e),
                issues=validation.issues,
            )
        except PersistenceError:
            return OperationResult(
                success=False,
                message="Could not save the transaction, please try again",
                issues=validation.issues,
            )

        return OperationResult(
            success=True,
            message=(
                f"{transaction.amount:,.2f} {transaction.type.value} added successfully"
            ),
            transaction=transaction,
            issues=validation.issues,
        )

    def all_transactions(self) -> list[Transaction]:
        return self._store.all()

    def user_transactions(self, user_id: str) -> list[Transaction]:
        return self._store.for_owner(user_id)

    def recent_transactions(self, limit: Optional[int] = None) -> list[Transaction]:
        session = self._sessions.current
        if session is None:
            return []
        return self._store.recent(session.id, limit)

    def search_transactions(
        self,
        term: str = "",
        type_filter: Optional[str] = None,
    ) -> list[Transaction]:
        """Current user's transactions matching a term and type filter."""
        session = self._sessions.current
        if session is None:
            return []
        if type_filter not in (None, "", "all") and parse_type(type_filter) is None:
            return []
        return self._store.search(session.id, term, type_filter)

    # ------------------------------------------------------------------
    # Analytics
    # ------------------------------------------------------------------

    def monthly_data(self) -> list[MonthlySummary]:
        return self._analytics.monthly()

    def daily_data(self) -> list[DailySummary]:
        return self._analytics.daily()

    def category_data(self) -> list[CategorySummary]:
        return self._analytics.by_category()

    def overview(self) -> Optional[LedgerOverview]:
        return self._analytics.overview()

    def admin_overview(self) -> Optional[PlatformOverview]:
        return self._analytics.platform_overview()


def create_storage(settings: Optional[Settings] = None) -> KeyValueStorageInterface:
    """Build the configured key-value backend."""
    storage_settings = (settings or get_settings()).storage
    if storage_settings.backend == "memory":
        return InMemoryStorage()
    return FileStorage(
        storage_settings.directory,
        write_attempts=storage_settings.write_attempts,
    )


def create_app_components(
    settings: Optional[Settings] = None,
    storage: Optional[KeyValueStorageInterface] = None,
) -> FinanceLedger:
    """
    Factory function to create the application facade.

    Args:
        settings: Configuration; defaults to environment settings
        storage: Overrides the configured backend (e.g. for tests)
    """
    settings = settings or get_settings()
    app_settings = settings.app
    set_log_level(app_settings.log_level)

    return FinanceLedger(
        storage if storage is not None else create_storage(settings),
        audit_logger=AuditLogger(history_size=app_settings.audit_history_size),
        settings=settings,
    )
