"""
Analytics Aggregator

Derives dashboard summaries from the active session's own transactions.

Every call recomputes from the live ledger; nothing is cached.
With no active session every summary is empty.

Two bucketing behaviours are kept on purpose:
- monthly() keeps the last N buckets in the order they were first
  encountered (ledger insertion order), not the N most recent months.
- daily() buckets by weekday label, so transactions exactly 7 days
  apart would land on the same row.
"""

import math
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional

from finledger.auth.credentials import CredentialStore
from finledger.auth.session import SessionManager
from finledger.config import AnalyticsSettings, get_settings
from finledger.ledger.store import Clock, TransactionStore, utc_now
from finledger.models.transaction import (
    CategorySummary,
    DailySummary,
    LedgerOverview,
    MonthlySummary,
    PlatformOverview,
    Transaction,
    TransactionType,
)


MONTH_LABELS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)
WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

SECONDS_PER_DAY = 24 * 60 * 60


def resolve_timezone(name: str) -> tzinfo:
    if name.upper() == "UTC":
        return timezone.utc
    from zoneinfo import ZoneInfo
    return ZoneInfo(name)


def month_label(moment: datetime, tz: tzinfo = timezone.utc) -> str:
    """Short month and year, e.g. "Apr 2023"."""
    local = moment.astimezone(tz)
    return f"{MONTH_LABELS[local.month - 1]} {local.year}"


def weekday_label(moment: datetime, tz: tzinfo = timezone.utc) -> str:
    """Short weekday, e.g. "Mon"."""
    return WEEKDAY_LABELS[moment.astimezone(tz).weekday()]


def _fold(row, transaction: Transaction) -> None:
    if transaction.type == TransactionType.INCOME:
        row.income += transaction.amount
    else:
        row.expense += transaction.amount


class AnalyticsAggregator:
    """Day, month and category summaries for the active session."""

    def __init__(
        self,
        store: TransactionStore,
        sessions: SessionManager,
        credentials: Optional[CredentialStore] = None,
        settings: Optional[AnalyticsSettings] = None,
        clock: Optional[Clock] = None,
    ):
        """
        Args:
            store: The ledger to aggregate
            sessions: Source of the active session
            credentials: Account registry, needed only for platform_overview()
            settings: Windows and timezone. Defaults to the global settings.
            clock: Returns "now" for daily()
        """
        self._store = store
        self._sessions = sessions
        self._credentials = credentials
        self._settings = settings or get_settings().analytics
        self._tz = resolve_timezone(self._settings.timezone)
        self._clock = clock or utc_now

    def _owned(self) -> Optional[list[Transaction]]:
        """Active session's transactions in insertion order, or None."""
        session = self._sessions.current
        if session is None:
            return None
        return self._store.for_owner(session.id, newest_first=False)

    def monthly(self) -> list[MonthlySummary]:
        """
        Income/expense per month label.

        Buckets appear in first-seen order and only the last
        `monthly_window` of them are returned.
        """
        owned = self._owned()
        if owned is None:
            return []

        buckets: dict[str, MonthlySummary] = {}
        for transaction in owned:
            label = month_label(transaction.date, self._tz)
            if label not in buckets:
                buckets[label] = MonthlySummary(month=label)
            _fold(buckets[label], transaction)

        rows = list(buckets.values())
        return rows[-self._settings.monthly_window:]

    def daily(self) -> list[DailySummary]:
        """
        Income/expense per weekday over the last calendar days.

        Always one row per day of the window (7 by default), oldest
        first, ending with today. A transaction is counted when fewer
        than `daily_window_days` whole days separate it from now.
        """
        owned = self._owned()
        if owned is None:
            return []

        window = self._settings.daily_window_days
        now = self._clock().astimezone(self._tz)

        buckets: dict[str, DailySummary] = {}
        for offset in range(window - 1, -1, -1):
            label = weekday_label(now - timedelta(days=offset), self._tz)
            buckets[label] = DailySummary(day=label)

        for transaction in owned:
            elapsed = (now - transaction.date).total_seconds()
            if math.floor(elapsed / SECONDS_PER_DAY) >= window:
                continue
            row = buckets.get(weekday_label(transaction.date, self._tz))
            if row is not None:
                _fold(row, transaction)

        return list(buckets.values())

    def by_category(self) -> list[CategorySummary]:
        """Totals per (category, type) pair, in first-seen order."""
        owned = self._owned()
        if owned is None:
            return []

        buckets: dict[tuple[str, TransactionType], CategorySummary] = {}
        for transaction in owned:
            key = (transaction.category, transaction.type)
            if key not in buckets:
                buckets[key] = CategorySummary(
                    category=transaction.category,
                    amount=0.0,
                    type=transaction.type,
                )
            buckets[key].amount += transaction.amount

        return list(buckets.values())

    def overview(self) -> Optional[LedgerOverview]:
        """Totals and balance for the active session, or None."""
        owned = self._owned()
        if owned is None:
            return None

        overview = LedgerOverview(transaction_count=len(owned))
        for transaction in owned:
            if transaction.type == TransactionType.INCOME:
                overview.total_income += transaction.amount
            else:
                overview.total_expense += transaction.amount
        overview.balance = overview.total_income - overview.total_expense
        return overview

    def platform_overview(self) -> Optional[PlatformOverview]:
        """Totals across every user. Admin sessions only; None otherwise."""
        session = self._sessions.current
        if session is None or not session.is_admin:
            return None

        ledger = self._store.all()
        overview = PlatformOverview(
            total_users=len(self._credentials) if self._credentials is not None else 0,
            total_transactions=len(ledger),
        )
        for transaction in ledger:
            if transaction.type == TransactionType.INCOME:
                overview.total_income += transaction.amount
            else:
                overview.total_expense += transaction.amount
        return overview
