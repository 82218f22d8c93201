"""
Shared fixtures for finledger tests

Test strategy:
1. Unit tests per component, wired with in-memory storage
2. A fixed clock so date-dependent aggregations are deterministic
3. Zero login latency unless a test is about the in-flight state
"""

import asyncio
from datetime import datetime, timezone

import pytest

from finledger.analytics import AnalyticsAggregator
from finledger.audit import AuditLogger
from finledger.auth import CredentialStore, SessionManager
from finledger.config import AnalyticsSettings, AppSettings, AuthSettings
from finledger.ledger import TransactionStore
from finledger.services.storage import InMemoryStorage, StorageWriteError
from finledger.validation import TransactionValidator


# Wednesday, 12 June 2024, noon UTC
FIXED_NOW = datetime(2024, 6, 12, 12, 0, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return FIXED_NOW


class FlakyStorage(InMemoryStorage):
    """In-memory storage whose writes can be switched off."""

    def __init__(self):
        super().__init__()
        self.fail_writes = False

    def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StorageWriteError(f"disk full while writing '{key}'")
        super().set(key, value)

    def remove(self, key: str) -> None:
        if self.fail_writes:
            raise StorageWriteError(f"disk full while removing '{key}'")
        super().remove(key)


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def flaky_storage():
    return FlakyStorage()


@pytest.fixture
def credentials():
    return CredentialStore()


@pytest.fixture
def audit_logger():
    return AuditLogger(history_size=100)


@pytest.fixture
def validator():
    return TransactionValidator(AppSettings(), AuthSettings())


@pytest.fixture
def sessions(credentials, storage, validator, audit_logger):
    return SessionManager(
        credentials,
        storage,
        latency_seconds=0,
        validator=validator,
        audit_logger=audit_logger,
    )


@pytest.fixture
def store(storage, sessions, audit_logger):
    return TransactionStore(
        storage,
        sessions,
        audit_logger=audit_logger,
        clock=fixed_clock,
        recent_limit=5,
    )


@pytest.fixture
def aggregator(store, sessions, credentials):
    return AnalyticsAggregator(
        store,
        sessions,
        credentials=credentials,
        settings=AnalyticsSettings(),
        clock=fixed_clock,
    )


@pytest.fixture
def login_as(sessions):
    """Log the shared session manager in from a synchronous test."""
    def _login(email: str, secret: str):
        result = asyncio.run(sessions.login(email, secret))
        assert result.success, result.message
        return result.session
    return _login


@pytest.fixture
def as_admin(login_as):
    return login_as("admin@example.com", "admin123")


@pytest.fixture
def as_user(login_as):
    return login_as("user@example.com", "user123")
