"""Tests for the session manager."""

import asyncio
import json

import pytest

from finledger.auth import (
    EMAIL_EXISTS_MESSAGE,
    LOGIN_FAILED_MESSAGE,
    CredentialStore,
    SessionManager,
)
from finledger.models import AuditEventType, AuthState, Session
from finledger.services.storage import SESSION_KEY, InMemoryStorage


class TestLogin:
    """Tests for login()."""

    @pytest.mark.asyncio
    async def test_login_success_sets_and_persists_session(self, sessions, storage):
        result = await sessions.login("admin@example.com", "admin123")

        assert result.success is True
        assert result.message == "Welcome back, Admin User!"
        assert sessions.current == Session(
            id="1", name="Admin User", email="admin@example.com", is_admin=True,
        )
        assert sessions.state == AuthState.AUTHENTICATED
        assert storage.get_json(SESSION_KEY) == {
            "id": "1",
            "name": "Admin User",
            "email": "admin@example.com",
            "isAdmin": True,
        }

    @pytest.mark.asyncio
    async def test_persisted_session_has_no_secret(self, sessions, storage):
        await sessions.login("user@example.com", "user123")
        assert "user123" not in storage.get(SESSION_KEY)

    @pytest.mark.asyncio
    async def test_bad_credentials_leave_state_untouched(self, sessions, storage):
        result = await sessions.login("bad@x.com", "wrong")

        assert result.success is False
        assert result.message == LOGIN_FAILED_MESSAGE
        assert sessions.current is None
        assert sessions.state == AuthState.UNAUTHENTICATED
        assert storage.get(SESSION_KEY) is None

    @pytest.mark.asyncio
    async def test_failed_login_keeps_existing_session(self, sessions, storage):
        await sessions.login("user@example.com", "user123")
        persisted = storage.get(SESSION_KEY)

        result = await sessions.login("admin@example.com", "wrong")

        assert result.success is False
        assert sessions.current.id == "2"
        assert storage.get(SESSION_KEY) == persisted

    @pytest.mark.asyncio
    async def test_login_is_a_suspend_point(self, credentials, storage):
        sessions = SessionManager(credentials, storage, latency_seconds=0.05)

        task = asyncio.create_task(sessions.login("user@example.com", "user123"))
        await asyncio.sleep(0)
        assert sessions.state == AuthState.AUTHENTICATING
        assert sessions.is_loading is True
        assert sessions.current is None

        result = await task
        assert result.success is True
        assert sessions.is_loading is False
        assert sessions.state == AuthState.AUTHENTICATED

    @pytest.mark.asyncio
    async def test_overlapping_logins_last_write_wins(self, sessions, storage):
        results = await asyncio.gather(
            sessions.login("admin@example.com", "admin123"),
            sessions.login("user@example.com", "user123"),
        )

        assert all(result.success for result in results)
        assert sessions.current.id in {"1", "2"}
        assert storage.get_json(SESSION_KEY)["id"] == sessions.current.id

    @pytest.mark.asyncio
    async def test_storage_failure_reports_failure(self, credentials, flaky_storage):
        sessions = SessionManager(credentials, flaky_storage, latency_seconds=0)
        flaky_storage.fail_writes = True

        result = await sessions.login("user@example.com", "user123")

        assert result.success is False
        assert sessions.current is None

    @pytest.mark.asyncio
    async def test_failed_login_is_audited_without_secret(self, sessions, audit_logger):
        await sessions.login("bad@x.com", "wrong-secret")

        event = audit_logger.recent_events(1)[0]
        assert event.event_type == AuditEventType.LOGIN_FAILED
        assert "wrong-secret" not in json.dumps(event.to_log_dict())

    @pytest.mark.asyncio
    async def test_overlong_email_is_a_failed_login(self, sessions, audit_logger):
        email = "a" * 600 + "@x.com"

        result = await sessions.login(email, "wrong")

        assert result.success is False
        assert result.message == LOGIN_FAILED_MESSAGE
        event = audit_logger.recent_events(1)[0]
        assert len(event.description) <= 500
        assert event.details["email"] == email

    @pytest.mark.asyncio
    async def test_email_is_trimmed_but_not_case_folded(self, sessions):
        assert (await sessions.login("  user@example.com ", "user123")).success is True
        sessions.logout()
        assert (await sessions.login("User@example.com", "user123")).success is False

    @pytest.mark.asyncio
    async def test_overlong_email_without_audit_logger(self, credentials, storage):
        sessions = SessionManager(credentials, storage, latency_seconds=0)
        result = await sessions.login("a" * 600 + "@x.com", "wrong")
        assert result.success is False


class TestRegister:
    """Tests for register()."""

    @pytest.mark.asyncio
    async def test_register_creates_account_and_session(self, sessions, credentials, storage):
        result = await sessions.register("New Person", "new@example.com", "pw123456")

        assert result.success is True
        assert result.message == "Your account has been created"
        assert len(credentials) == 3
        assert sessions.current.id == "3"
        assert sessions.current.is_admin is False
        assert storage.get_json(SESSION_KEY)["email"] == "new@example.com"

    @pytest.mark.asyncio
    async def test_registered_account_can_log_in(self, sessions):
        await sessions.register("New Person", "new@example.com", "pw123456")
        sessions.logout()

        result = await sessions.login("new@example.com", "pw123456")
        assert result.success is True

    @pytest.mark.asyncio
    async def test_duplicate_email_fails_without_growing_registry(self, sessions, credentials, storage):
        result = await sessions.register("Impostor", "user@example.com", "anything")

        assert result.success is False
        assert result.message == EMAIL_EXISTS_MESSAGE
        assert len(credentials) == 2
        assert sessions.current is None
        assert storage.get(SESSION_KEY) is None

    @pytest.mark.asyncio
    async def test_invalid_input_fails_without_growing_registry(self, sessions, credentials):
        result = await sessions.register("Someone", "not-an-email", "pw")

        assert result.success is False
        assert result.message == "Please enter a valid email address"
        assert len(credentials) == 2

    @pytest.mark.asyncio
    async def test_concurrent_duplicate_registration_creates_one_account(self, sessions, credentials):
        results = await asyncio.gather(
            sessions.register("One", "same@example.com", "pw"),
            sessions.register("Two", "same@example.com", "pw"),
        )

        assert sorted(result.success for result in results) == [False, True]
        assert len(credentials) == 3

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name,email,message", [
        ("Long", "a" * 600 + "@x.com", "Email must be at most 320 characters"),
        ("n" * 201, "long@example.com", "Name must be at most 200 characters"),
    ])
    async def test_overlong_fields_fail_without_growing_registry(
        self, sessions, credentials, storage, name, email, message
    ):
        result = await sessions.register(name, email, "pw")

        assert result.success is False
        assert result.message == message
        assert len(credentials) == 2
        assert sessions.current is None
        assert storage.get(SESSION_KEY) is None

    @pytest.mark.asyncio
    async def test_session_save_failure_leaves_registry_unchanged(
        self, credentials, flaky_storage
    ):
        sessions = SessionManager(credentials, flaky_storage, latency_seconds=0)
        flaky_storage.fail_writes = True

        failed = await sessions.register("New Person", "new@example.com", "pw")

        assert failed.success is False
        assert len(credentials) == 2
        assert not credentials.exists_by_email("new@example.com")
        assert sessions.current is None

        flaky_storage.fail_writes = False
        retried = await sessions.register("New Person", "new@example.com", "pw")

        assert retried.success is True
        assert retried.session.id == "3"
        assert len(credentials) == 3

    @pytest.mark.asyncio
    async def test_secret_whitespace_is_kept(self, sessions):
        registered = await sessions.register("Spacey", "s@example.com", " pw ")
        assert registered.success is True
        sessions.logout()

        assert (await sessions.login("s@example.com", " pw ")).success is True
        sessions.logout()
        assert (await sessions.login("s@example.com", "pw")).success is False


class TestRestoreAndLogout:
    """Tests for restore() and logout()."""

    def test_restore_adopts_persisted_session(self, credentials):
        storage = InMemoryStorage({
            SESSION_KEY: json.dumps(
                {"id": "2", "name": "Test User", "email": "user@example.com", "isAdmin": False}
            ),
        })
        sessions = SessionManager(credentials, storage, latency_seconds=0)

        restored = sessions.restore()

        assert restored.id == "2"
        assert sessions.current == restored
        assert sessions.state == AuthState.AUTHENTICATED

    def test_restore_trusts_without_revalidating(self):
        """Test an id unknown to the registry is still adopted."""
        storage = InMemoryStorage({
            SESSION_KEY: json.dumps(
                {"id": "99", "name": "Ghost", "email": "ghost@example.com", "isAdmin": True}
            ),
        })
        sessions = SessionManager(CredentialStore(), storage, latency_seconds=0)

        assert sessions.restore().id == "99"

    def test_restore_without_persisted_session(self, sessions):
        assert sessions.restore() is None
        assert sessions.current is None

    @pytest.mark.parametrize("raw", ["{not json", json.dumps(["1"]), json.dumps({"name": "x"})])
    def test_restore_discards_unreadable_session(self, raw, credentials, audit_logger):
        storage = InMemoryStorage({SESSION_KEY: raw})
        sessions = SessionManager(
            credentials, storage, latency_seconds=0, audit_logger=audit_logger,
        )

        assert sessions.restore() is None
        assert sessions.current is None
        assert storage.get(SESSION_KEY) is None
        assert audit_logger.recent_events(1)[0].event_type == AuditEventType.SESSION_DISCARDED

    def test_logout_clears_session(self, sessions, storage, as_user):
        result = sessions.logout()

        assert result.success is True
        assert sessions.current is None
        assert sessions.state == AuthState.UNAUTHENTICATED
        assert storage.get(SESSION_KEY) is None

    def test_logout_without_session_succeeds(self, sessions):
        assert sessions.logout().success is True

    def test_logout_succeeds_when_storage_fails(self, credentials, flaky_storage):
        sessions = SessionManager(credentials, flaky_storage, latency_seconds=0)
        asyncio.run(sessions.login("user@example.com", "user123"))
        flaky_storage.fail_writes = True

        assert sessions.logout().success is True
        assert sessions.current is None
