"""
Session Manager

Owns the single active Session of this process context.

State machine:
    UNAUTHENTICATED -> AUTHENTICATING -> AUTHENTICATED
                 ^                            |
                 +---------- logout ----------+

login() and register() are coroutines: they await a simulated network
delay before touching the credential store. Callers must await them and
must not assume overlapping calls complete in order; with overlapping
successful calls the last one to complete wins.

restore() adopts a persisted session as-is, without re-checking
credentials and without expiry. This is a trust-on-read restore.
"""

import asyncio
from typing import Optional

from pydantic import ValidationError

from finledger.audit import AuditLogger, log_event
from finledger.auth.credentials import CredentialStore, DuplicateAccountError
from finledger.config import get_settings
from finledger.models.account import AuthResult, AuthState, Session
from finledger.models.audit import AuditEventBuilder
from finledger.services.storage import (
    SESSION_KEY,
    KeyValueStorageInterface,
    StorageError,
)
from finledger.validation import TransactionValidator


LOGIN_FAILED_MESSAGE = "Invalid email or password"
EMAIL_EXISTS_MESSAGE = "Email already exists"
SESSION_SAVE_FAILED_MESSAGE = "Could not save your session, please try again"


class SessionManager:
    """
    Validates credentials, issues and restores the session,
    and exposes the current identity.
    """

    def __init__(
        self,
        credentials: CredentialStore,
        storage: KeyValueStorageInterface,
        latency_seconds: Optional[float] = None,
        validator: Optional[TransactionValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        """
        Args:
            credentials: Account registry used for login and registration
            storage: Key-value store holding the persisted session
            latency_seconds: Simulated delay for login/register.
                             Defaults to FINLEDGER_AUTH_LATENCY_SECONDS.
            validator: Registration input validator
            audit_logger: Optional audit trail
        """
        self._credentials = credentials
        self._storage = storage
        if latency_seconds is None:
            latency_seconds = get_settings().auth.latency_seconds
        self._latency = latency_seconds
        self._validator = validator or TransactionValidator()
        self._audit_logger = audit_logger

        self._session: Optional[Session] = None
        self._pending = 0

    # ------------------------------------------------------------------
    # Current identity
    # ------------------------------------------------------------------

    @property
    def current(self) -> Optional[Session]:
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    @property
    def is_loading(self) -> bool:
        """True while a login or registration is in flight."""
        return self._pending > 0

    @property
    def state(self) -> AuthState:
        if self._pending:
            return AuthState.AUTHENTICATING
        if self._session is not None:
            return AuthState.AUTHENTICATED
        return AuthState.UNAUTHENTICATED

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def restore(self) -> Optional[Session]:
        """
        Adopt the persisted session, if any.

        A value that cannot be read as a Session is removed from storage
        and nothing is adopted.
        """
        try:
            data = self._storage.get_json(SESSION_KEY)
            if data is None:
                return None
            session = Session.model_validate(data)
        except (StorageError, ValidationError) as e:
            log_event(self._audit_logger, AuditEventBuilder.session_discarded(str(e)))
            try:
                self._storage.remove(SESSION_KEY)
            except StorageError as remove_error:
                log_event(
                    self._audit_logger,
                    AuditEventBuilder.persistence_failed(SESSION_KEY, str(remove_error)),
                )
            return None

        self._session = session
        log_event(self._audit_logger, AuditEventBuilder.session_restored(session.id))
        return session

    async def login(self, email: str, secret: str) -> AuthResult:
        """
        Check credentials and start a session.

        On failure the current session and the persisted session are
        left exactly as they were.
        """
        email = (email or "").strip()
        self._pending += 1
        try:
            await asyncio.sleep(self._latency)
            account = self._credentials.find_by_email_and_secret(email, secret or "")

            if account is None:
                log_event(self._audit_logger, AuditEventBuilder.login_failed(email))
                return AuthResult(success=False, message=LOGIN_FAILED_MESSAGE)

            session = account.to_session()
            if not self._adopt(session):
                return AuthResult(success=False, message=SESSION_SAVE_FAILED_MESSAGE)

            log_event(
                self._audit_logger,
                AuditEventBuilder.login_succeeded(session.id, session.email),
            )
            return AuthResult(
                success=True,
                message=f"Welcome back, {session.name}!",
                session=session,
            )
        finally:
            self._pending -= 1

    async def register(self, name: str, email: str, secret: str) -> AuthResult:
        """
        Create an account and start a session for it.

        Fails without touching the registry if the input is invalid
        or the email is already registered. If the session cannot be
        saved, the new account is discarded again.
        """
        name = (name or "").strip()
        email = (email or "").strip()
        self._pending += 1
        try:
            await asyncio.sleep(self._latency)

            validation = self._validator.validate_registration(name, email, secret)
            if not validation.is_valid:
                message = validation.first_error or "Registration failed"
                log_event(
                    self._audit_logger,
                    AuditEventBuilder.registration_failed(email, message),
                )
                return AuthResult(success=False, message=message)

            if self._credentials.exists_by_email(email):
                log_event(
                    self._audit_logger,
                    AuditEventBuilder.registration_failed(email, EMAIL_EXISTS_MESSAGE),
                )
                return AuthResult(success=False, message=EMAIL_EXISTS_MESSAGE)

            try:
                account = self._credentials.create(name, email, secret)
            except DuplicateAccountError:
                # Another registration for the same email completed first.
                return AuthResult(success=False, message=EMAIL_EXISTS_MESSAGE)
            except ValidationError as e:
                log_event(
                    self._audit_logger,
                    AuditEventBuilder.registration_failed(email, "invalid account fields"),
                )
                return AuthResult(
                    success=False,
                    message=f"Registration failed: {e.errors()[0]['msg']}",
                )

            session = account.to_session()
            if not self._adopt(session):
                # No await since create(): the account is still the newest.
                self._credentials.discard(account.id)
                log_event(
                    self._audit_logger,
                    AuditEventBuilder.registration_failed(email, SESSION_SAVE_FAILED_MESSAGE),
                )
                return AuthResult(success=False, message=SESSION_SAVE_FAILED_MESSAGE)

            log_event(
                self._audit_logger,
                AuditEventBuilder.registration_succeeded(session.id, session.email),
            )
            return AuthResult(
                success=True,
                message="Your account has been created",
                session=session,
            )
        finally:
            self._pending -= 1

    def logout(self) -> AuthResult:
        """Clear the session and its persisted copy. Always succeeds."""
        previous = self._session
        self._session = None
        try:
            self._storage.remove(SESSION_KEY)
        except StorageError as e:
            log_event(
                self._audit_logger,
                AuditEventBuilder.persistence_failed(SESSION_KEY, str(e)),
            )

        log_event(
            self._audit_logger,
            AuditEventBuilder.logged_out(previous.id if previous else None),
        )
        return AuthResult(
            success=True,
            message="You have been logged out successfully",
        )

    def _adopt(self, session: Session) -> bool:
        """Persist then set the session. Returns False if storage failed."""
        try:
            self._storage.set_json(SESSION_KEY, session.to_storage_dict())
        except StorageError as e:
            log_event(
                self._audit_logger,
                AuditEventBuilder.persistence_failed(SESSION_KEY, str(e)),
            )
            return False
        self._session = session
        return True
