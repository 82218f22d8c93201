"""Authentication package: credential registry and session manager."""

from finledger.auth.credentials import (
    DEFAULT_ACCOUNTS,
    CredentialStore,
    DuplicateAccountError,
)
from finledger.auth.session import (
    EMAIL_EXISTS_MESSAGE,
    LOGIN_FAILED_MESSAGE,
    SessionManager,
)

__all__ = [
    "DEFAULT_ACCOUNTS",
    "CredentialStore",
    "DuplicateAccountError",
    "EMAIL_EXISTS_MESSAGE",
    "LOGIN_FAILED_MESSAGE",
    "SessionManager",
]
