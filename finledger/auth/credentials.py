"""
Credential Store

In-memory registry of accounts. It is the only writer of new accounts
and the only place a secret is compared.

DESIGN DECISION: The registry is an object handed to the session
manager, not module-level state. Two managers built on two stores
never see each other's accounts.

Accounts are not persisted; a restart brings back the default accounts.
"""

import hmac
from typing import Iterable, Optional

from finledger.models.account import Account, Session


DEFAULT_ACCOUNTS = (
    {
        "id": "1",
        "name": "Admin User",
        "email": "admin@example.com",
        "secret": "admin123",
        "is_admin": True,
    },
    {
        "id": "2",
        "name": "Test User",
        "email": "user@example.com",
        "secret": "user123",
        "is_admin": False,
    },
)


class DuplicateAccountError(ValueError):
    """An account with this email already exists."""
    pass


class CredentialStore:
    """
    Registry of Account records.

    Invariant: email is unique across all accounts.
    """

    def __init__(self, accounts: Optional[Iterable[Account]] = None):
        """
        Args:
            accounts: Initial accounts. Defaults to the two built-in
                      accounts (one admin, one regular user).
        """
        if accounts is None:
            accounts = [Account(**record) for record in DEFAULT_ACCOUNTS]
        self._accounts: list[Account] = []
        for account in accounts:
            if self.exists_by_email(account.email):
                raise DuplicateAccountError(f"Email already exists: {account.email}")
            self._accounts.append(account)

    def __len__(self) -> int:
        return len(self._accounts)

    def find_by_email_and_secret(self, email: str, secret: str) -> Optional[Account]:
        """Exact match on both email and secret; used for login."""
        for account in self._accounts:
            if account.email == email and hmac.compare_digest(
                account.secret.get_secret_value().encode("utf-8"),
                secret.encode("utf-8"),
            ):
                return account
        return None

    def exists_by_email(self, email: str) -> bool:
        return any(account.email == email for account in self._accounts)

    def get(self, account_id: str) -> Optional[Account]:
        for account in self._accounts:
            if account.id == account_id:
                return account
        return None

    def create(self, name: str, email: str, secret: str) -> Account:
        """
        Register a new, non-admin account.

        The id is one greater than the current number of accounts.

        Raises:
            DuplicateAccountError: If the email is already registered
        """
        if self.exists_by_email(email):
            raise DuplicateAccountError(f"Email already exists: {email}")

        account = Account(
            id=str(len(self._accounts) + 1),
            name=name,
            email=email,
            secret=secret,
            is_admin=False,
        )
        self._accounts.append(account)
        return account

    def discard(self, account_id: str) -> bool:
        """
        Undo a create() whose registration could not be completed.

        Only the most recently created account can be discarded, so
        ids stay equal to registration order. Returns False otherwise.
        """
        if not self._accounts or self._accounts[-1].id != account_id:
            return False
        self._accounts.pop()
        return True

    def sessions(self) -> list[Session]:
        """Every account without its secret, in registration order."""
        return [account.to_session() for account in self._accounts]
