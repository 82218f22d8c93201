"""Tests for the credential store."""

import pytest

from finledger.auth import CredentialStore, DuplicateAccountError
from finledger.models import Account


class TestLookup:
    """Tests for login lookups."""

    def test_default_accounts(self, credentials):
        assert len(credentials) == 2
        admin = credentials.get("1")
        assert admin.email == "admin@example.com"
        assert admin.is_admin is True
        assert credentials.get("2").is_admin is False

    def test_find_by_email_and_secret(self, credentials):
        account = credentials.find_by_email_and_secret("user@example.com", "user123")
        assert account is not None
        assert account.id == "2"

    def test_wrong_secret_finds_nothing(self, credentials):
        assert credentials.find_by_email_and_secret("user@example.com", "admin123") is None

    def test_match_is_exact(self, credentials):
        """Test no case folding or partial matching."""
        assert credentials.find_by_email_and_secret("USER@example.com", "user123") is None
        assert credentials.find_by_email_and_secret("user@example.com", "user12") is None

    def test_exists_by_email(self, credentials):
        assert credentials.exists_by_email("admin@example.com") is True
        assert credentials.exists_by_email("nobody@example.com") is False

    def test_get_unknown_id(self, credentials):
        assert credentials.get("99") is None


class TestCreate:
    """Tests for registration writes."""

    def test_create_assigns_next_id(self, credentials):
        account = credentials.create("New Person", "new@example.com", "s3cret")
        assert account.id == "3"
        assert account.is_admin is False
        assert len(credentials) == 3
        assert credentials.find_by_email_and_secret("new@example.com", "s3cret") == account

    def test_duplicate_email_is_rejected(self, credentials):
        with pytest.raises(DuplicateAccountError):
            credentials.create("Someone", "user@example.com", "whatever")
        assert len(credentials) == 2

    def test_stores_are_independent(self):
        first = CredentialStore()
        second = CredentialStore()
        first.create("Only Here", "only@example.com", "pw")
        assert first.exists_by_email("only@example.com")
        assert not second.exists_by_email("only@example.com")

    def test_initial_accounts_must_be_unique(self):
        account = Account(id="1", name="A", email="a@b.co", secret="x")
        clone = Account(id="2", name="B", email="a@b.co", secret="y")
        with pytest.raises(DuplicateAccountError):
            CredentialStore([account, clone])

    def test_empty_registry(self):
        store = CredentialStore([])
        assert len(store) == 0
        assert store.create("First", "first@example.com", "pw").id == "1"


class TestSessions:
    """Tests for the secret-free listing."""

    def test_sessions_have_no_secret(self, credentials):
        listing = credentials.sessions()
        assert [session.id for session in listing] == ["1", "2"]
        for session in listing:
            assert "secret" not in session.to_storage_dict()


class TestDiscard:
    """Tests for rolling back a create()."""

    def test_discard_newest_account(self, credentials):
        account = credentials.create("New Person", "new@example.com", "pw")

        assert credentials.discard(account.id) is True
        assert len(credentials) == 2
        assert credentials.create("Again", "new@example.com", "pw").id == "3"

    def test_discard_only_the_newest(self, credentials):
        credentials.create("New Person", "new@example.com", "pw")

        assert credentials.discard("2") is False
        assert credentials.discard("99") is False
        assert len(credentials) == 3

    def test_secret_kept_verbatim(self, credentials):
        credentials.create("Spacey", "s@example.com", " pw ")
        assert credentials.find_by_email_and_secret("s@example.com", " pw ") is not None
        assert credentials.find_by_email_and_secret("s@example.com", "pw") is None
