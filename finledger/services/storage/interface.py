"""
Abstract Key-Value Storage Interface

DESIGN DECISION: Durable storage is an external collaborator with only
get/set/remove semantics over string values. This allows us to:
1. Use a directory of JSON documents in normal runs
2. Use in-memory storage for testing
3. Swap in any other key-value backend without touching the ledger

Two keys are used:
- "session"       -> JSON object of the active Session, or absent
- "transactions"  -> JSON array of every Transaction, or absent
"""

import json
from abc import ABC, abstractmethod
from typing import Any, Optional


SESSION_KEY = "session"
TRANSACTIONS_KEY = "transactions"


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageReadError(StorageError):
    """Backend could not be read."""
    pass


class StorageWriteError(StorageError):
    """Backend rejected or failed a write/remove."""
    pass


class CorruptDataError(StorageError):
    """A stored value is not valid JSON."""
    pass


class KeyValueStorageInterface(ABC):
    """
    Abstract interface for key-value persistence.

    Any backend must implement get/set/remove. All calls are
    synchronous: a returned set() is durable.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read the raw value stored under key.

        Returns:
            The stored string, or None if the key is absent

        Raises:
            StorageReadError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Replace the value stored under key.

        Raises:
            StorageWriteError: If the write did not complete
        """
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """
        Remove key. Removing an absent key is not an error.

        Raises:
            StorageWriteError: If the removal did not complete
        """
        pass

    def get_json(self, key: str) -> Optional[Any]:
        """Read and decode a JSON value, or None if absent."""
        raw = self.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise CorruptDataError(f"Value stored under '{key}' is not valid JSON: {e}")

    def set_json(self, key: str, value: Any) -> None:
        """Encode value as JSON and store it."""
        self.set(key, json.dumps(value, ensure_ascii=False))
