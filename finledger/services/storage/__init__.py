"""
Storage Services Package

Provides the abstract key-value interface and concrete backends.
The ledger and session manager only ever see KeyValueStorageInterface.
"""

from finledger.services.storage.interface import (
    SESSION_KEY,
    TRANSACTIONS_KEY,
    CorruptDataError,
    KeyValueStorageInterface,
    StorageError,
    StorageReadError,
    StorageWriteError,
)
from finledger.services.storage.json_file import FileStorage
from finledger.services.storage.memory import InMemoryStorage

__all__ = [
    # Interface
    "KeyValueStorageInterface",
    "SESSION_KEY",
    "TRANSACTIONS_KEY",
    # Exceptions
    "CorruptDataError",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    # Backends
    "FileStorage",
    "InMemoryStorage",
]
