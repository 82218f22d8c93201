"""Services package."""

from finledger.services.storage import (
    SESSION_KEY,
    TRANSACTIONS_KEY,
    CorruptDataError,
    FileStorage,
    InMemoryStorage,
    KeyValueStorageInterface,
    StorageError,
    StorageReadError,
    StorageWriteError,
)

__all__ = [
    "SESSION_KEY",
    "TRANSACTIONS_KEY",
    "CorruptDataError",
    "FileStorage",
    "InMemoryStorage",
    "KeyValueStorageInterface",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
]
