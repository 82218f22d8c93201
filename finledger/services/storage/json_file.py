"""
File Storage Implementation

DESIGN DECISION: Each key is one JSON document in a directory
(".finledger/transactions.json", ".finledger/session.json").
1. Users can inspect their ledger with any text editor
2. No database setup required
3. Writes go to a temp file that is atomically renamed over the target,
   so a crash never leaves a half-written ledger

TRADEOFFS:
- The whole ledger is rewritten on every change (fine for personal use)
- No locking; one writer at a time is assumed
"""

import os
import re
import tempfile
from pathlib import Path
from typing import Optional, Union

import structlog
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from finledger.services.storage.interface import (
    KeyValueStorageInterface,
    StorageError,
    StorageReadError,
    StorageWriteError,
)


_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_-][A-Za-z0-9_.-]*$")

logger = structlog.get_logger("finledger.storage")


class FileStorage(KeyValueStorageInterface):
    """
    Directory-backed key-value store.

    Transient OS errors on write/remove are retried with exponential
    backoff before surfacing as StorageWriteError.
    """

    def __init__(
        self,
        directory: Union[str, Path],
        write_attempts: int = 3,
    ):
        self._directory = Path(directory)
        self._retrying = Retrying(
            stop=stop_after_attempt(write_attempts),
            wait=wait_exponential(multiplier=0.1, max=2),
            retry=retry_if_exception_type(OSError),
            before_sleep=self._log_retry,
            reraise=True,
        )

    @property
    def directory(self) -> Path:
        return self._directory

    def _path_for(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self._directory / f"{key}.json"

    @staticmethod
    def _log_retry(retry_state) -> None:
        logger.warning(
            "storage_write_retry",
            attempt=retry_state.attempt_number,
            error=str(retry_state.outcome.exception()),
        )

    def get(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageReadError(f"Failed to read '{key}' from {path}: {e}")

    def set(self, key: str, value: str) -> None:
        path = self._path_for(key)
        try:
            self._retrying(self._write_atomic, path, value)
        except OSError as e:
            raise StorageWriteError(f"Failed to write '{key}' to {path}: {e}")

    def remove(self, key: str) -> None:
        path = self._path_for(key)
        try:
            self._retrying(path.unlink, missing_ok=True)
        except OSError as e:
            raise StorageWriteError(f"Failed to remove '{key}' at {path}: {e}")

    def _write_atomic(self, path: Path, value: str) -> None:
        self._directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self._directory,
            prefix=f".{path.stem}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
