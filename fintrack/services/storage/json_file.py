"""
JSON File Storage Implementation

DESIGN DECISION: A single JSON document per user, rewritten after each
mutation. Personal finance data is at most thousands of rows, so a full
rewrite is cheap and keeps the file human-readable.

TRADEOFFS:
- No partial writes: the file is written to a temp file and swapped in
- No concurrent writers: last write wins
- File errors are retried, then surfaced as StorageError
- A failed write rolls memory back to the last committed state
"""

import json
import os
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from fintrack.config import StorageSettings, get_settings
from fintrack.log import get_logger
from fintrack.models.finance import FinanceSnapshot
from fintrack.services.storage.interface import ConnectionError, StorageError
from fintrack.services.storage.memory import InMemoryFinanceStore


FILE_FORMAT_VERSION = 1

logger = get_logger(__name__)


class JsonFileFinanceStore(InMemoryFinanceStore):
    """
    In-memory store that mirrors every change to a JSON file.

    The file is read once at construction; a missing file starts an
    empty store.
    """

    def __init__(
        self,
        path: Optional[str] = None,
        settings: Optional[StorageSettings] = None,
    ):
        self._storage_settings = settings or get_settings().storage
        self._path = Path(path or self._storage_settings.data_file)
        self._committed = self._read()
        super().__init__(self._committed)

    @property
    def path(self) -> Path:
        return self._path

    def _retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self._storage_settings.retry_attempts),
            wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
            retry=retry_if_exception_type(OSError),
            reraise=True,
        )

    def _read(self) -> FinanceSnapshot:
        """Load the snapshot from disk."""
        if not self._path.exists():
            logger.info("data_file_missing", path=str(self._path))
            return FinanceSnapshot()

        try:
            for attempt in self._retrying():
                with attempt:
                    raw = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConnectionError(f"Failed to read {self._path}: {e}")

        try:
            document = json.loads(raw)
            snapshot = FinanceSnapshot.model_validate(document["snapshot"])
        except (json.JSONDecodeError, KeyError, TypeError, ValidationError) as e:
            raise StorageError(f"Corrupt data file {self._path}: {e}")

        logger.info(
            "data_file_loaded",
            path=str(self._path),
            transactions=len(snapshot.transactions),
            categories=len(snapshot.categories),
        )
        return snapshot

    def _write(self, payload: str) -> None:
        """Write to a sibling temp file, then atomically replace the target."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        tmp_path.write_text(payload, encoding="utf-8")
        os.replace(tmp_path, self._path)

    async def _commit(self) -> None:
        """
        Persist the current state, or roll memory back to the last
        committed snapshot when the write fails.
        """
        snapshot = self._snapshot()
        document = {
            "version": FILE_FORMAT_VERSION,
            "snapshot": snapshot.model_dump(mode="json"),
        }
        payload = json.dumps(document, indent=2)

        try:
            for attempt in self._retrying():
                with attempt:
                    self._write(payload)
        except OSError as e:
            logger.error("data_file_write_failed", path=str(self._path), error=str(e))
            self._load(self._committed)
            raise StorageError(f"Failed to write {self._path}: {e}")

        self._committed = snapshot
