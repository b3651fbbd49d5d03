"""JSON document store for leaderboard records.

The whole collection lives in memory and is rewritten to a single JSON file
after every mutation. A document that fails to parse at boot is moved aside
and replaced with an empty one so the service always starts.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
import threading
import uuid
from pathlib import Path
from typing import Any, List, Optional, Sequence

from fastapi import Request
from pydantic import ValidationError as PydanticValidationError

from ..models.leaderboard import LeaderboardRecord, RecordKey
from .errors import StorageError
from .time import utcnow

logger = logging.getLogger(__name__)


class RecordStore:
    """Owns the in-memory record collection and its backing document."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self.lock = threading.RLock()
        self._records: List[LeaderboardRecord] = []
        # Highest id among entries that could not be loaded; never handed out again.
        self.reserved_id = 0

    @property
    def records(self) -> Sequence[LeaderboardRecord]:
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def find(self, key: RecordKey) -> Optional[LeaderboardRecord]:
        for record in self._records:
            if record.key == key:
                return record
        return None

    def append(self, record: LeaderboardRecord) -> None:
        self._records.append(record)

    def remove(self, record: LeaderboardRecord) -> None:
        self._records = [r for r in self._records if r is not record]

    def load(self) -> List[LeaderboardRecord]:
        """Read the persisted document; never raises."""

        with self.lock:
            self.reserved_id = 0
            self._records = self._read()
            logger.info("Loaded %d leaderboard records from %s", len(self._records), self.path)
            return list(self._records)

    def _read(self) -> List[LeaderboardRecord]:
        if not self.path.exists():
            try:
                self._write([])
            except StorageError:
                logger.exception("Could not create empty record document at %s", self.path)
            return []

        try:
            raw = self.path.read_text(encoding="utf-8").strip()
        except UnicodeDecodeError:
            self._quarantine()
            return []
        except OSError:
            logger.exception("Could not read record document %s; starting empty", self.path)
            return []

        if not raw:
            return []

        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning("Record document %s is corrupted: %s", self.path, exc)
            self._quarantine()
            return []

        if not isinstance(parsed, list):
            logger.warning(
                "Record document %s holds %s instead of a list; resetting",
                self.path,
                type(parsed).__name__,
            )
            return []

        return self._decode_entries(parsed)

    def _decode_entries(self, entries: List[Any]) -> List[LeaderboardRecord]:
        records: List[LeaderboardRecord] = []
        skipped: List[Any] = []
        for index, entry in enumerate(entries):
            if not isinstance(entry, dict):
                logger.warning("Skipping non-object entry #%d in %s", index, self.path)
                skipped.append(entry)
                continue
            try:
                records.append(LeaderboardRecord.from_document(entry))
            except (KeyError, TypeError, PydanticValidationError) as exc:
                logger.warning("Skipping invalid entry #%d in %s: %s", index, self.path, exc)
                skipped.append(entry)

        if skipped:
            self._backup()
            self.reserved_id = max(
                (_entry_id(entry) for entry in skipped), default=0
            )
        return records

    def quarantine_path(self) -> Path:
        stamp = utcnow().strftime("%Y%m%dT%H%M%S%fZ")
        name = f"{self.path.stem}.corrupt-{stamp}-{uuid.uuid4().hex[:8]}{self.path.suffix}"
        return self.path.with_name(name)

    def _quarantine(self) -> None:
        target = self.quarantine_path()
        try:
            os.replace(self.path, target)
            self._write([])
        except (OSError, StorageError):
            logger.exception("Failed to quarantine corrupted record document %s", self.path)
            return
        logger.warning("Moved corrupted record document to %s", target)

    def _backup(self) -> None:
        """Copy the document aside before unreadable entries are dropped by a save."""

        target = self.quarantine_path()
        try:
            shutil.copy2(self.path, target)
        except OSError:
            logger.exception("Failed to back up record document %s", self.path)
            return
        logger.warning("Copied record document with unreadable entries to %s", target)

    def save(self) -> None:
        """Rewrite the backing document with the full collection."""

        with self.lock:
            self._write([record.to_document() for record in self._records])

    def _write(self, documents: List[dict]) -> None:
        tmp_name: Optional[str] = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(documents, handle, indent=2)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self.path)
        except OSError as exc:
            logger.exception("Failed to persist records to %s", self.path)
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Failed to persist records: {exc}") from exc


def _entry_id(entry: Any) -> int:
    if not isinstance(entry, dict):
        return 0
    try:
        return max(int(entry.get("id")), 0)
    except (TypeError, ValueError):
        return 0


def get_store(request: Request) -> RecordStore:
    """FastAPI dependency that returns the app-owned record store."""

    return request.app.state.store


__all__ = ["RecordStore", "get_store"]
