"""Best-time submission and ghost attachment."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable

from ..core.database import RecordStore
from ..core.errors import StorageError
from ..core.time import utcnow
from ..models import GhostUploadForm, LapSubmission, LeaderboardRecord
from .ghosts import GhostBlobStore, verify_digest

logger = logging.getLogger(__name__)


class SubmitStatus(str, enum.Enum):
    CREATED = "created"
    UPDATED_BEST = "updated_best"
    IGNORED_SLOWER = "ignored_slower"


@dataclass(frozen=True)
class GhostReceipt:
    backend: str
    stored_as: str
    size: int
    attached: bool = True


def next_id(records: Iterable[LeaderboardRecord], floor: int = 0) -> int:
    """One more than the largest id present or reserved (first id is 1).

    Callers must hold the store lock between allocation and insertion.
    """

    return max([floor, *(record.id for record in records)]) + 1


def _snapshot(record: LeaderboardRecord) -> Dict[str, Any]:
    return {name: getattr(record, name) for name in LeaderboardRecord.model_fields}


def _restore(record: LeaderboardRecord, snapshot: Dict[str, Any]) -> None:
    for name, value in snapshot.items():
        setattr(record, name, value)


def _save_new(store: RecordStore, record: LeaderboardRecord) -> None:
    store.append(record)
    try:
        store.save()
    except StorageError:
        store.remove(record)
        raise


def _save_changed(store: RecordStore, record: LeaderboardRecord, snapshot: Dict[str, Any]) -> None:
    try:
        store.save()
    except StorageError:
        _restore(record, snapshot)
        raise


def _new_record(store: RecordStore, lap: LapSubmission) -> LeaderboardRecord:
    return LeaderboardRecord(
        id=next_id(store.records, store.reserved_id),
        driver_id=lap.driver_id,
        name=lap.name,
        car=lap.car,
        track=lap.track,
        layout=lap.layout,
        condition=lap.condition,
        weather=lap.weather,
        timing=lap.timing,
        ghost_length=lap.ghost_length,
    )


def submit(store: RecordStore, submission: LapSubmission) -> SubmitStatus:
    """Insert a new best lap or improve an existing one.

    A failed save leaves the collection as it was before the call.
    """

    with store.lock:
        existing = store.find(submission.key)

        if existing is None:
            _save_new(store, _new_record(store, submission))
            return SubmitStatus.CREATED

        if submission.timing < existing.timing:
            before = _snapshot(existing)
            existing.timing = submission.timing
            existing.ghost_length = submission.ghost_length
            existing.name = submission.name
            existing.updated_at = utcnow()
            _save_changed(store, existing, before)
            logger.info(
                "New best %.3f for driver %s on %s", submission.timing, submission.driver_id, submission.key[1:]
            )
            return SubmitStatus.UPDATED_BEST

        return SubmitStatus.IGNORED_SLOWER


def attach_ghost(
    store: RecordStore, blobs: GhostBlobStore, form: GhostUploadForm, data: bytes
) -> GhostReceipt:
    """Verify, store and link an uploaded ghost to its driver/combo record.

    Order: verify digest, write blob, update or create record, persist.
    The declared `size` is ignored in favour of the received byte count.
    A ghost slower than the stored best is kept as a blob but not linked,
    so a record's timing never increases.
    """

    digest = verify_digest(data, form.sha256)
    size = len(data)
    locator = blobs.put(digest, data)
    is_local = blobs.backend == "local"
    stored_as = blobs.filename_for(digest) if is_local else locator

    with store.lock:
        record = store.find(form.key)
        if record is not None and form.timing > record.timing:
            logger.info(
                "Ghost %s for driver %s is slower than best %.3f; not linked",
                digest,
                form.driver_id,
                record.timing,
            )
            return GhostReceipt(backend=blobs.backend, stored_as=stored_as, size=size, attached=False)

        created = record is None
        if created:
            record = _new_record(store, form)
            before: Dict[str, Any] = {}
        else:
            before = _snapshot(record)
            record.timing = form.timing
            record.ghost_length = form.ghost_length
            record.name = form.name
            record.updated_at = utcnow()

        record.ghost_key = None if is_local else locator
        record.ghost_path = locator if is_local else None
        record.sha256 = digest
        record.size = size

        if created:
            _save_new(store, record)
        else:
            _save_changed(store, record, before)

    return GhostReceipt(backend=blobs.backend, stored_as=stored_as, size=size)


__all__ = ["GhostReceipt", "SubmitStatus", "attach_ghost", "next_id", "submit"]
