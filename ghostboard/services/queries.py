"""Filtered leaderboard listings and best-ghost lookup."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..core.database import RecordStore
from ..core.errors import NotFoundError
from ..models import LeaderboardRecord
from .ghosts import GhostBlob, GhostBlobStore

WILDCARD = -1

_COMBO_FIELDS = ("car", "track", "layout", "condition", "weather")


@dataclass(frozen=True)
class RecordFilters:
    """Combo filter; None or -1 on a field matches any value."""

    car: Optional[int] = None
    track: Optional[int] = None
    layout: Optional[int] = None
    condition: Optional[int] = None
    weather: Optional[int] = None

    def matches(self, record: LeaderboardRecord) -> bool:
        for name in _COMBO_FIELDS:
            wanted = getattr(self, name)
            if wanted is None or wanted == WILDCARD:
                continue
            if getattr(record, name) != wanted:
                return False
        return True


def record_to_public(record: LeaderboardRecord) -> Dict[str, Any]:
    """Listing shape expected by the game client; blob fields stay internal."""

    out: Dict[str, Any] = {
        "id": record.id,
        "driver__steamID64": record.driver_id,
        "car": record.car,
        "track": record.track,
        "layout": record.layout,
        "condition": record.condition,
        "weather": record.weather,
        "timing": record.timing,
    }
    if record.name:
        out["name"] = record.name
    return out


def filter_records(
    records: Iterable[LeaderboardRecord], filters: RecordFilters
) -> List[LeaderboardRecord]:
    # sorted() is stable, so equal timings keep insertion order.
    return sorted((r for r in records if filters.matches(r)), key=lambda r: r.timing)


def list_records(store: RecordStore, filters: RecordFilters) -> List[Dict[str, Any]]:
    with store.lock:
        matched = filter_records(store.records, filters)
    return [record_to_public(record) for record in matched]


def best_ghost(
    store: RecordStore, filters: RecordFilters, driver_id: Optional[str] = None
) -> LeaderboardRecord:
    """Fastest record with an attached ghost, optionally for one driver."""

    with store.lock:
        candidates = [
            record
            for record in filter_records(store.records, filters)
            if record.has_ghost and (driver_id is None or record.driver_id == driver_id)
        ]
    if not candidates:
        raise NotFoundError("ghost not found")
    return candidates[0]


def open_best_ghost(
    store: RecordStore,
    blobs: GhostBlobStore,
    filters: RecordFilters,
    driver_id: Optional[str] = None,
) -> Tuple[LeaderboardRecord, GhostBlob]:
    record = best_ghost(store, filters, driver_id)
    blob = blobs.get(record.locator)
    if blob.length is None:
        blob.length = record.size
    return record, blob


__all__ = [
    "RecordFilters",
    "WILDCARD",
    "best_ghost",
    "filter_records",
    "list_records",
    "open_best_ghost",
    "record_to_public",
]
