"""Leaderboard record model and its JSON document representation."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from sqlmodel import Field as ORMField, SQLModel

from ..core.time import isoformat_z, utcnow

RecordKey = Tuple[str, int, int, int, int, int]


class LeaderboardRecord(SQLModel):
    """Best lap of one driver on one combo, plus the attached ghost if any."""

    id: int = ORMField(ge=0)
    driver_id: str
    name: str = ""
    car: int
    track: int
    layout: int
    condition: int
    weather: int
    timing: float
    ghost_length: int = 0
    ghost_key: Optional[str] = None
    ghost_path: Optional[str] = None
    sha256: Optional[str] = None
    size: Optional[int] = None
    updated_at: datetime = ORMField(default_factory=utcnow)

    @property
    def key(self) -> RecordKey:
        return (
            self.driver_id,
            self.car,
            self.track,
            self.layout,
            self.condition,
            self.weather,
        )

    @property
    def locator(self) -> Optional[str]:
        return self.ghost_key or self.ghost_path

    @property
    def has_ghost(self) -> bool:
        return bool(self.sha256 and self.locator)

    def to_document(self) -> Dict[str, Any]:
        """Serialise to the persisted JSON shape."""

        return {
            "id": self.id,
            "driver__steamID64": self.driver_id,
            "name": self.name,
            "car": self.car,
            "track": self.track,
            "layout": self.layout,
            "condition": self.condition,
            "weather": self.weather,
            "timing": self.timing,
            "ghostLength": self.ghost_length,
            "ghostKey": self.ghost_key,
            "ghostPath": self.ghost_path,
            "sha256": self.sha256,
            "size": self.size,
            "lastUpdatedAt": isoformat_z(self.updated_at),
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "LeaderboardRecord":
        """Build a record from a persisted entry.

        Entries written before `lastUpdatedAt` existed carry `createdAt`.
        """

        fields: Dict[str, Any] = {
            "id": doc["id"],
            "driver_id": str(doc["driver__steamID64"]),
            "name": doc.get("name") or "",
            "car": doc["car"],
            "track": doc["track"],
            "layout": doc["layout"],
            "condition": doc["condition"],
            "weather": doc["weather"],
            "timing": doc["timing"],
            "ghost_length": doc.get("ghostLength") or 0,
            "ghost_key": doc.get("ghostKey"),
            "ghost_path": doc.get("ghostPath"),
            "sha256": doc.get("sha256"),
            "size": doc.get("size"),
        }
        stamp = doc.get("lastUpdatedAt") or doc.get("createdAt")
        if stamp:
            fields["updated_at"] = stamp
        return cls.model_validate(fields)


__all__ = ["LeaderboardRecord", "RecordKey"]
