"""Leaderboard endpoints."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from ...core.database import RecordStore, get_store
from ...models import LapSubmission
from ...services.leaderboard import submit
from ...services.queries import WILDCARD, RecordFilters, list_records

router = APIRouter(tags=["leaderboard"])


@router.post("/leaderboard")
def submit_result(body: Any = Body(...), store: RecordStore = Depends(get_store)):
    """Submit a lap; only a strictly faster time replaces the stored best."""

    submission = LapSubmission.parse(body)
    status = submit(store, submission)
    return {"ok": True, "status": status.value}


@router.get("/getRecords")
def get_records(
    car: int = WILDCARD,
    track: int = WILDCARD,
    layout: int = WILDCARD,
    condition: int = WILDCARD,
    weather: int = WILDCARD,
    store: RecordStore = Depends(get_store),
) -> Dict[str, Any]:
    """List records for a combo, fastest first. -1 matches any value."""

    filters = RecordFilters(
        car=car, track=track, layout=layout, condition=condition, weather=weather
    )
    return {"records": list_records(store, filters)}


__all__ = ["router"]
