"""Ghost replay upload and download endpoints."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from ...core.database import RecordStore, get_store
from ...core.errors import ValidationError
from ...models import GhostUploadForm
from ...services.ghosts import GhostBlobStore, get_ghost_store
from ...services.leaderboard import attach_ghost
from ...services.queries import RecordFilters, open_best_ghost

router = APIRouter(tags=["ghosts"])


@router.post("/ghost")
async def upload_ghost(
    request: Request,
    store: RecordStore = Depends(get_store),
    blobs: GhostBlobStore = Depends(get_ghost_store),
) -> Dict[str, Any]:
    """Upload a ghost file (`ghost`) with the lap fields as form values."""

    max_bytes = request.app.state.settings.max_ghost_bytes
    form = await request.form()
    try:
        ghost = form.get("ghost")
        if not isinstance(ghost, UploadFile):
            raise ValidationError("Missing ghost file field 'ghost'.")

        data = await ghost.read(max_bytes + 1)
        if len(data) > max_bytes:
            raise ValidationError(f"Ghost too large. Maximum size is {max_bytes} bytes.")

        fields = {key: value for key, value in form.items() if isinstance(value, str)}
        parsed = GhostUploadForm.from_fields(fields)
    finally:
        await form.close()

    receipt = await run_in_threadpool(attach_ghost, store, blobs, parsed, data)
    return {
        "ok": True,
        "backend": receipt.backend,
        "storedAs": receipt.stored_as,
        "size": receipt.size,
        "attached": receipt.attached,
    }


@router.get("/ghost/bytes")
def download_best_ghost(
    car: int = 0,
    track: int = 0,
    layout: int = 0,
    condition: int = 0,
    weather: int = 0,
    steamid: Optional[str] = None,
    store: RecordStore = Depends(get_store),
    blobs: GhostBlobStore = Depends(get_ghost_store),
):
    """Stream the fastest ghost for a combo, optionally for one driver."""

    filters = RecordFilters(
        car=car, track=track, layout=layout, condition=condition, weather=weather
    )
    _, blob = open_best_ghost(store, blobs, filters, steamid or None)

    headers = {}
    if blob.length is not None:
        headers["Content-Length"] = str(blob.length)
    return StreamingResponse(
        blob.iter_chunks(), media_type="application/octet-stream", headers=headers
    )


__all__ = ["router"]
