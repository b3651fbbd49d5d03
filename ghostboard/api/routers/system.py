"""System-level API endpoints."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter

router = APIRouter(tags=["system"])


@router.get("/")
def root() -> Dict[str, Any]:
    """Landing response pointing at the useful endpoints."""

    return {"ok": True, "hint": "Try /health or /getRecords"}


@router.get("/health")
def health() -> Dict[str, Any]:
    """Simple readiness probe."""

    return {"ok": True, "name": "ghostboard"}


__all__ = ["router"]
