"""Aggregate API routers."""

from fastapi import APIRouter

from .ghosts import router as ghosts_router
from .leaderboard import router as leaderboard_router
from .system import router as system_router

ALL_ROUTERS: tuple[APIRouter, ...] = (
    system_router,
    leaderboard_router,
    ghosts_router,
)

__all__ = ["ALL_ROUTERS"]
