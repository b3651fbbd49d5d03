"""Core configuration and infrastructure helpers."""

from .config import RemoteStorageSettings, Settings, load_settings, settings
from .errors import (
    GhostboardError,
    IntegrityError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from .time import isoformat_z, utcnow

__all__ = [
    "GhostboardError",
    "IntegrityError",
    "NotFoundError",
    "RemoteStorageSettings",
    "Settings",
    "StorageError",
    "ValidationError",
    "isoformat_z",
    "load_settings",
    "settings",
    "utcnow",
]
