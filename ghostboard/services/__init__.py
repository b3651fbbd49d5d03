"""Service layer helpers."""

from .ghosts import (
    GhostBlob,
    GhostBlobStore,
    LocalGhostStore,
    S3GhostStore,
    select_ghost_store,
    verify_digest,
)
from .leaderboard import GhostReceipt, SubmitStatus, attach_ghost, next_id, submit
from .queries import RecordFilters, best_ghost, list_records, open_best_ghost

__all__ = [
    "GhostBlob",
    "GhostBlobStore",
    "GhostReceipt",
    "LocalGhostStore",
    "RecordFilters",
    "S3GhostStore",
    "SubmitStatus",
    "attach_ghost",
    "best_ghost",
    "list_records",
    "next_id",
    "open_best_ghost",
    "select_ghost_store",
    "submit",
    "verify_digest",
]
