"""Model exports."""

from .leaderboard import LeaderboardRecord, RecordKey
from .submission import GhostUploadForm, LapSubmission

__all__ = [
    "GhostUploadForm",
    "LapSubmission",
    "LeaderboardRecord",
    "RecordKey",
]
