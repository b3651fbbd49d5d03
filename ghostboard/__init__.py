"""Time-trial leaderboard and ghost replay storage service."""

__version__ = "0.1.0"
