"""Application settings and environment helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

from dotenv import load_dotenv

load_dotenv(override=False)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer") from exc


def _split_csv(raw: str | None) -> List[str]:
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


def _unique(values: Iterable[str]) -> List[str]:
    seen = set()
    ordered: List[str] = []
    for value in values:
        if value not in seen:
            seen.add(value)
            ordered.append(value)
    return ordered


@dataclass(frozen=True)
class RemoteStorageSettings:
    """Credentials for the S3-compatible ghost bucket (Cloudflare R2)."""

    bucket: str
    access_key_id: str
    secret_access_key: str
    endpoint_url: Optional[str] = None
    region: str = "auto"


@dataclass(frozen=True)
class Settings:
    data_dir: Path = Path("data")
    records_file: Path = Path("data/records.json")
    ghost_dir: Path = Path("data/ghosts")
    ghost_ext: str = "tsreplay"
    max_ghost_bytes: int = 50 * 1024 * 1024
    remote: Optional[RemoteStorageSettings] = None
    allowed_cors_origins: List[str] = field(default_factory=lambda: ["*"])
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"


def _remote_from_env() -> Optional[RemoteStorageSettings]:
    """Return remote storage settings only when every credential is present."""

    bucket = os.getenv("R2_BUCKET")
    access_key = os.getenv("R2_ACCESS_KEY_ID")
    secret_key = os.getenv("R2_SECRET_ACCESS_KEY")
    if not (bucket and access_key and secret_key):
        return None

    endpoint = os.getenv("R2_ENDPOINT") or None
    account_id = os.getenv("R2_ACCOUNT_ID")
    if not endpoint and account_id:
        endpoint = f"https://{account_id}.r2.cloudflarestorage.com"

    return RemoteStorageSettings(
        bucket=bucket,
        access_key_id=access_key,
        secret_access_key=secret_key,
        endpoint_url=endpoint,
        region=os.getenv("R2_REGION", "auto"),
    )


def load_settings() -> Settings:
    """Build settings from the process environment (and `.env`, if present)."""

    data_dir = Path(os.getenv("GHOSTBOARD_DATA_DIR", "data"))
    records_file = Path(
        os.getenv("GHOSTBOARD_RECORDS_FILE") or data_dir / "records.json"
    )
    ghost_dir = Path(os.getenv("GHOSTBOARD_GHOST_DIR") or data_dir / "ghosts")
    ghost_ext = os.getenv("GHOSTBOARD_GHOST_EXT", "tsreplay").lstrip(".")

    origins = _unique(_split_csv(os.getenv("ALLOWED_CORS_ORIGINS"))) or ["*"]

    return Settings(
        data_dir=data_dir,
        records_file=records_file,
        ghost_dir=ghost_dir,
        ghost_ext=ghost_ext or "tsreplay",
        max_ghost_bytes=_env_int("GHOSTBOARD_MAX_GHOST_BYTES", 50 * 1024 * 1024),
        remote=_remote_from_env(),
        allowed_cors_origins=origins,
        host=os.getenv("HOST", "0.0.0.0"),
        port=_env_int("PORT", 3000),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


settings = load_settings()


__all__ = ["RemoteStorageSettings", "Settings", "load_settings", "settings"]
