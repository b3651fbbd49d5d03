"""Content-addressed ghost replay storage.

Ghost blobs are stored under their SHA-256 digest, either in an S3-compatible
bucket (Cloudflare R2 in production) or in a local directory. The backend is
chosen once when the app is built.
"""

from __future__ import annotations

import hashlib
import logging
import os
import re
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO, Iterator, Optional

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import Request

from ..core.config import RemoteStorageSettings, Settings
from ..core.errors import IntegrityError, NotFoundError, StorageError, ValidationError

logger = logging.getLogger(__name__)

_DIGEST_RE = re.compile(r"^[0-9a-f]{64}$")
CHUNK_SIZE = 64 * 1024


def compute_digest(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def verify_digest(data: bytes, declared: str) -> str:
    """Return the digest of `data` if it matches `declared` (case-insensitive).

    Raises IntegrityError carrying both values when it does not.
    """

    provided = (declared or "").strip().lower()
    computed = compute_digest(data)
    if computed != provided:
        logger.warning("Rejected ghost upload: computed %s, provided %s", computed, provided)
        raise IntegrityError(computed=computed, provided=provided)
    return computed


@dataclass
class GhostBlob:
    """Readable ghost payload and, when the backend knows it, its length."""

    stream: BinaryIO
    length: Optional[int] = None

    def iter_chunks(self, chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
        try:
            while True:
                chunk = self.stream.read(chunk_size)
                if not chunk:
                    break
                yield chunk
        finally:
            self.stream.close()

    def read(self) -> bytes:
        return b"".join(self.iter_chunks())


class GhostBlobStore(ABC):
    """Storage contract shared by both ghost backends."""

    backend: str = ""

    def __init__(self, ext: str = "tsreplay"):
        self.ext = ext.lstrip(".")

    def filename_for(self, digest: str) -> str:
        if not _DIGEST_RE.match(digest):
            raise ValidationError(f"Invalid ghost digest: {digest!r}")
        return f"{digest}.{self.ext}"

    @abstractmethod
    def locator_for(self, digest: str) -> str:
        """Deterministic backend locator (object key or path) for a digest."""

    @abstractmethod
    def put(self, digest: str, data: bytes) -> str:
        """Store `data` under `digest` and return its locator."""

    @abstractmethod
    def get(self, locator: str) -> GhostBlob:
        """Open a stored ghost by locator."""


class LocalGhostStore(GhostBlobStore):
    """Ghosts written as `<digest>.<ext>` files under one directory."""

    backend = "local"

    def __init__(self, directory: Path | str, ext: str = "tsreplay"):
        super().__init__(ext)
        self.directory = Path(directory)

    def locator_for(self, digest: str) -> str:
        return str(self.directory / self.filename_for(digest))

    def put(self, digest: str, data: bytes) -> str:
        target = Path(self.locator_for(digest))
        tmp_name: Optional[str] = None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=self.directory)
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, target)
        except OSError as exc:
            logger.exception("Failed to write ghost %s", target)
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Failed to store ghost: {exc}") from exc
        logger.info("Stored ghost %s (%d bytes)", target, len(data))
        return str(target)

    def get(self, locator: str) -> GhostBlob:
        path = Path(locator)
        try:
            handle = path.open("rb")
        except FileNotFoundError as exc:
            raise NotFoundError("ghost not found") from exc
        except OSError as exc:
            logger.exception("Failed to open ghost %s", path)
            raise StorageError(f"Failed to read ghost: {exc}") from exc
        try:
            length = path.stat().st_size
        except OSError:
            length = None
        return GhostBlob(stream=handle, length=length)


class S3GhostStore(GhostBlobStore):
    """Ghosts stored as `<prefix>/<digest>.<ext>` objects in a bucket."""

    backend = "r2"

    def __init__(self, client: Any, bucket: str, prefix: str = "ghosts", ext: str = "tsreplay"):
        super().__init__(ext)
        self.client = client
        self.bucket = bucket
        self.prefix = prefix.strip("/")

    def locator_for(self, digest: str) -> str:
        name = self.filename_for(digest)
        return f"{self.prefix}/{name}" if self.prefix else name

    def put(self, digest: str, data: bytes) -> str:
        key = self.locator_for(digest)
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType="application/octet-stream",
                ContentLength=len(data),
            )
        except (ClientError, BotoCoreError) as exc:
            logger.exception("Failed to upload ghost %s to bucket %s", key, self.bucket)
            raise StorageError(f"Failed to store ghost: {exc}") from exc
        logger.info("Stored ghost s3://%s/%s (%d bytes)", self.bucket, key, len(data))
        return key

    def get(self, locator: str) -> GhostBlob:
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=locator)
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            if code in ("NoSuchKey", "404", "NotFound"):
                raise NotFoundError("ghost not found") from exc
            logger.exception("Failed to fetch ghost %s from bucket %s", locator, self.bucket)
            raise StorageError(f"Failed to read ghost: {exc}") from exc
        except BotoCoreError as exc:
            logger.exception("Failed to fetch ghost %s from bucket %s", locator, self.bucket)
            raise StorageError(f"Failed to read ghost: {exc}") from exc
        return GhostBlob(stream=response["Body"], length=response.get("ContentLength"))


def build_s3_client(remote: RemoteStorageSettings) -> Any:
    return boto3.client(
        "s3",
        endpoint_url=remote.endpoint_url,
        aws_access_key_id=remote.access_key_id,
        aws_secret_access_key=remote.secret_access_key,
        region_name=remote.region,
        config=BotoConfig(signature_version="s3v4"),
    )


def select_ghost_store(settings: Settings, client: Any = None) -> GhostBlobStore:
    """Pick the remote backend when credentials are configured, else local disk."""

    if settings.remote is not None:
        store: GhostBlobStore = S3GhostStore(
            client or build_s3_client(settings.remote),
            bucket=settings.remote.bucket,
            ext=settings.ghost_ext,
        )
        logger.info("Ghost storage: bucket %s", settings.remote.bucket)
    else:
        store = LocalGhostStore(settings.ghost_dir, ext=settings.ghost_ext)
        logger.info("Ghost storage: local directory %s", settings.ghost_dir)
    return store


def get_ghost_store(request: Request) -> GhostBlobStore:
    """FastAPI dependency that returns the backend chosen at startup."""

    return request.app.state.ghosts


__all__ = [
    "GhostBlob",
    "get_ghost_store",
    "GhostBlobStore",
    "LocalGhostStore",
    "S3GhostStore",
    "build_s3_client",
    "compute_digest",
    "select_ghost_store",
    "verify_digest",
]
