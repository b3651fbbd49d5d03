"""Tests for ghost blob storage backends."""

from pathlib import Path

import pytest

from ghostboard.core.config import RemoteStorageSettings, Settings
from ghostboard.core.errors import IntegrityError, NotFoundError, ValidationError
from ghostboard.services.ghosts import (
    LocalGhostStore,
    S3GhostStore,
    select_ghost_store,
    verify_digest,
)

from .helpers import sha


def test_verify_digest_is_case_insensitive():
    data = b"\x00\x01ghost"
    assert verify_digest(data, sha(data).upper()) == sha(data)
    assert verify_digest(data, f"  {sha(data)} ") == sha(data)


def test_verify_digest_reports_both_values():
    with pytest.raises(IntegrityError) as excinfo:
        verify_digest(b"abc", sha(b"def"))
    payload = excinfo.value.payload()
    assert payload["computed"] == sha(b"abc")
    assert payload["provided"] == sha(b"def")
    assert payload["error"] == "sha256 mismatch"


def test_verify_digest_treats_malformed_digest_as_mismatch():
    for declared in ("not-a-digest", "", "abc123"):
        with pytest.raises(IntegrityError) as excinfo:
            verify_digest(b"abc", declared)
        assert excinfo.value.computed == sha(b"abc")
        assert excinfo.value.provided == declared.strip().lower()


def test_local_put_and_get(local_ghosts):
    data = b"lap replay"
    locator = local_ghosts.put(sha(data), data)

    assert Path(locator) == local_ghosts.directory / f"{sha(data)}.tsreplay"
    blob = local_ghosts.get(locator)
    assert blob.length == len(data)
    assert blob.read() == data


def test_local_put_is_idempotent(local_ghosts):
    data = b"same bytes"
    first = local_ghosts.put(sha(data), data)
    second = local_ghosts.put(sha(data), data)
    assert first == second
    assert len(list(local_ghosts.directory.iterdir())) == 1


def test_local_put_replaces_file_instead_of_truncating(local_ghosts):
    data = b"replay bytes"
    locator = Path(local_ghosts.put(sha(data), data))
    reader = locator.open("rb")
    inode = locator.stat().st_ino

    local_ghosts.put(sha(data), data)

    assert locator.stat().st_ino != inode
    assert locator.read_bytes() == data
    assert reader.read() == data
    reader.close()
    assert not any(p.name.endswith(".tmp") for p in local_ghosts.directory.iterdir())


def test_local_get_missing_raises_not_found(local_ghosts):
    with pytest.raises(NotFoundError):
        local_ghosts.get(local_ghosts.locator_for("0" * 64))


def test_custom_extension(tmp_path):
    store = LocalGhostStore(tmp_path, ext=".bin")
    assert store.locator_for("a" * 64).endswith("a" * 64 + ".bin")


def test_s3_put_uses_ghosts_prefix(s3_ghosts, s3_client):
    data = b"object"
    key = s3_ghosts.put(sha(data), data)

    assert key == f"ghosts/{sha(data)}.tsreplay"
    assert s3_client.objects[("ghost-bucket", key)] == data

    s3_ghosts.put(sha(data), data)
    assert s3_client.put_calls == 2


def test_s3_get(s3_ghosts):
    data = b"streamed"
    key = s3_ghosts.put(sha(data), data)
    blob = s3_ghosts.get(key)
    assert blob.length == len(data)
    assert b"".join(blob.iter_chunks(chunk_size=3)) == data


def test_s3_get_missing_raises_not_found(s3_ghosts):
    with pytest.raises(NotFoundError):
        s3_ghosts.get("ghosts/missing.tsreplay")


def test_locator_rejects_non_digest(local_ghosts):
    with pytest.raises(ValidationError):
        local_ghosts.locator_for("../../etc/passwd")


def test_select_local_without_credentials(tmp_path):
    store = select_ghost_store(Settings(ghost_dir=tmp_path / "g"))
    assert isinstance(store, LocalGhostStore)
    assert store.directory == tmp_path / "g"


def test_select_remote_with_credentials(s3_client):
    remote = RemoteStorageSettings(
        bucket="ghosts-prod", access_key_id="key", secret_access_key="secret"
    )
    store = select_ghost_store(Settings(remote=remote), client=s3_client)
    assert isinstance(store, S3GhostStore)
    assert store.bucket == "ghosts-prod"
    assert store.client is s3_client
