"""Shared fixtures for ghostboard tests."""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from ghostboard.app import create_app
from ghostboard.core.config import Settings
from ghostboard.core.database import RecordStore
from ghostboard.services.ghosts import LocalGhostStore, S3GhostStore

from .helpers import FakeS3Client


@pytest.fixture
def records_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "records.json"


@pytest.fixture
def store(records_path: Path) -> RecordStore:
    store = RecordStore(records_path)
    store.load()
    return store


@pytest.fixture
def local_ghosts(tmp_path: Path) -> LocalGhostStore:
    return LocalGhostStore(tmp_path / "data" / "ghosts")


@pytest.fixture
def s3_client() -> FakeS3Client:
    return FakeS3Client()


@pytest.fixture
def s3_ghosts(s3_client: FakeS3Client) -> S3GhostStore:
    return S3GhostStore(s3_client, bucket="ghost-bucket")


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    data_dir = tmp_path / "data"
    return Settings(
        data_dir=data_dir,
        records_file=data_dir / "records.json",
        ghost_dir=data_dir / "ghosts",
        max_ghost_bytes=1024,
    )


@pytest.fixture
def client(settings: Settings):
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client
