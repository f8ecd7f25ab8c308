# tests/conftest.py
"""Shared fixtures for vidshare tests."""

import pytest

from vidshare.models import User
from vidshare.service import VideoService
from vidshare.storage.blobs import LocalBlobStore
from vidshare.storage.sqlite import SQLiteVideoRepository


BASE_URL = "http://testserver"


@pytest.fixture
def sqlite_repo():
    """SQLiteVideoRepository backed by in-memory database."""
    return SQLiteVideoRepository(":memory:")


@pytest.fixture
def blob_store(tmp_path):
    """LocalBlobStore writing files under tmp_path with in-memory metadata."""
    return LocalBlobStore(blobs_dir=tmp_path / "blobs", db_path=":memory:", base_url=BASE_URL)


@pytest.fixture
def service(sqlite_repo, blob_store):
    """VideoService wired to in-memory backends."""
    return VideoService(repository=sqlite_repo, blobs=blob_store)


@pytest.fixture
def alice(service) -> User:
    """A registered user with an email."""
    return service.register_user("alice@example.com")


@pytest.fixture
def upload_bytes(service, alice):
    """Store bytes through a fresh upload slot and return the storage ID."""

    def _upload(data: bytes = b"\x00\x00\x00\x18ftypmp42", content_type: str = "video/mp4") -> str:
        slot = service.request_upload_slot(alice.user_id)
        return service.store_upload(slot.token, data, content_type)

    return _upload


@pytest.fixture
def publish(service, alice, upload_bytes):
    """Create a video owned by alice and return it."""

    def _publish(title: str = "Intro", description: str = "Hello world", **kwargs):
        storage_id = kwargs.pop("storage_id", None) or upload_bytes()
        return service.create_video(
            alice.user_id, title=title, description=description, storage_id=storage_id, **kwargs
        )

    return _publish


@pytest.fixture
def video_file(tmp_path):
    """A small file standing in for a video upload."""
    path = tmp_path / "clip.mp4"
    path.write_bytes(b"\x00\x00\x00\x18ftypmp42-fake-video")
    return path


@pytest.fixture
def thumbnail_file(tmp_path):
    """A small file standing in for a thumbnail upload."""
    path = tmp_path / "thumb.jpg"
    path.write_bytes(b"\xff\xd8\xff\xe0fake-jpeg-data")
    return path
