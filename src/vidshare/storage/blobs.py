"""Blob storage for uploaded videos and thumbnails."""

import logging
import sqlite3
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path

from vidshare.config import settings
from vidshare.models import Blob, UploadSlot, new_id

logger = logging.getLogger(__name__)


class UploadSlotError(Exception):
    """Raised when an upload targets an unknown or already used slot."""


class BlobNotFoundError(Exception):
    """Raised when a storage reference does not resolve to a stored file."""


class BlobStore(ABC):
    """Abstract interface for file storage.

    Uploads go through one-time slots: ``generate_upload_slot`` hands
    out a URL, the client sends the raw bytes to it, and the store
    answers with the permanent storage reference.
    """

    @abstractmethod
    def generate_upload_slot(self) -> UploadSlot:
        """Allocate a write-once upload destination."""

    @abstractmethod
    def accept_upload(self, token: str, data: bytes, content_type: str) -> str:
        """Store the single upload for a slot and consume the slot.

        Returns:
            Storage ID of the stored file.

        Raises:
            UploadSlotError: If the slot is unknown or was already used.
        """

    @abstractmethod
    def get_url(self, storage_id: str) -> str | None:
        """Fetch URL for a storage reference, or None if it does not resolve."""

    @abstractmethod
    def read(self, storage_id: str) -> tuple[Blob, bytes]:
        """Load a stored file and its metadata.

        Raises:
            BlobNotFoundError: If the storage reference does not resolve.
        """


class LocalBlobStore(BlobStore):
    """Blob store keeping files on disk and slots/metadata in SQLite.

    Files live under ``blobs_dir`` named by storage ID. URLs are built
    from ``base_url``, which points at the server's HTTP routes.
    """

    _SCHEMA = """
        CREATE TABLE IF NOT EXISTS upload_slots (
            token      TEXT PRIMARY KEY,
            created_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS blobs (
            storage_id   TEXT PRIMARY KEY,
            content_type TEXT NOT NULL,
            size         INTEGER NOT NULL,
            created_at   TEXT NOT NULL
        );
    """

    def __init__(
        self,
        blobs_dir: Path | None = None,
        db_path: str | None = None,
        base_url: str | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            blobs_dir: Directory for stored files. Defaults to settings.blobs_dir.
            db_path: SQLite database for slot and blob metadata.
                     Defaults to settings.db_path. Use ":memory:" for testing.
            base_url: Server URL for upload and file links.
                      Defaults to settings.public_url.
        """
        self._blobs_dir = blobs_dir or settings.blobs_dir
        self._base_url = (base_url or settings.public_url).rstrip("/")
        self._conn = sqlite3.connect(db_path or str(settings.db_path), check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript(self._SCHEMA)
        self._conn.commit()

    def generate_upload_slot(self) -> UploadSlot:
        token = new_id()
        self._conn.execute(
            "INSERT INTO upload_slots (token, created_at) VALUES (?, ?)",
            (token, datetime.now(timezone.utc).isoformat()),
        )
        self._conn.commit()
        return UploadSlot(token=token, url=f"{self._base_url}/uploads/{token}")

    def accept_upload(self, token: str, data: bytes, content_type: str) -> str:
        """Store the single upload for a slot and consume the slot.

        A failed write rolls back the slot removal.
        """
        blob = Blob(content_type=content_type or "application/octet-stream", size=len(data))
        with self._conn:
            cur = self._conn.execute("DELETE FROM upload_slots WHERE token = ?", (token,))
            if cur.rowcount == 0:
                raise UploadSlotError(f"Upload slot is invalid or already used: {token}")
            self._blobs_dir.mkdir(parents=True, exist_ok=True)
            self._path(blob.storage_id).write_bytes(data)
            self._conn.execute(
                "INSERT INTO blobs (storage_id, content_type, size, created_at) VALUES (?, ?, ?, ?)",
                (blob.storage_id, blob.content_type, blob.size, blob.created_at.isoformat()),
            )
        logger.info("Stored blob %s (%s, %d bytes)", blob.storage_id, blob.content_type, blob.size)
        return blob.storage_id

    def get_url(self, storage_id: str) -> str | None:
        if self._get_blob(storage_id) is None:
            return None
        return f"{self._base_url}/files/{storage_id}"

    def read(self, storage_id: str) -> tuple[Blob, bytes]:
        blob = self._get_blob(storage_id)
        path = self._path(storage_id)
        if blob is None or not path.exists():
            raise BlobNotFoundError(f"File not found: {storage_id}")
        return blob, path.read_bytes()

    def _get_blob(self, storage_id: str) -> Blob | None:
        row = self._conn.execute(
            "SELECT * FROM blobs WHERE storage_id = ?", (storage_id,)
        ).fetchone()
        if row is None:
            return None
        return Blob(
            storage_id=row["storage_id"],
            content_type=row["content_type"],
            size=row["size"],
            created_at=row["created_at"],
        )

    def _path(self, storage_id: str) -> Path:
        # storage IDs are hex strings generated here, never client paths
        return self._blobs_dir / storage_id
