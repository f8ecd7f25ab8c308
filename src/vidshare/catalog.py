"""Catalog view: search box, sort buttons, video grid and upload dialog state."""

import logging
import mimetypes
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Literal

import httpx

from vidshare.models import SortBy, UploadSlot, VideoDetails
from vidshare.service import VideoService

logger = logging.getLogger(__name__)

COMMON_TYPOS: dict[str, str] = {
    "teh": "the",
    "recieved": "received",
    "wierd": "weird",
    "reccomend": "recommend",
    "occured": "occurred",
    "seperate": "separate",
    "definately": "definitely",
    "alot": "a lot",
    "untill": "until",
    "begining": "beginning",
}

_WHITESPACE = re.compile(r"(\s+)")

# (slot, file bytes, content type) -> storage ID
Uploader = Callable[[UploadSlot, bytes, str], str]


def autocorrect(text: str) -> str:
    """Replace known misspellings word by word.

    Matching is case-insensitive and a corrected word takes the
    dictionary's casing. Everything else, whitespace included, is kept
    as typed, so text without a known typo comes back unchanged.
    """
    parts = _WHITESPACE.split(text)
    return "".join(
        part if _WHITESPACE.fullmatch(part) else COMMON_TYPOS.get(part.lower(), part)
        for part in parts
    )


def http_uploader(client: httpx.Client | None = None) -> Uploader:
    """Uploader that POSTs the raw bytes to the slot URL.

    The server answers with ``{"storageId": ...}``.
    """

    def upload(slot: UploadSlot, data: bytes, content_type: str) -> str:
        post = client.post if client else httpx.post
        response = post(slot.url, content=data, headers={"Content-Type": content_type})
        response.raise_for_status()
        return response.json()["storageId"]

    return upload


def local_uploader(service: VideoService) -> Uploader:
    """Uploader that hands the bytes straight to an in-process service."""

    def upload(slot: UploadSlot, data: bytes, content_type: str) -> str:
        return service.store_upload(slot.token, data, content_type)

    return upload


@dataclass
class Notice:
    """A toast-style message shown to the user."""

    level: Literal["info", "success", "error"]
    message: str


@dataclass
class CatalogView:
    """State of the catalog page for one visitor, signed in or not.

    Re-queries the service whenever the sort mode or the corrected
    search text changes and keeps the latest result in ``videos``.
    """

    service: VideoService
    user_id: str | None
    uploader: Uploader
    sort_by: SortBy = "recent"
    search_query: str = ""
    videos: list[VideoDetails] = field(default_factory=list)
    notices: list[Notice] = field(default_factory=list)

    def refresh(self) -> list[VideoDetails]:
        """Issue ListVideos for the current sort mode and search text."""
        self.videos = self.service.list_videos(self.sort_by, self.search_query or None)
        return self.videos

    def set_sort(self, sort_by: SortBy) -> list[VideoDetails]:
        if sort_by != self.sort_by:
            self.sort_by = sort_by
            self.refresh()
        return self.videos

    def submit_search(self, text: str) -> str:
        """Autocorrect the search box content and search for it.

        Returns:
            The corrected text that was searched for.
        """
        corrected = autocorrect(text)
        if corrected != text:
            self._notify("info", "Search text was auto-corrected")
        if corrected != self.search_query:
            self.search_query = corrected
            self.refresh()
        return corrected

    def upload(
        self,
        title: str,
        description: str,
        video_path: Path | None,
        thumbnail_path: Path | None = None,
    ) -> bool:
        """Upload a video file, then an optional thumbnail, then create the record.

        Files go one after the other, each to its own fresh slot. Any
        failure ends the attempt with a single "Upload failed" notice;
        files already uploaded are left in storage.

        Returns:
            True if the video was created.
        """
        if video_path is None:
            self._notify("error", "Please select a video file")
            return False

        try:
            storage_id = self._upload_file(video_path)
            thumbnail_id = self._upload_file(thumbnail_path) if thumbnail_path else None
            self.service.create_video(
                self.user_id,
                title=title,
                description=description,
                storage_id=storage_id,
                thumbnail_id=thumbnail_id,
            )
        except Exception:
            logger.exception("Upload failed: %s", video_path)
            self._notify("error", "Upload failed")
            return False

        self._notify("success", "Video uploaded successfully!")
        self.refresh()
        return True

    def _upload_file(self, path: Path) -> str:
        slot = self.service.request_upload_slot(self.user_id)
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        return self.uploader(slot, path.read_bytes(), content_type)

    def _notify(self, level: Literal["info", "success", "error"], message: str) -> None:
        logger.info("%s: %s", level, message)
        self.notices.append(Notice(level=level, message=message))
