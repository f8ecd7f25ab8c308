"""Core business logic for vidshare."""

import logging
from datetime import datetime, timezone

from vidshare.models import ANONYMOUS, Blob, SortBy, UploadSlot, User, Video, VideoDetails
from vidshare.storage.blobs import BlobNotFoundError, BlobStore
from vidshare.storage.repository import VideoRepository

logger = logging.getLogger(__name__)

SORT_MODES: tuple[str, ...] = ("recent", "views")


class UnauthenticatedError(Exception):
    """Raised when an operation that needs a signed-in user is called without one."""


class VideoService:
    """Core service layer, the single orchestration point for all catalog operations.

    The CLI, the MCP tools and the HTTP upload routes are thin wrappers
    over this class. Callers pass the authenticated user ID (or None)
    explicitly; resolving it from a token is the wrapper's job.
    """

    def __init__(self, repository: VideoRepository, blobs: BlobStore) -> None:
        self._repo = repository
        self._blobs = blobs

    def request_upload_slot(self, user_id: str | None) -> UploadSlot:
        """Allocate a one-time upload destination.

        Raises:
            UnauthenticatedError: If there is no signed-in user.
        """
        self._require_user(user_id)
        return self._blobs.generate_upload_slot()

    def create_video(
        self,
        user_id: str | None,
        title: str,
        description: str,
        storage_id: str,
        thumbnail_id: str | None = None,
    ) -> Video:
        """Insert a new video owned by the caller.

        Args:
            user_id: Authenticated caller, becomes the owner.
            title: Video title.
            description: Video description.
            storage_id: Storage reference of the uploaded video file.
            thumbnail_id: Storage reference of the thumbnail, if any.

        Returns:
            The stored Video, with zero views.

        Raises:
            UnauthenticatedError: If there is no signed-in user.
            BlobNotFoundError: If a storage reference does not resolve.
        """
        owner = self._require_user(user_id)
        for ref in (storage_id, thumbnail_id):
            if ref is not None and self._blobs.get_url(ref) is None:
                raise BlobNotFoundError(f"File not found: {ref}")
        video = Video(
            title=title,
            description=description,
            user_id=owner,
            storage_id=storage_id,
            thumbnail_id=thumbnail_id,
            views=0,
            created_at=datetime.now(timezone.utc),
        )
        self._repo.insert(video)
        logger.info("Video created: %s (%s)", video.video_id, video.title)
        return video

    def get_video(self, video_id: str) -> VideoDetails | None:
        """Get a video with owner name and file URLs resolved. None if not found."""
        video = self._repo.get(video_id)
        if video is None:
            return None
        return self._resolve(video)

    def list_videos(
        self, sort_by: SortBy = "recent", search_query: str | None = None
    ) -> list[VideoDetails]:
        """List the catalog in the requested order, optionally filtered.

        Filtering keeps videos whose title or description contains the
        query, case-insensitively. It runs after sorting, so matches keep
        their relative order.

        Args:
            sort_by: "recent" (newest insert first) or "views" (most viewed first).
            search_query: Optional substring filter. Empty means no filter.

        Raises:
            ValueError: If sort_by is not a known mode.
        """
        if sort_by == "recent":
            videos = self._repo.list_recent()
        elif sort_by == "views":
            videos = self._repo.list_by_views()
        else:
            raise ValueError(f"Unknown sort mode: {sort_by!r}. Use one of {SORT_MODES}.")

        if search_query:
            q = search_query.lower()
            videos = [v for v in videos if q in v.title.lower() or q in v.description.lower()]

        return [self._resolve(v) for v in videos]

    def increment_views(self, video_id: str) -> None:
        """Add one view to a video. Silently ignores unknown IDs.

        Read-modify-write: two concurrent calls may both read the same
        count and one increment is lost.
        """
        video = self._repo.get(video_id)
        if video is None:
            return
        self._repo.set_views(video_id, (video.views or 0) + 1)

    def store_upload(self, token: str, data: bytes, content_type: str) -> str:
        """Accept the bytes sent to an upload slot and return the storage ID.

        Raises:
            UploadSlotError: If the slot is unknown or already used.
        """
        return self._blobs.accept_upload(token, data, content_type)

    def open_blob(self, storage_id: str) -> tuple[Blob, bytes]:
        """Load a stored file for serving.

        Raises:
            BlobNotFoundError: If the storage reference does not resolve.
        """
        return self._blobs.read(storage_id)

    def register_user(self, email: str | None = None) -> User:
        """Create an identity record with a fresh access token."""
        user = User(email=email)
        self._repo.save_user(user)
        logger.info("User registered: %s", user.user_id)
        return user

    def authenticate(self, token: str | None) -> str | None:
        """Resolve an access token to a user ID. None for missing or unknown tokens."""
        if not token:
            return None
        user = self._repo.get_user_by_token(token)
        if user is None:
            logger.warning("Unknown access token presented")
            return None
        return user.user_id

    def _resolve(self, video: Video) -> VideoDetails:
        """Attach owner display name and fetch URLs to a video."""
        user = self._repo.get_user(video.user_id)
        thumbnail_url = self._blobs.get_url(video.thumbnail_id) if video.thumbnail_id else None
        return VideoDetails(
            **video.model_dump(),
            username=user.display_name if user else ANONYMOUS,
            url=self._blobs.get_url(video.storage_id),
            thumbnail_url=thumbnail_url,
        )

    @staticmethod
    def _require_user(user_id: str | None) -> str:
        if not user_id:
            raise UnauthenticatedError("Please log in")
        return user_id
