"""Abstract repository interface for the video catalog."""

from abc import ABC, abstractmethod

from vidshare.models import User, Video


class VideoRepository(ABC):
    """Abstract base class defining the catalog storage contract.

    Covers the videos table and the users table the catalog reads
    owner names from. The service layer depends on this interface,
    not on a concrete database.
    """

    @abstractmethod
    def insert(self, video: Video) -> None:
        """Persist a new video. Insertion order is what "recent" sorts on."""

    @abstractmethod
    def get(self, video_id: str) -> Video | None:
        """Retrieve a video by ID. Returns None if not found."""

    @abstractmethod
    def list_recent(self) -> list[Video]:
        """All videos, most recently inserted first."""

    @abstractmethod
    def list_by_views(self) -> list[Video]:
        """All videos by descending view count, newer first among equal counts."""

    @abstractmethod
    def set_views(self, video_id: str, views: int) -> None:
        """Overwrite the view count of a video. No-op if video_id does not exist."""

    @abstractmethod
    def save_user(self, user: User) -> None:
        """Persist a user. Upserts if user_id already exists."""

    @abstractmethod
    def get_user(self, user_id: str) -> User | None:
        """Retrieve a user by ID. Returns None if not found."""

    @abstractmethod
    def get_user_by_token(self, token: str) -> User | None:
        """Retrieve the user owning an access token. Returns None if unknown."""
