"""SQLite implementation of the video repository."""

import sqlite3

from vidshare.config import settings
from vidshare.models import User, Video
from vidshare.storage.repository import VideoRepository


class SQLiteVideoRepository(VideoRepository):
    """SQLite-backed catalog storage.

    Implements VideoRepository interface using stdlib sqlite3.
    The autoincrement ``seq`` column records insertion order, which is
    what "recent" sorting uses; ``created_at`` is informational only
    and may be NULL for rows written before it existed.
    """

    _SCHEMA = """
        CREATE TABLE IF NOT EXISTS users (
            user_id TEXT PRIMARY KEY,
            email   TEXT,
            token   TEXT NOT NULL UNIQUE
        );

        CREATE TABLE IF NOT EXISTS videos (
            seq          INTEGER PRIMARY KEY AUTOINCREMENT,
            video_id     TEXT NOT NULL UNIQUE,
            title        TEXT NOT NULL,
            description  TEXT NOT NULL,
            user_id      TEXT NOT NULL,
            storage_id   TEXT NOT NULL,
            thumbnail_id TEXT,
            views        INTEGER NOT NULL DEFAULT 0,
            created_at   TEXT
        );
        CREATE INDEX IF NOT EXISTS videos_by_user ON videos (user_id);
        CREATE INDEX IF NOT EXISTS videos_by_views ON videos (views);

        CREATE TABLE IF NOT EXISTS comments (
            comment_id TEXT PRIMARY KEY,
            video_id   TEXT NOT NULL,
            user_id    TEXT NOT NULL,
            text       TEXT NOT NULL
        );
        CREATE INDEX IF NOT EXISTS comments_by_video ON comments (video_id);
    """

    def __init__(self, db_path: str | None = None) -> None:
        """Initialize the repository.

        Args:
            db_path: Path to SQLite database file. Defaults to settings.db_path.
                     Use ":memory:" for testing.
        """
        self._db_path = db_path or str(settings.db_path)
        self._conn = sqlite3.connect(self._db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._init_db()

    def _init_db(self) -> None:
        """Create tables and indexes if they don't exist."""
        self._conn.executescript(self._SCHEMA)
        self._conn.commit()

    def insert(self, video: Video) -> None:
        """Persist a new video. Insertion order is what "recent" sorts on."""
        sql = """
            INSERT INTO videos (
                video_id, title, description, user_id, storage_id,
                thumbnail_id, views, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """
        self._conn.execute(sql, (
            video.video_id,
            video.title,
            video.description,
            video.user_id,
            video.storage_id,
            video.thumbnail_id,
            video.views,
            video.created_at.isoformat() if video.created_at else None,
        ))
        self._conn.commit()

    def get(self, video_id: str) -> Video | None:
        """Retrieve a video by ID. Returns None if not found."""
        sql = "SELECT * FROM videos WHERE video_id = ?"
        row = self._conn.execute(sql, (video_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_video(row)

    def list_recent(self) -> list[Video]:
        """All videos, most recently inserted first."""
        sql = "SELECT * FROM videos ORDER BY seq DESC"
        return [self._row_to_video(row) for row in self._conn.execute(sql).fetchall()]

    def list_by_views(self) -> list[Video]:
        """All videos by descending view count, newer first among equal counts."""
        sql = "SELECT * FROM videos ORDER BY views DESC, seq DESC"
        return [self._row_to_video(row) for row in self._conn.execute(sql).fetchall()]

    def set_views(self, video_id: str, views: int) -> None:
        """Overwrite the view count of a video. No-op if video_id does not exist."""
        sql = "UPDATE videos SET views = ? WHERE video_id = ?"
        self._conn.execute(sql, (views, video_id))
        self._conn.commit()

    def save_user(self, user: User) -> None:
        """Persist a user. Upserts if user_id already exists."""
        sql = """
            INSERT INTO users (user_id, email, token) VALUES (?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                email = excluded.email,
                token = excluded.token
        """
        self._conn.execute(sql, (user.user_id, user.email, user.token))
        self._conn.commit()

    def get_user(self, user_id: str) -> User | None:
        """Retrieve a user by ID. Returns None if not found."""
        sql = "SELECT * FROM users WHERE user_id = ?"
        row = self._conn.execute(sql, (user_id,)).fetchone()
        if row is None:
            return None
        return User(user_id=row["user_id"], email=row["email"], token=row["token"])

    def get_user_by_token(self, token: str) -> User | None:
        """Retrieve the user owning an access token. Returns None if unknown."""
        sql = "SELECT * FROM users WHERE token = ?"
        row = self._conn.execute(sql, (token,)).fetchone()
        if row is None:
            return None
        return User(user_id=row["user_id"], email=row["email"], token=row["token"])

    @staticmethod
    def _row_to_video(row: sqlite3.Row) -> Video:
        """Convert a database row to a Video model."""
        return Video(
            video_id=row["video_id"],
            title=row["title"],
            description=row["description"],
            user_id=row["user_id"],
            storage_id=row["storage_id"],
            thumbnail_id=row["thumbnail_id"],
            views=row["views"] or 0,
            created_at=row["created_at"],
        )
