"""Configuration management for vidshare."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable overrides.

    All settings can be overridden via environment variables
    prefixed with VIDSHARE_ (e.g. VIDSHARE_DATA_DIR, VIDSHARE_TOKEN).
    """

    model_config = {"env_prefix": "VIDSHARE_"}

    # Storage
    data_dir: Path = Field(
        default_factory=lambda: Path.home() / ".vidshare",
        description="Root directory for the database and uploaded files",
    )

    # Server
    host: str = "127.0.0.1"
    port: int = 9093
    base_url: str | None = Field(
        default=None,
        description="Externally reachable server URL used in upload and file links",
    )

    # Identity used by the CLI and the stdio transport
    token: str | None = None

    @property
    def db_path(self) -> Path:
        """SQLite database path."""
        return self.data_dir / "vidshare.db"

    @property
    def blobs_dir(self) -> Path:
        """Directory holding uploaded video and thumbnail files."""
        return self.data_dir / "blobs"

    @property
    def public_url(self) -> str:
        """Base URL for upload slots and file links, without trailing slash."""
        if self.base_url:
            return self.base_url.rstrip("/")
        return f"http://{self.host}:{self.port}"

    def ensure_dirs(self) -> None:
        """Create all required directories if they don't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.blobs_dir.mkdir(parents=True, exist_ok=True)


# Module-level singleton, imported throughout the app
settings = Settings()
