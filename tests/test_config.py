# tests/test_config.py
"""Tests for vidshare configuration."""

from pathlib import Path
from unittest.mock import patch

from vidshare.config import Settings


class TestSettings:
    def test_default_settings(self):
        s = Settings()
        assert s.host == "127.0.0.1"
        assert s.port == 9093
        assert s.data_dir == Path.home() / ".vidshare"

    def test_db_path_derived(self):
        s = Settings()
        assert s.db_path == s.data_dir / "vidshare.db"

    def test_blobs_dir_derived(self):
        s = Settings(data_dir=Path("/tmp/vs"))
        assert s.blobs_dir == Path("/tmp/vs/blobs")

    def test_public_url_from_host_and_port(self):
        s = Settings(host="0.0.0.0", port=8000)
        assert s.public_url == "http://0.0.0.0:8000"

    def test_public_url_prefers_base_url(self):
        s = Settings(base_url="https://videos.example.com/")
        assert s.public_url == "https://videos.example.com"

    def test_ensure_dirs_creates(self, tmp_path):
        s = Settings(data_dir=tmp_path / "testdata")
        s.ensure_dirs()
        assert s.data_dir.exists()
        assert s.blobs_dir.exists()

    def test_env_override(self):
        with patch.dict("os.environ", {"VIDSHARE_PORT": "1234", "VIDSHARE_TOKEN": "abc"}):
            s = Settings()
            assert s.port == 1234
            assert s.token == "abc"
