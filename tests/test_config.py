"""Tests for tasktrack.config module."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from tasktrack.config import (
    CONFIG_FILE,
    TRACK_DIR,
    ClientConfig,
    LoggingConfig,
    ServerConfig,
    TrackConfig,
)


class TestServerConfig:
    """Tests for ServerConfig model."""

    def test_defaults(self) -> None:
        """Test default server settings."""
        config = ServerConfig()
        assert config.host == "127.0.0.1"
        assert config.port == 3000
        assert config.data_file == ".tasktrack/tasks.json"
        assert config.debug is False


class TestClientConfig:
    """Tests for ClientConfig model."""

    def test_defaults(self) -> None:
        """Test default client settings."""
        config = ClientConfig()
        assert config.api_url == "http://localhost:3000/todos"
        assert config.cache_slot == "todoApp"
        assert config.max_workers == 8


class TestLoggingConfig:
    """Tests for LoggingConfig model."""

    def test_defaults(self) -> None:
        """Test logging is quiet by default."""
        config = LoggingConfig()
        assert config.level == "WARNING"
        assert config.file is None

    def test_invalid_level(self) -> None:
        """Test unknown levels are rejected."""
        with pytest.raises(ValidationError):
            LoggingConfig(level="LOUD")


class TestTrackConfig:
    """Tests for TrackConfig model."""

    def test_defaults(self) -> None:
        """Test default configuration."""
        config = TrackConfig()
        assert config.server.port == 3000
        assert config.client.cache_file == ".tasktrack/cache.json"
        assert config.logging.level == "WARNING"

    def test_load_missing_file(self, temp_project: Path) -> None:
        """Test loading when config file doesn't exist."""
        config = TrackConfig.load()
        assert config == TrackConfig()

    def test_load_partial_file(self, tmp_path: Path) -> None:
        """Test unspecified sections keep their defaults."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"server": {"port": 8080}, "logging": {"level": "DEBUG"}}))

        config = TrackConfig.load(path)
        assert config.server.port == 8080
        assert config.server.host == "127.0.0.1"
        assert config.logging.level == "DEBUG"
        assert config.client == ClientConfig()

    def test_save_and_load(self, temp_project: Path) -> None:
        """Test saving and loading configuration."""
        config = TrackConfig(
            server=ServerConfig(port=4000, data_file="tasks.json"),
            client=ClientConfig(api_url="http://example.test/todos"),
        )
        config.save()

        assert CONFIG_FILE.exists()
        assert CONFIG_FILE.parent == TRACK_DIR

        loaded = TrackConfig.load()
        assert loaded.server.port == 4000
        assert loaded.server.data_file == "tasks.json"
        assert loaded.client.api_url == "http://example.test/todos"

    def test_save_omits_unset_log_file(self, tmp_path: Path) -> None:
        """Test None values are left out of the saved file."""
        path = tmp_path / "nested" / "config.json"
        TrackConfig().save(path)

        data = json.loads(path.read_text())
        assert "file" not in data["logging"]
