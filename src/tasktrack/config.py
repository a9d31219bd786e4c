"""Configuration models for tasktrack."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field


class ServerConfig(BaseModel):
    """Configuration for the task store service."""

    host: str = "127.0.0.1"
    port: int = 3000
    data_file: str = ".tasktrack/tasks.json"
    debug: bool = False


class ClientConfig(BaseModel):
    """Configuration for the terminal client."""

    api_url: str = "http://localhost:3000/todos"
    cache_file: str = ".tasktrack/cache.json"
    cache_slot: str = "todoApp"
    export_dir: str = "."
    max_workers: int = 8


class LoggingConfig(BaseModel):
    """Configuration for log output."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    file: str | None = None


class TrackConfig(BaseModel):
    """Main configuration for tasktrack."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    client: ClientConfig = Field(default_factory=ClientConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, path: Path | None = None) -> TrackConfig:
        """Load configuration from file or return defaults."""
        if path is None:
            path = CONFIG_FILE

        if not path.exists():
            return cls()

        with open(path) as f:
            data = json.load(f)

        return cls.model_validate(data)

    def save(self, path: Path | None = None) -> None:
        """Save configuration to file."""
        if path is None:
            path = CONFIG_FILE

        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            json.dump(self.model_dump(exclude_none=True), f, indent=2)


# Default config directory
TRACK_DIR = Path(".tasktrack")
CONFIG_FILE = TRACK_DIR / "config.json"
