"""Best-effort local snapshot of the client's task list.

The cache file holds named slots: ``{"todoApp": {"todos": [...], "timestamp": ms}}``.
Reads and writes never raise; failures are logged and reported as a
``False``/``None`` result.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from tasktrack.models import Task

logger = logging.getLogger(__name__)

DEFAULT_SLOT = "todoApp"


@dataclass
class CacheSnapshot:
    """A list of tasks saved at ``timestamp`` (epoch milliseconds)."""

    todos: list[Task]
    timestamp: int

    @property
    def saved_at(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp / 1000, tz=timezone.utc)


class LocalCache:
    """One named slot in a JSON cache file."""

    def __init__(self, path: str | Path, slot: str = DEFAULT_SLOT) -> None:
        self.path = Path(path)
        self.slot = slot

    def _read_all(self) -> dict:
        if not self.path.exists():
            return {}
        with open(self.path, encoding="utf-8") as f:
            data = json.load(f)
        return data if isinstance(data, dict) else {}

    def save(self, todos: Iterable[Task]) -> bool:
        """Snapshot ``todos`` with the current time. Returns False on failure."""
        try:
            try:
                data = self._read_all()
            except ValueError:
                logger.warning("Discarding unreadable cache file %s", self.path)
                data = {}
            data[self.slot] = {
                "todos": [task.to_dict() for task in todos],
                "timestamp": int(time.time() * 1000),
            }
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
        except Exception:
            logger.exception("Failed to save local cache %s", self.path)
            return False
        return True

    def load(self) -> CacheSnapshot | None:
        """Return the slot's snapshot, or None if absent or unreadable."""
        try:
            entry = self._read_all().get(self.slot)
            if not isinstance(entry, dict) or not isinstance(entry.get("todos"), list):
                return None
            return CacheSnapshot(
                todos=[Task.from_dict(item) for item in entry["todos"]],
                timestamp=int(entry.get("timestamp") or 0),
            )
        except Exception:
            logger.exception("Failed to load local cache %s", self.path)
            return None
