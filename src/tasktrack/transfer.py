"""Export/import file format.

Layout::

    {
        "todos": [ {task fields...}, ... ],
        "exportDate": "2026-10-18T09:30:00.000Z",
        "version": "2.0"
    }
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime
from pathlib import Path
from typing import Any

from tasktrack.formatting import format_date_for_filename, format_iso_timestamp
from tasktrack.models import DEFAULT_CATEGORY, DEFAULT_PRIORITY, Task

EXPORT_VERSION = "2.0"


class InvalidExportError(ValueError):
    """The file does not have the export layout."""


def build_export(todos: Iterable[Task], now: datetime) -> dict[str, Any]:
    return {
        "todos": [task.to_dict() for task in todos],
        "exportDate": format_iso_timestamp(now),
        "version": EXPORT_VERSION,
    }


def export_filename(now: datetime) -> str:
    return f"todos-backup-{format_date_for_filename(now)}.json"


def export_path(directory: str | Path, now: datetime) -> Path:
    return Path(directory) / export_filename(now)


def parse_export(data: Any) -> list[Any]:
    """Return the ``todos`` records of an export document.

    Raises:
        InvalidExportError: If ``todos`` is missing or not a list.
    """
    if not isinstance(data, Mapping) or not isinstance(data.get("todos"), list):
        raise InvalidExportError("Invalid file format")
    return data["todos"]


def import_payload(record: Any) -> dict[str, Any]:
    """Build a create request from one exported record.

    Absent or falsy optional fields fall back to the store's defaults; the
    record's id and timestamps are dropped.
    """
    item = record if isinstance(record, Mapping) else {}
    return {
        "task": item.get("task"),
        "completed": item.get("completed") or False,
        "priority": item.get("priority") or DEFAULT_PRIORITY,
        "dueDate": item.get("dueDate") or None,
        "category": item.get("category") or DEFAULT_CATEGORY,
    }
