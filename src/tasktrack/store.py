"""Durable task store backed by a single JSON document."""

from __future__ import annotations

import json
import logging
import os
import threading
import uuid
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from tasktrack.errors import StoreError, TaskNotFoundError
from tasktrack.models import Task, apply_changes, utcnow, validate_fields

logger = logging.getLogger(__name__)


class TaskStore:
    """
    Task records keyed by id, kept in insertion order.

    Persistence is a whole-document rewrite of ``{"todos": [...]}`` after
    every mutation. A mutation only becomes visible once the write succeeds.
    With ``path=None`` the store lives in memory only.

    Thread-safety:
    - mutations are serialised by a lock; there is no version check, so
      concurrent updates to one id are last-write-wins
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self._path = Path(path) if path is not None else None
        self._lock = threading.Lock()
        self._tasks: dict[str, Task] = self._load()
        logger.info("TaskStore ready path=%s total=%d", self._path or ":memory:", len(self._tasks))

    # ---- persistence ----

    def _load(self) -> dict[str, Task]:
        if self._path is None or not self._path.exists():
            return {}

        try:
            with open(self._path, encoding="utf-8") as f:
                data = json.load(f)
            items = data.get("todos", []) if isinstance(data, dict) else data
            tasks = [Task.from_dict(item) for item in items]
        except (OSError, ValueError, TypeError, AttributeError) as e:
            # ValueError covers both JSONDecodeError and pydantic ValidationError.
            raise StoreError(f"Cannot read task store {self._path}: {e}") from e

        return {task.id: task for task in tasks}

    def _save(self, tasks: dict[str, Task]) -> None:
        if self._path is None:
            return

        payload = {"todos": [task.to_dict() for task in tasks.values()]}
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
            os.replace(tmp_path, self._path)
        except OSError as e:
            raise StoreError(f"Cannot write task store {self._path}: {e}") from e

    def _commit(self, tasks: dict[str, Task]) -> None:
        self._save(tasks)
        self._tasks = tasks

    # ---- operations ----

    def count(self) -> int:
        return len(self._tasks)

    def list_tasks(self) -> list[Task]:
        """Return every task in insertion order."""
        return list(self._tasks.values())

    def get_task(self, task_id: str) -> Task:
        task = self._tasks.get(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    def create_task(self, fields: Mapping[str, Any]) -> Task:
        """Validate ``fields``, apply defaults and persist a new task.

        Raises:
            TaskValidationError: If the fields are invalid.
            StoreError: If the task could not be written.
        """
        validated = validate_fields(fields)
        now = utcnow()
        task = Task(
            id=uuid.uuid4().hex,
            created_at=now,
            updated_at=now,
            **validated.model_dump(),
        )

        with self._lock:
            tasks = dict(self._tasks)
            tasks[task.id] = task
            self._commit(tasks)

        logger.info("Created task id=%s priority=%s", task.id, task.priority)
        return task

    def update_task(self, task_id: str, changes: Mapping[str, Any]) -> Task:
        """Apply a partial update; omitted fields keep their value.

        Raises:
            TaskNotFoundError: If no task has ``task_id``.
            TaskValidationError: If the merged record is invalid.
            StoreError: If the task could not be written.
        """
        with self._lock:
            current = self.get_task(task_id)
            merged = apply_changes(current, changes)
            try:
                task = Task(
                    id=current.id,
                    created_at=current.created_at,
                    updated_at=utcnow(),
                    **merged.model_dump(),
                )
            except ValidationError as e:
                raise StoreError(f"Cannot rebuild task {task_id}: {e}") from e

            tasks = dict(self._tasks)
            tasks[task_id] = task
            self._commit(tasks)

        logger.info("Updated task id=%s fields=%s", task_id, sorted(changes))
        return task

    def delete_task(self, task_id: str) -> Task:
        """Remove a task and return it.

        Raises:
            TaskNotFoundError: If no task has ``task_id``.
            StoreError: If the change could not be written.
        """
        with self._lock:
            task = self.get_task(task_id)
            tasks = dict(self._tasks)
            del tasks[task_id]
            self._commit(tasks)

        logger.info("Deleted task id=%s", task_id)
        return task
