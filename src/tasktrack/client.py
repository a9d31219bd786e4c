"""Task client: user actions against the service, the cache and a view.

Each action follows the same shape:

1. show the busy indicator and clear any previous message
2. call the service
3. on success, move to the new ``AppState``, render it and snapshot it
4. on failure, show a message (a failed toggle also reverts its control)

Actions return whether they succeeded; they never raise for service,
transport or validation failures.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Protocol, TypeVar

from tasktrack import state as st
from tasktrack.cache import LocalCache
from tasktrack.errors import ApiError, TaskTrackError
from tasktrack.formatting import format_iso_timestamp
from tasktrack.models import DEFAULT_CATEGORY, DEFAULT_PRIORITY, MAX_TASK_LENGTH, Task
from tasktrack.state import AppState
from tasktrack.transfer import build_export, export_path, import_payload, parse_export

logger = logging.getLogger(__name__)

T = TypeVar("T")

IMPORT_FAILED = "Failed to import todos. Please check the file format."
TOO_LONG = f"Task cannot be longer than {MAX_TASK_LENGTH} characters"


class TaskService(Protocol):
    """What the client needs from the task service."""

    def list_tasks(self) -> list[Task]: ...

    def create_task(self, fields: dict[str, Any]) -> Task: ...

    def update_task(self, task_id: str, changes: dict[str, Any]) -> Task: ...

    def delete_task(self, task_id: str) -> None: ...


class View(Protocol):
    """Side-effecting rendering adapter."""

    def show_loading(self, show: bool) -> None: ...

    def show_message(self, message: str, is_error: bool = True) -> None: ...

    def hide_message(self) -> None: ...

    def render(self, state: AppState) -> None: ...

    def set_checked(self, task_id: str, checked: bool) -> None: ...

    def confirm(self, message: str) -> bool: ...


@dataclass
class EditForm:
    """Editable fields of one task, prefilled from its current values."""

    task: str
    priority: str = DEFAULT_PRIORITY
    due_date: date | None = None
    category: str = DEFAULT_CATEGORY


def _user_message(error: TaskTrackError, fallback: str) -> str:
    if isinstance(error, ApiError):
        return error.detail
    return fallback


def _check_text(text: str, empty_message: str) -> str | None:
    """Return a problem with the task text, or None if it is acceptable."""
    if not text:
        return empty_message
    if len(text) > MAX_TASK_LENGTH:
        return TOO_LONG
    return None


class TaskClient:
    """Runs user actions and keeps the in-memory working set in sync."""

    def __init__(
        self,
        api: TaskService,
        cache: LocalCache,
        view: View,
        *,
        export_dir: str | Path = ".",
        max_workers: int = 8,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._api = api
        self._cache = cache
        self._view = view
        self._export_dir = Path(export_dir)
        self._max_workers = max_workers
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self.state = AppState()

    # ---- helpers ----

    def _commit(self, new_state: AppState) -> None:
        """Adopt ``new_state``, render it and snapshot it to the cache.

        A working set that came from the cache is reloaded from the service
        first, so a snapshot never stamps unsynced data with a fresh time.
        """
        if new_state.cached_at is not None:
            try:
                new_state = st.with_todos(new_state, self._api.list_tasks())
            except TaskTrackError as e:
                logger.warning("Could not resync todos after a successful change: %s", e)
                self._rerender(new_state)
                return

        self.state = new_state
        self._view.render(new_state)
        self._cache.save(new_state.todos)

    def _rerender(self, new_state: AppState) -> None:
        self.state = new_state
        self._view.render(new_state)

    def _begin(self) -> None:
        self._view.show_loading(True)
        self._view.hide_message()

    def _run_all(self, func: Callable[[T], Any], items: Iterable[T]) -> list[TaskTrackError]:
        """Call ``func`` on every item concurrently and wait for all of them.

        Returns the failures; anything other than a ``TaskTrackError`` is
        re-raised.
        """
        items = list(items)
        if not items:
            return []

        with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
            futures = [pool.submit(func, item) for item in items]

        failures: list[TaskTrackError] = []
        for future in futures:
            error = future.exception()
            if error is None:
                continue
            if not isinstance(error, TaskTrackError):
                raise error
            failures.append(error)
        return failures

    # ---- loading ----

    def load_todos(self) -> bool:
        """Fetch the full list; fall back to the local cache on failure."""
        self._begin()
        try:
            todos = self._api.list_tasks()
            self._commit(st.with_todos(self.state, todos))
            return True
        except TaskTrackError as e:
            logger.error("Error loading todos: %s", e)
            self.load_from_cache(after_failure=True)
            return False
        finally:
            self._view.show_loading(False)

    def load_from_cache(self, after_failure: bool = False) -> bool:
        """Render the last local snapshot, marking it as possibly stale."""
        snapshot = self._cache.load()
        if snapshot is None:
            if after_failure:
                self._view.show_message("Failed to load todos. No local backup is available.")
            return False

        self._rerender(st.with_todos(self.state, snapshot.todos, cached_at=snapshot.saved_at))
        if after_failure:
            self._view.show_message(
                "Failed to load todos. Showing local backup from "
                f"{format_iso_timestamp(snapshot.saved_at)}; data may be stale."
            )
        return True

    # ---- single-task actions ----

    def add_todo(
        self,
        task: str,
        priority: str = DEFAULT_PRIORITY,
        due_date: date | None = None,
        category: str = "",
    ) -> Task | None:
        text = task.strip()
        problem = _check_text(text, "Please enter a task")
        if problem:
            self._view.show_message(problem)
            return None

        payload = {
            "task": text,
            "priority": priority,
            "dueDate": due_date.isoformat() if due_date else None,
            "category": category.strip() or DEFAULT_CATEGORY,
        }

        self._begin()
        try:
            created = self._api.create_task(payload)
            self._commit(st.prepend_todo(self.state, created))
            return created
        except TaskTrackError as e:
            logger.error("Error adding todo: %s", e)
            self._view.show_message(_user_message(e, "Failed to add todo. Please try again."))
            return None
        finally:
            self._view.show_loading(False)

    def toggle_todo(self, task_id: str, completed: bool) -> bool:
        """Set completion; on failure revert the control to its prior state."""
        try:
            updated = self._api.update_task(task_id, {"completed": completed})
        except TaskTrackError as e:
            logger.error("Error updating todo %s: %s", task_id, e)
            self._view.show_message("Failed to update todo")
            self._view.set_checked(task_id, not completed)
            return False

        self._commit(st.replace_todo(self.state, updated))
        return True

    def update_todo(self, task_id: str, changes: dict[str, Any]) -> Task:
        """Send a partial update.

        Raises:
            TaskTrackError: After showing the failure message.
        """
        try:
            updated = self._api.update_task(task_id, changes)
        except TaskTrackError as e:
            logger.error("Error updating todo %s: %s", task_id, e)
            self._view.show_message(_user_message(e, "Failed to update todo"))
            raise

        self._commit(st.replace_todo(self.state, updated))
        return updated

    def open_edit(self, task_id: str) -> EditForm | None:
        task = st.find_todo(self.state, task_id)
        if task is None:
            return None
        return EditForm(
            task=task.task,
            priority=task.priority,
            due_date=task.due_date,
            category=task.category,
        )

    def save_edit(self, task_id: str, form: EditForm) -> bool:
        text = form.task.strip()
        problem = _check_text(text, "Task cannot be empty")
        if problem:
            self._view.show_message(problem)
            return False

        changes = {
            "task": text,
            "priority": form.priority,
            "dueDate": form.due_date.isoformat() if form.due_date else None,
            "category": form.category.strip() or DEFAULT_CATEGORY,
        }
        try:
            self.update_todo(task_id, changes)
        except TaskTrackError:
            return False
        return True

    def delete_todo(self, task_id: str) -> bool:
        task = st.find_todo(self.state, task_id)
        if task is None:
            return False
        if not self._view.confirm(f'Are you sure you want to delete "{task.task}"?'):
            return False

        self._begin()
        try:
            self._api.delete_task(task.id)
            self._commit(st.remove_todo(self.state, task.id))
            return True
        except TaskTrackError as e:
            logger.error("Error deleting todo %s: %s", task.id, e)
            self._view.show_message("Failed to delete todo")
            return False
        finally:
            self._view.show_loading(False)

    # ---- view selections ----

    def set_status_filter(self, status_filter: str) -> None:
        self._rerender(st.set_status_filter(self.state, status_filter))

    def set_priority_filter(self, priority_filter: str) -> None:
        self._rerender(st.set_priority_filter(self.state, priority_filter))

    def set_search(self, search: str) -> None:
        self._rerender(st.set_search(self.state, search))

    # ---- bulk actions ----

    def clear_completed(self) -> bool:
        """Delete every completed task.

        Deletes run concurrently. If any fail the local list is left as it
        was; deletes that did succeed are not rolled back.
        """
        completed = st.get_completed_todos(self.state)
        if not completed:
            self._view.show_message("No completed todos to clear")
            return False

        count = len(completed)
        noun = "todo" if count == 1 else "todos"
        if not self._view.confirm(f"Are you sure you want to delete {count} completed {noun}?"):
            return False

        self._begin()
        try:
            failures = self._run_all(self._api.delete_task, [t.id for t in completed])
            if failures:
                logger.error("Failed to delete %d of %d completed todos", len(failures), count)
                self._view.show_message(
                    f"Failed to clear completed todos ({len(failures)} of {count} deletes failed)"
                )
                return False

            self._commit(st.remove_completed(self.state))
            return True
        finally:
            self._view.show_loading(False)

    def export_data(self, directory: str | Path | None = None) -> Path | None:
        """Write the current list to ``todos-backup-YYYYMMDD.json``."""
        now = self._clock()
        path = export_path(directory if directory is not None else self._export_dir, now)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(build_export(self.state.todos, now), f, indent=2)
        except OSError as e:
            logger.error("Error exporting todos to %s: %s", path, e)
            self._view.show_message("Failed to export todos")
            return None

        self._view.show_message("Todos exported successfully!", is_error=False)
        return path

    def import_data(self, path: str | Path) -> bool:
        """Replace every task with the records in an export file.

        Existing tasks are deleted, the imported ones created, then the list
        is reloaded. There is no transaction: a failure part way through
        leaves whatever the completed calls produced.
        """
        try:
            with open(path, encoding="utf-8") as f:
                records = parse_export(json.load(f))
        except (OSError, ValueError) as e:
            logger.error("Error importing todos from %s: %s", path, e)
            self._view.show_message(IMPORT_FAILED)
            return False

        if not self._view.confirm(
            f"This will replace all current todos with {len(records)} imported todos. Continue?"
        ):
            return False

        self._view.hide_message()
        delete_failures = self._run_all(self._api.delete_task, [t.id for t in self.state.todos])
        for failure in delete_failures:
            logger.warning("Could not delete existing todo before import: %s", failure)

        create_failures = self._run_all(self._api.create_task, [import_payload(r) for r in records])
        if create_failures:
            logger.error("Failed to import %d of %d todos", len(create_failures), len(records))
            self._view.show_message(IMPORT_FAILED)
            return False

        if not self.load_todos():
            return False

        self._view.show_message("Todos imported successfully!", is_error=False)
        return True
