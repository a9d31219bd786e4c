"""Shared fixtures for tasktrack tests."""

from __future__ import annotations

import os
from collections.abc import Generator
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

import pytest

from tasktrack.cache import LocalCache
from tasktrack.client import TaskClient
from tasktrack.errors import ApiError, TaskNotFoundError, TaskValidationError, TransportError
from tasktrack.models import Task
from tasktrack.state import AppState
from tasktrack.store import TaskStore

TODAY = date(2026, 10, 18)
NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


class FakeTaskService:
    """
    In-process task service backed by a real TaskStore.

    Store errors are translated the way the HTTP layer reports them, so the
    client sees ApiError with the same statuses. Failures can be injected:
    - offline: every call raises TransportError
    - fail_deletes / fail_creates: ids (or task texts) that answer 500
    """

    def __init__(self, store: TaskStore | None = None) -> None:
        self.store = store or TaskStore()
        self.offline = False
        self.fail_deletes: set[str] = set()
        self.fail_creates: set[str] = set()
        self.fail_updates = False
        self.calls: list[tuple[str, Any]] = []

    def _guard(self, name: str, arg: Any = None) -> None:
        self.calls.append((name, arg))
        if self.offline:
            raise TransportError("connection refused")

    def list_tasks(self) -> list[Task]:
        self._guard("list")
        return self.store.list_tasks()

    def create_task(self, fields: dict[str, Any]) -> Task:
        self._guard("create", fields)
        if fields.get("task") in self.fail_creates:
            raise ApiError("Task store error", status=500)
        try:
            return self.store.create_task(fields)
        except TaskValidationError as e:
            raise ApiError("Validation error", status=400, error=str(e)) from e

    def update_task(self, task_id: str, changes: dict[str, Any]) -> Task:
        self._guard("update", (task_id, changes))
        if self.fail_updates:
            raise ApiError("Error updating todo", status=500)
        try:
            return self.store.update_task(task_id, changes)
        except TaskNotFoundError as e:
            raise ApiError("Todo not found", status=404) from e
        except TaskValidationError as e:
            raise ApiError("Validation error", status=400, error=str(e)) from e

    def delete_task(self, task_id: str) -> None:
        self._guard("delete", task_id)
        if task_id in self.fail_deletes:
            raise ApiError("Task store error", status=500)
        try:
            self.store.delete_task(task_id)
        except TaskNotFoundError as e:
            raise ApiError("Todo not found", status=404) from e


class RecordingView:
    """View that records every call for assertions."""

    def __init__(self, confirm_answer: bool = True) -> None:
        self.confirm_answer = confirm_answer
        self.loading: list[bool] = []
        self.messages: list[tuple[str, bool]] = []
        self.renders: list[AppState] = []
        self.checked: list[tuple[str, bool]] = []
        self.confirmations: list[str] = []
        self.hidden = 0

    def show_loading(self, show: bool) -> None:
        self.loading.append(show)

    def show_message(self, message: str, is_error: bool = True) -> None:
        self.messages.append((message, is_error))

    def hide_message(self) -> None:
        self.hidden += 1

    def render(self, state: AppState) -> None:
        self.renders.append(state)

    def set_checked(self, task_id: str, checked: bool) -> None:
        self.checked.append((task_id, checked))

    def confirm(self, message: str) -> bool:
        self.confirmations.append(message)
        return self.confirm_answer

    @property
    def last_message(self) -> str | None:
        return self.messages[-1][0] if self.messages else None


@pytest.fixture
def temp_project(tmp_path: Path) -> Generator[Path, None, None]:
    """Create a temporary project directory and change to it."""
    original_dir = os.getcwd()
    os.chdir(tmp_path)
    try:
        yield tmp_path
    finally:
        os.chdir(original_dir)


@pytest.fixture
def store() -> TaskStore:
    """An in-memory task store."""
    return TaskStore()


@pytest.fixture
def service(store: TaskStore) -> FakeTaskService:
    return FakeTaskService(store)


@pytest.fixture
def view() -> RecordingView:
    return RecordingView()


@pytest.fixture
def cache(tmp_path: Path) -> LocalCache:
    return LocalCache(tmp_path / "cache.json")


@pytest.fixture
def client(service: FakeTaskService, cache: LocalCache, view: RecordingView, tmp_path: Path) -> TaskClient:
    """A client wired to the fake service, a temp cache and a recording view."""
    return TaskClient(service, cache, view, export_dir=tmp_path / "exports", clock=lambda: NOW)


def make_task(
    task_id: str = "t1",
    task: str = "Buy milk",
    *,
    completed: bool = False,
    priority: str = "medium",
    due_date: date | None = None,
    category: str = "general",
    created_at: datetime = NOW,
) -> Task:
    return Task(
        id=task_id,
        task=task,
        completed=completed,
        priority=priority,
        due_date=due_date,
        category=category,
        created_at=created_at,
        updated_at=created_at,
    )


@pytest.fixture
def sample_tasks() -> list[Task]:
    """A small mixed list of tasks."""
    return [
        make_task("a1", "Buy milk", category="shopping", priority="low"),
        make_task("b2", "Write report", priority="high", due_date=date(2026, 10, 17)),
        make_task("c3", "Call plumber", completed=True, category="home"),
        make_task("d4", "File taxes", priority="high", completed=True, due_date=date(2026, 10, 1)),
        make_task("e5", "Plan holiday", category="Travel", due_date=date(2026, 10, 20)),
    ]


@pytest.fixture
def task_factory():
    """Build Task instances with sensible defaults."""
    return make_task


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def now() -> datetime:
    return NOW

