"""Client application state and its pure transitions.

``AppState`` is an immutable value. Every function here takes a state and
returns a new one (or a derived value); nothing touches the network, the
cache or the terminal, so filtering and list bookkeeping can be tested
without a live service or view.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Literal

from tasktrack.models import PRIORITIES, Task

StatusFilter = Literal["all", "active", "completed"]
PriorityFilter = Literal["all", "low", "medium", "high"]

STATUS_FILTERS: tuple[str, ...] = ("all", "active", "completed")
PRIORITY_FILTERS: tuple[str, ...] = ("all", *PRIORITIES)


@dataclass(frozen=True)
class AppState:
    """The client's working set plus the transient view selections."""

    todos: tuple[Task, ...] = ()
    status_filter: StatusFilter = "all"
    priority_filter: PriorityFilter = "all"
    search: str = ""
    cached_at: datetime | None = None
    """Set when ``todos`` came from the local cache rather than the service."""


@dataclass(frozen=True)
class Stats:
    """Counts shown alongside the list."""

    total: int
    active: int
    completed: int
    overdue: int


# ---- predicates ----


def matches_status(task: Task, status_filter: str) -> bool:
    if status_filter == "active":
        return not task.completed
    if status_filter == "completed":
        return task.completed
    return True


def matches_priority(task: Task, priority_filter: str) -> bool:
    return priority_filter == "all" or task.priority == priority_filter


def matches_search(task: Task, search: str) -> bool:
    if not search:
        return True
    needle = search.lower()
    return needle in task.task.lower() or needle in task.category.lower()


# ---- derived views ----


def get_filtered_todos(state: AppState) -> list[Task]:
    """Apply status, then priority, then search. Returns a new list."""
    filtered = [t for t in state.todos if matches_status(t, state.status_filter)]
    filtered = [t for t in filtered if matches_priority(t, state.priority_filter)]
    filtered = [t for t in filtered if matches_search(t, state.search)]
    return filtered


def get_overdue_todos(todos: tuple[Task, ...] | list[Task], today: date) -> list[Task]:
    return [t for t in todos if t.is_overdue(today)]


def get_completed_todos(state: AppState) -> list[Task]:
    return [t for t in state.todos if t.completed]


def compute_stats(state: AppState, today: date) -> Stats:
    completed = len(get_completed_todos(state))
    return Stats(
        total=len(state.todos),
        active=len(state.todos) - completed,
        completed=completed,
        overdue=len(get_overdue_todos(state.todos, today)),
    )


def find_todo(state: AppState, key: str) -> Task | None:
    """Find a task by exact id, or by an unambiguous id prefix."""
    for task in state.todos:
        if task.id == key:
            return task

    matches = [t for t in state.todos if key and t.id.startswith(key)]
    return matches[0] if len(matches) == 1 else None


# ---- transitions ----


def with_todos(state: AppState, todos: list[Task], cached_at: datetime | None = None) -> AppState:
    """Replace the whole working set (after a load or a cache fallback)."""
    return replace(state, todos=tuple(todos), cached_at=cached_at)


def prepend_todo(state: AppState, task: Task) -> AppState:
    return replace(state, todos=(task, *state.todos))


def replace_todo(state: AppState, task: Task) -> AppState:
    """Swap in an updated task; unknown ids leave the list unchanged."""
    return replace(state, todos=tuple(task if t.id == task.id else t for t in state.todos))


def remove_todo(state: AppState, task_id: str) -> AppState:
    return replace(state, todos=tuple(t for t in state.todos if t.id != task_id))


def remove_completed(state: AppState) -> AppState:
    return replace(state, todos=tuple(t for t in state.todos if not t.completed))


def set_status_filter(state: AppState, status_filter: str) -> AppState:
    if status_filter not in STATUS_FILTERS:
        raise ValueError(f"Unknown status filter: {status_filter}")
    return replace(state, status_filter=status_filter)


def set_priority_filter(state: AppState, priority_filter: str) -> AppState:
    if priority_filter not in PRIORITY_FILTERS:
        raise ValueError(f"Unknown priority filter: {priority_filter}")
    return replace(state, priority_filter=priority_filter)


def set_search(state: AppState, search: str) -> AppState:
    return replace(state, search=search.strip())
