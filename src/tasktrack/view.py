"""Rendering adapters: a rich terminal view and a jinja2 HTML page."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import date, datetime, timezone

import click
from jinja2 import BaseLoader, Environment
from rich.console import Console
from rich.markup import escape
from rich.status import Status
from rich.table import Table
from rich.text import Text

from tasktrack.formatting import due_badge, format_relative_date
from tasktrack.models import DEFAULT_CATEGORY, Task
from tasktrack.state import AppState, Stats, compute_stats, get_filtered_todos

PRIORITY_STYLES = {"low": "green", "medium": "yellow", "high": "bold red"}
BAND_STYLES = {"overdue": "bold red", "due-soon": "yellow", "plain": ""}

HTML_TEMPLATE = """\
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{{ title }}</title>
</head>
<body>
<section class="stats">
  <span id="totalCount">{{ stats.total }}</span> total,
  <span id="activeCount">{{ stats.active }}</span> active,
  <span id="completedCount">{{ stats.completed }}</span> completed,
  <span id="overdueCount">{{ stats.overdue }}</span> overdue
</section>
{% if stale_since -%}
<p class="error">Showing local backup from {{ stale_since }}; data may be stale.</p>
{% endif -%}
{% if rows -%}
<ul id="todoList">
{% for row in rows -%}
  <li class="todo-item{% if row.task.completed %} completed{% endif %}" data-id="{{ row.task.id }}">
    <input type="checkbox" class="todo-checkbox"{% if row.task.completed %} checked{% endif %} data-id="{{ row.task.id }}">
    <div class="todo-content">
      <div class="todo-text" data-id="{{ row.task.id }}">{{ row.task.task }}</div>
      <div class="todo-meta">
        <span class="priority-badge priority-{{ row.task.priority }}">{{ row.task.priority }}</span>
        {% if row.task.category != default_category -%}
        <span class="category">{{ row.task.category }}</span>
        {% endif -%}
        {% if row.badge -%}
        <span class="due-date {{ row.badge_class }}">{{ row.badge.text }}</span>
        {% endif -%}
        <span class="created-date">Created {{ row.created }}</span>
      </div>
    </div>
  </li>
{% endfor -%}
</ul>
{% else -%}
<p id="emptyState">No todos to show.</p>
{% endif -%}
</body>
</html>
"""


def _today() -> date:
    return date.today()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _rows(state: AppState, today: date, now: datetime) -> list[dict]:
    rows = []
    for task in get_filtered_todos(state):
        badge = due_badge(task.due_date, today) if task.due_date else None
        rows.append(
            {
                "task": task,
                "badge": badge,
                "badge_class": badge.band if badge and badge.band != "plain" else "",
                "created": format_relative_date(task.created_at, now),
            }
        )
    return rows


def render_html(
    state: AppState,
    today: date | None = None,
    now: datetime | None = None,
    title: str = "Todos",
) -> str:
    """Render the derived view as a standalone HTML page (autoescaped)."""
    today = today or _today()
    now = now or _now()
    env = Environment(loader=BaseLoader(), autoescape=True)
    template = env.from_string(HTML_TEMPLATE)
    return template.render(
        title=title,
        stats=compute_stats(state, today),
        rows=_rows(state, today, now),
        default_category=DEFAULT_CATEGORY,
        stale_since=state.cached_at.isoformat() if state.cached_at else None,
    )


def build_table(state: AppState, today: date, now: datetime) -> Table:
    """Build the rich table for the filtered list."""
    table = Table(show_header=True, header_style="bold", expand=False)
    table.add_column("", width=3)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Task")
    table.add_column("Priority")
    table.add_column("Category", style="magenta")
    table.add_column("Due")
    table.add_column("Created", style="dim")

    for row in _rows(state, today, now):
        task: Task = row["task"]
        text = Text(task.task, style="dim strike" if task.completed else "")
        badge = row["badge"]
        table.add_row(
            "[green]✓[/green]" if task.completed else "○",
            task.id[:8],
            text,
            Text(task.priority, style=PRIORITY_STYLES[task.priority]),
            escape(task.category) if task.category != DEFAULT_CATEGORY else "",
            Text(badge.text, style=BAND_STYLES[badge.band]) if badge else "",
            row["created"],
        )

    return table


def format_stats(stats: Stats) -> str:
    return (
        f"[bold]{stats.total}[/bold] total · "
        f"[bold]{stats.active}[/bold] active · "
        f"[bold]{stats.completed}[/bold] completed · "
        f"[bold red]{stats.overdue}[/bold red] overdue"
    )


class ConsoleView:
    """Terminal implementation of the client's view."""

    def __init__(
        self,
        console: Console | None = None,
        *,
        assume_yes: bool = False,
        today: Callable[[], date] = _today,
        now: Callable[[], datetime] = _now,
    ) -> None:
        self._console = console or Console()
        self._assume_yes = assume_yes
        self._today = today
        self._now = now
        self._status: Status | None = None
        self._muted = False
        self.message: str | None = None

    @contextmanager
    def muted(self) -> Iterator[None]:
        """Suppress list rendering (messages still show) inside the block."""
        self._muted = True
        try:
            yield
        finally:
            self._muted = False

    def show_loading(self, show: bool) -> None:
        if show and self._status is None:
            self._status = self._console.status("Working...")
            self._status.start()
        elif not show and self._status is not None:
            self._status.stop()
            self._status = None

    def show_message(self, message: str, is_error: bool = True) -> None:
        self.message = message
        style = "red" if is_error else "green"
        self._console.print(f"[{style}]{escape(message)}[/{style}]")

    def hide_message(self) -> None:
        self.message = None

    def render(self, state: AppState) -> None:
        if self._muted:
            return

        today = self._today()
        filtered = get_filtered_todos(state)
        if filtered:
            self._console.print(build_table(state, today, self._now()))
        else:
            self._console.print("[dim]No todos to show.[/dim]")
        self._console.print(format_stats(compute_stats(state, today)))

        if state.cached_at is not None:
            self._console.print("[yellow]Offline: showing cached todos.[/yellow]")

    def set_checked(self, task_id: str, checked: bool) -> None:
        mark = "done" if checked else "open"
        self._console.print(f"[dim]{escape(task_id[:8])} left {mark}.[/dim]")

    def confirm(self, message: str) -> bool:
        if self._assume_yes:
            return True
        return click.confirm(message, default=False)
