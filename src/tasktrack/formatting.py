"""Date formatting and due-date banding for rendered task lists."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Literal

DUE_SOON_DAYS = 3

DueBand = Literal["overdue", "due-soon", "plain"]


@dataclass(frozen=True)
class DueBadge:
    """How a due date is shown: its band and its label."""

    band: DueBand
    text: str


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count > 1 else ''}"


def format_date(value: date) -> str:
    """Format as e.g. ``Oct 18, 2026``."""
    return f"{value.strftime('%b')} {value.day}, {value.year}"


def format_date_for_filename(value: datetime) -> str:
    """Format as ``YYYYMMDD`` (UTC day)."""
    return value.astimezone(timezone.utc).strftime("%Y%m%d")


def format_iso_timestamp(value: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a ``Z`` suffix."""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def due_badge(due: date, today: date) -> DueBadge:
    """Band a due date relative to ``today`` (both at day granularity)."""
    days = (due - today).days

    if days < 0:
        return DueBadge("overdue", f"Overdue by {_plural(-days, 'day')}")
    if days == 0:
        return DueBadge("due-soon", "Due today")
    if days <= DUE_SOON_DAYS:
        return DueBadge("due-soon", f"Due in {_plural(days, 'day')}")
    return DueBadge("plain", format_date(due))


def format_relative_date(value: datetime, now: datetime) -> str:
    """Describe how long ago ``value`` was, e.g. ``3 days ago``."""
    diff_days = math.ceil(abs((now - value).total_seconds()) / 86400)

    if diff_days <= 1:
        return "today"
    if diff_days <= 7:
        return f"{diff_days} days ago"
    if diff_days <= 30:
        return f"{_plural(diff_days // 7, 'week')} ago"
    return format_date(value.date())
