"""Tests for tasktrack.formatting module."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from tasktrack.formatting import (
    DueBadge,
    due_badge,
    format_date,
    format_date_for_filename,
    format_iso_timestamp,
    format_relative_date,
)

TODAY = date(2026, 10, 18)


class TestDueBadge:
    """Tests for due_badge banding."""

    @pytest.mark.parametrize(
        ("offset", "expected"),
        [
            (-1, DueBadge("overdue", "Overdue by 1 day")),
            (-5, DueBadge("overdue", "Overdue by 5 days")),
            (0, DueBadge("due-soon", "Due today")),
            (1, DueBadge("due-soon", "Due in 1 day")),
            (3, DueBadge("due-soon", "Due in 3 days")),
            (4, DueBadge("plain", "Oct 22, 2026")),
        ],
    )
    def test_bands(self, offset: int, expected: DueBadge) -> None:
        """Test each band boundary."""
        assert due_badge(TODAY + timedelta(days=offset), TODAY) == expected


class TestFormatDate:
    """Tests for the date formatters."""

    def test_format_date(self) -> None:
        """Test the short month style."""
        assert format_date(date(2026, 1, 5)) == "Jan 5, 2026"

    def test_filename_date(self) -> None:
        """Test the compact filename style."""
        assert format_date_for_filename(datetime(2026, 10, 18, 23, 0, tzinfo=timezone.utc)) == "20261018"

    def test_iso_timestamp(self) -> None:
        """Test millisecond ISO timestamps end in Z."""
        value = datetime(2026, 10, 18, 9, 30, 0, 123456, tzinfo=timezone.utc)
        assert format_iso_timestamp(value) == "2026-10-18T09:30:00.123Z"


class TestRelativeDate:
    """Tests for format_relative_date."""

    NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize(
        ("delta", "expected"),
        [
            (timedelta(hours=3), "today"),
            (timedelta(days=3), "3 days ago"),
            (timedelta(days=7), "7 days ago"),
            (timedelta(days=8), "1 week ago"),
            (timedelta(days=20), "2 weeks ago"),
            (timedelta(days=45), "Sep 3, 2026"),
        ],
    )
    def test_ranges(self, delta: timedelta, expected: str) -> None:
        """Test each relative range."""
        assert format_relative_date(self.NOW - delta, self.NOW) == expected
