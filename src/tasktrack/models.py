"""Task model and field normalisation.

The same rules apply wherever task fields enter the system (create, partial
update, import), so they live on the pydantic models here rather than in the
store or the HTTP layer.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from tasktrack.errors import TaskValidationError

Priority = Literal["low", "medium", "high"]
PRIORITIES: tuple[str, ...] = ("low", "medium", "high")

MAX_TASK_LENGTH = 200
DEFAULT_PRIORITY = "medium"
DEFAULT_CATEGORY = "general"

# JSON keys a partial update may change. Everything else is ignored.
UPDATABLE_FIELDS: tuple[str, ...] = ("task", "completed", "priority", "dueDate", "category")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TaskFields(BaseModel):
    """The writable part of a task, normalised."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    task: str
    completed: bool = False
    priority: Priority = DEFAULT_PRIORITY
    due_date: date | None = Field(default=None, alias="dueDate")
    category: str = DEFAULT_CATEGORY

    @field_validator("task", mode="before")
    @classmethod
    def _normalise_task(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("Task is required")
        if isinstance(value, str):
            value = value.strip()
            if not value:
                raise ValueError("Task is required")
            if len(value) > MAX_TASK_LENGTH:
                raise ValueError(f"Task cannot be longer than {MAX_TASK_LENGTH} characters")
        return value

    @field_validator("completed", mode="before")
    @classmethod
    def _normalise_completed(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("priority", mode="before")
    @classmethod
    def _normalise_priority(cls, value: Any) -> Any:
        if value is None:
            return DEFAULT_PRIORITY
        if value not in PRIORITIES:
            raise ValueError(f"`{value}` is not a valid priority (expected low, medium or high)")
        return value

    @field_validator("due_date", mode="before")
    @classmethod
    def _normalise_due_date(cls, value: Any) -> Any:
        if value is None or value == "":
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str) and "T" in value:
            # Full timestamps (e.g. from older exports) keep only the calendar day.
            try:
                return datetime.fromisoformat(value).date()
            except ValueError:
                raise ValueError(f"Invalid due date: {value}") from None
        return value

    @field_validator("category", mode="before")
    @classmethod
    def _normalise_category(cls, value: Any) -> Any:
        if value is None:
            return DEFAULT_CATEGORY
        if isinstance(value, str):
            return value.strip() or DEFAULT_CATEGORY
        return value


class Task(TaskFields):
    """A stored task, as returned by the service."""

    id: str
    created_at: datetime = Field(default_factory=utcnow, alias="createdAt")
    updated_at: datetime = Field(default_factory=utcnow, alias="updatedAt")

    @field_validator("created_at", "updated_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Naive timestamps are read as UTC so they compare with aware ones.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON wire shape (camelCase keys)."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Task:
        """Create from the JSON wire shape."""
        return cls.model_validate(dict(data))

    def is_overdue(self, today: date) -> bool:
        """Due strictly before ``today`` and still open."""
        return self.due_date is not None and not self.completed and self.due_date < today


def validate_fields(data: Any) -> TaskFields:
    """Validate raw input into normalised task fields.

    Raises:
        TaskValidationError: If any field is missing or invalid.
    """
    if not isinstance(data, Mapping):
        raise TaskValidationError({"body": "Expected a JSON object"})
    try:
        return TaskFields.model_validate(dict(data))
    except ValidationError as exc:
        raise TaskValidationError.from_pydantic(exc) from exc


def apply_changes(current: Task, changes: Any) -> TaskFields:
    """Merge a partial update into ``current`` and re-validate the result.

    Only keys in ``UPDATABLE_FIELDS`` are applied; absent keys keep the
    current value. An explicit ``dueDate: null`` clears the due date.
    """
    if not isinstance(changes, Mapping):
        raise TaskValidationError({"body": "Expected a JSON object"})
    merged = current.model_dump(by_alias=True, exclude={"id", "created_at", "updated_at"})
    merged.update({key: value for key, value in changes.items() if key in UPDATABLE_FIELDS})
    return validate_fields(merged)
