"""Error taxonomy shared by the task store, the HTTP service and the client."""

from __future__ import annotations

from pydantic import ValidationError


class TaskTrackError(Exception):
    """Base class for all tasktrack errors."""


class TaskValidationError(TaskTrackError):
    """Task fields failed validation.

    Attributes:
        details: Mapping of field name to a human-readable problem.
    """

    def __init__(self, details: dict[str, str]) -> None:
        self.details = details
        super().__init__("; ".join(f"{name}: {problem}" for name, problem in details.items()))

    @classmethod
    def from_pydantic(cls, exc: ValidationError) -> TaskValidationError:
        """Flatten a pydantic error into field-level details."""
        details: dict[str, str] = {}
        for error in exc.errors():
            name = ".".join(str(part) for part in error["loc"]) or "body"
            if error["type"] == "missing":
                problem = f"{name.capitalize()} is required"
            elif error["type"] == "value_error":
                problem = str(error["ctx"]["error"])
            else:
                problem = error["msg"]
            details.setdefault(name, problem)
        return cls(details)


class TaskNotFoundError(TaskTrackError):
    """No task exists with the requested id."""

    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        super().__init__("Todo not found")


class StoreError(TaskTrackError):
    """The underlying task storage failed (read, write or corrupt data)."""


class ApiError(TaskTrackError):
    """The task service answered with a non-success status.

    Attributes:
        message: The service's ``message`` field (or a per-operation default).
        status: HTTP status code.
        error: Optional extra detail from the service's ``error`` field.
    """

    def __init__(self, message: str, status: int, error: str | None = None) -> None:
        self.message = message
        self.status = status
        self.error = error
        super().__init__(message)

    @property
    def is_validation(self) -> bool:
        return self.status == 400

    @property
    def is_not_found(self) -> bool:
        return self.status == 404

    @property
    def detail(self) -> str:
        """Message suitable for showing to the user."""
        if self.error:
            return f"{self.message}: {self.error}"
        return self.message


class TransportError(TaskTrackError):
    """The request could not complete or its response body was unreadable."""
