"""HTTP transport for the task service (requests).

One method per endpoint. Non-success responses raise ``ApiError`` carrying
the service's message; requests that cannot complete raise
``TransportError``. No timeout and no retry are applied.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

import requests
from pydantic import ValidationError

from tasktrack.errors import ApiError, TransportError
from tasktrack.models import Task

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:3000/todos"


class TaskApi:
    """Client for the ``/todos`` resource."""

    def __init__(self, base_url: str = DEFAULT_API_URL, session: requests.Session | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self._session = session
        self._local = threading.local()

    @property
    def session(self) -> requests.Session:
        """The session for the calling thread.

        Bulk actions call the API from worker threads and a
        ``requests.Session`` is not thread-safe, so each thread gets its own
        unless one was injected.
        """
        if self._session is not None:
            return self._session
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._local.session = requests.Session()
        return session

    def list_tasks(self) -> list[Task]:
        data = self._request("GET", default_message="Failed to fetch todos")
        if not isinstance(data, list):
            raise TransportError("Expected a list of todos from the service")
        return [self._to_task(item) for item in data]

    def get_task(self, task_id: str) -> Task:
        data = self._request("GET", task_id, default_message="Failed to fetch todo")
        return self._to_task(data)

    def create_task(self, fields: dict[str, Any]) -> Task:
        data = self._request("POST", json=fields, default_message="Failed to create todo")
        return self._to_task(data)

    def update_task(self, task_id: str, changes: dict[str, Any]) -> Task:
        data = self._request("PUT", task_id, json=changes, default_message="Failed to update todo")
        return self._to_task(data)

    def delete_task(self, task_id: str) -> None:
        self._request("DELETE", task_id, default_message="Failed to delete todo")

    def _request(
        self,
        method: str,
        task_id: str | None = None,
        *,
        json: Any = None,
        default_message: str,
    ) -> Any:
        url = f"{self.base_url}/{task_id}" if task_id else self.base_url
        logger.debug("%s %s", method, url)

        try:
            response = self.session.request(method, url, json=json)
        except requests.RequestException as e:
            raise TransportError(f"{method} {url} failed: {e}") from e

        if not response.ok:
            message, error = default_message, None
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict):
                message = body.get("message") or default_message
                error = body.get("error")
            raise ApiError(message, status=response.status_code, error=error)

        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"{method} {url} returned an unreadable body") from e

    @staticmethod
    def _to_task(data: Any) -> Task:
        if not isinstance(data, dict):
            raise TransportError("Expected a todo object from the service")
        try:
            return Task.from_dict(data)
        except ValidationError as e:
            raise TransportError(f"Service returned an invalid todo: {e}") from e
