"""Tests for tasktrack.server module (Flask test client)."""

from __future__ import annotations

from pathlib import Path

import pytest
from flask.testing import FlaskClient

from tasktrack.config import ServerConfig
from tasktrack.errors import StoreError
from tasktrack.server import create_app
from tasktrack.store import TaskStore


@pytest.fixture
def http(store: TaskStore) -> FlaskClient:
    """A test client for an app around the in-memory store."""
    app = create_app(store)
    app.config["TESTING"] = True
    return app.test_client()


class TestRoot:
    """Tests for the liveness route."""

    def test_root(self, http: FlaskClient) -> None:
        """Test GET / answers with a liveness message."""
        response = http.get("/")
        assert response.status_code == 200
        assert response.get_json() == {"message": "TODO API is running!"}

    def test_cors_headers(self, http: FlaskClient) -> None:
        """Test responses allow cross-origin callers."""
        response = http.get("/todos")
        assert response.headers["Access-Control-Allow-Origin"] == "*"


class TestCrud:
    """Tests for the /todos routes."""

    def test_walkthrough(self, http: FlaskClient) -> None:
        """Test create, reject, update and delete end to end."""
        created = http.post("/todos", json={"task": "buy milk"})
        assert created.status_code == 201
        task = created.get_json()
        assert task["priority"] == "medium"
        assert task["completed"] is False
        assert task["category"] == "general"

        rejected = http.post("/todos", json={"task": "x" * 201})
        assert rejected.status_code == 400

        updated = http.put(f"/todos/{task['id']}", json={"completed": True})
        assert updated.status_code == 200
        assert updated.get_json()["completed"] is True
        assert updated.get_json()["task"] == "buy milk"

        deleted = http.delete(f"/todos/{task['id']}")
        assert deleted.status_code == 200
        assert deleted.get_json() == {"message": "Todo deleted"}

        missing = http.get(f"/todos/{task['id']}")
        assert missing.status_code == 404
        assert missing.get_json() == {"message": "Todo not found"}

    def test_list(self, http: FlaskClient) -> None:
        """Test GET /todos returns every task."""
        http.post("/todos", json={"task": "one"})
        http.post("/todos", json={"task": "two"})
        response = http.get("/todos")
        assert response.status_code == 200
        assert [t["task"] for t in response.get_json()] == ["one", "two"]

    def test_get_one(self, http: FlaskClient) -> None:
        """Test GET /todos/<id> returns the task."""
        task = http.post("/todos", json={"task": "one", "dueDate": "2026-10-20"}).get_json()
        response = http.get(f"/todos/{task['id']}")
        assert response.status_code == 200
        assert response.get_json()["dueDate"] == "2026-10-20"

    def test_validation_error_body(self, http: FlaskClient) -> None:
        """Test validation failures carry field-level detail."""
        response = http.post("/todos", json={"task": "  "})
        assert response.status_code == 400
        body = response.get_json()
        assert body["message"] == "Validation error"
        assert "task" in body["error"]

    def test_bad_priority(self, http: FlaskClient) -> None:
        """Test an unknown priority is a 400."""
        response = http.post("/todos", json={"task": "x", "priority": "asap"})
        assert response.status_code == 400

    def test_missing_body(self, http: FlaskClient) -> None:
        """Test POST without a body is a validation error."""
        response = http.post("/todos")
        assert response.status_code == 400

    def test_malformed_json(self, http: FlaskClient) -> None:
        """Test an unparseable body is a 400, not a 500."""
        response = http.post("/todos", data="{oops", content_type="application/json")
        assert response.status_code == 400

    def test_update_validation_vs_not_found(self, http: FlaskClient) -> None:
        """Test update distinguishes 400 from 404."""
        task = http.post("/todos", json={"task": "x"}).get_json()
        assert http.put(f"/todos/{task['id']}", json={"task": ""}).status_code == 400
        assert http.put("/todos/unknown", json={"completed": True}).status_code == 404

    def test_delete_missing(self, http: FlaskClient) -> None:
        """Test deleting an unknown id is a 404, never a 500."""
        response = http.delete("/todos/unknown")
        assert response.status_code == 404

    def test_store_failure_is_500(self, http: FlaskClient, store: TaskStore, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test persistence faults map to 500 with an error body."""

        def broken() -> list:
            raise StoreError("disk gone")

        monkeypatch.setattr(store, "list_tasks", broken)
        response = http.get("/todos")
        assert response.status_code == 500
        assert response.get_json()["error"] == "disk gone"

    def test_unknown_route(self, http: FlaskClient) -> None:
        """Test unknown paths answer JSON 404s."""
        response = http.get("/nothing-here")
        assert response.status_code == 404
        assert "message" in response.get_json()


class TestCreateApp:
    """Tests for create_app wiring."""

    def test_opens_store_from_config(self, tmp_path: Path) -> None:
        """Test the app opens the configured data file when no store is given."""
        data_file = tmp_path / "tasks.json"
        app = create_app(config=ServerConfig(data_file=str(data_file)))
        app.test_client().post("/todos", json={"task": "persisted"})
        assert data_file.exists()
        assert TaskStore(data_file).list_tasks()[0].task == "persisted"
