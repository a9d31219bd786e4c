"""HTTP/JSON surface of the task store (Flask).

Routes:
    GET    /            liveness message
    GET    /todos       all tasks
    GET    /todos/<id>  one task
    POST   /todos       create
    PUT    /todos/<id>  partial update
    DELETE /todos/<id>  delete
"""

from __future__ import annotations

import logging
from typing import Any

from flask import Blueprint, Flask, Response, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from tasktrack.config import ServerConfig
from tasktrack.errors import StoreError, TaskNotFoundError, TaskValidationError
from tasktrack.store import TaskStore

logger = logging.getLogger(__name__)

STORE_KEY = "tasktrack.store"

todos = Blueprint("todos", __name__, url_prefix="/todos")


def _store() -> TaskStore:
    return current_app.extensions[STORE_KEY]


def _json_body() -> Any:
    """Parse the request body; an empty body counts as ``{}``."""
    if not request.get_data():
        return {}
    body = request.get_json(silent=True)
    if body is None:
        raise TaskValidationError({"body": "Request body must be valid JSON"})
    return body


@todos.get("")
def list_todos() -> Response:
    return jsonify([task.to_dict() for task in _store().list_tasks()])


@todos.get("/<task_id>")
def get_todo(task_id: str) -> Response:
    return jsonify(_store().get_task(task_id).to_dict())


@todos.post("")
def create_todo() -> tuple[Response, int]:
    task = _store().create_task(_json_body())
    return jsonify(task.to_dict()), 201


@todos.put("/<task_id>")
def update_todo(task_id: str) -> Response:
    task = _store().update_task(task_id, _json_body())
    return jsonify(task.to_dict())


@todos.delete("/<task_id>")
def delete_todo(task_id: str) -> Response:
    _store().delete_task(task_id)
    return jsonify({"message": "Todo deleted"})


def create_app(store: TaskStore | None = None, config: ServerConfig | None = None) -> Flask:
    """Build the Flask application around ``store``.

    Without an explicit store, one is opened at ``config.data_file``.
    """
    if config is None:
        config = ServerConfig()
    if store is None:
        store = TaskStore(config.data_file)

    app = Flask(__name__)
    app.extensions[STORE_KEY] = store
    app.register_blueprint(todos)

    @app.get("/")
    def index() -> Response:
        return jsonify({"message": "TODO API is running!"})

    @app.after_request
    def add_cors_headers(response: Response) -> Response:
        response.headers["Access-Control-Allow-Origin"] = "*"
        response.headers["Access-Control-Allow-Methods"] = "GET, POST, PUT, DELETE, OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type"
        logger.info("%s %s -> %s", request.method, request.path, response.status_code)
        return response

    @app.errorhandler(TaskValidationError)
    def handle_validation(error: TaskValidationError) -> tuple[Response, int]:
        return jsonify({"message": "Validation error", "error": str(error)}), 400

    @app.errorhandler(TaskNotFoundError)
    def handle_not_found(error: TaskNotFoundError) -> tuple[Response, int]:
        return jsonify({"message": "Todo not found"}), 404

    @app.errorhandler(StoreError)
    def handle_store_error(error: StoreError) -> tuple[Response, int]:
        logger.error("Store failure on %s %s: %s", request.method, request.path, error)
        return jsonify({"message": "Task store error", "error": str(error)}), 500

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception) -> tuple[Response, int]:
        if isinstance(error, HTTPException):
            return jsonify({"message": error.description}), error.code or 500
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"message": "Internal server error", "error": str(error)}), 500

    return app


def run_server(config: ServerConfig) -> None:
    """Serve the API until interrupted."""
    app = create_app(config=config)
    logger.info("Server running on http://%s:%d", config.host, config.port)
    app.run(host=config.host, port=config.port, debug=config.debug)
