"""Todos CRUD endpoint for Vercel.

Routes:
    GET    /api/todos
    POST   /api/todos
    GET    /api/todos/{id}
    PUT    /api/todos/{id}
    DELETE /api/todos/{id}
"""

from http.server import BaseHTTPRequestHandler
from typing import Any, Optional
from urllib.parse import unquote, urlsplit
import asyncio
import json

from src.models.todo import Todo
from src.services.todo_store import TodoStore, build_todo_store
from src.services.webhook_notifier import notify_todo_created
from src.utils.config import is_production
from src.utils.errors import StorageError, ValidationError
from src.utils.logging import correlation_context, get_structured_logger, mask_sensitive_data
from src.utils.logging_config import LoggingConfig

LoggingConfig.setup_logging()
logger = get_structured_logger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}

# Per-process state, built on first request
_loop: Optional[asyncio.AbstractEventLoop] = None
_store: Optional[TodoStore] = None


def _response(status: int, body: Any = None) -> dict:
    return {
        "statusCode": status,
        "headers": dict(JSON_HEADERS) if body is not None else {},
        "body": json.dumps(body) if body is not None else "",
    }


def _error(status: int, message: str, error: Optional[Exception] = None) -> dict:
    body = {"error": message}
    if error is not None and not is_production():
        body["detail"] = mask_sensitive_data(str(error))
    return _response(status, body)


def parse_route(path: str) -> Optional[tuple[str, Optional[str]]]:
    """
    Split a request path into ("todos", todo_id).

    Returns None for paths outside the todos resource.
    """
    parts = [unquote(p) for p in urlsplit(path).path.split("/") if p]
    if parts and parts[0] == "api":
        parts = parts[1:]
    if not parts or parts[0] != "todos" or len(parts) > 2:
        return None
    return "todos", (parts[1] if len(parts) == 2 else None)


def _parse_body(raw_body: str) -> Any:
    if not raw_body or not raw_body.strip():
        return None
    return json.loads(raw_body)


async def _list_todos(store: TodoStore) -> dict:
    try:
        todos = await store.list()
    except StorageError as e:
        logger.error("Failed to list todos", error=str(e))
        return _error(500, "failed to load todos", e)
    return _response(200, [todo.to_api() for todo in todos])


async def _get_todo(store: TodoStore, todo_id: str) -> dict:
    try:
        todo = await store.get_by_id(todo_id)
    except StorageError as e:
        logger.error("Failed to get todo", todo_id=todo_id, error=str(e))
        return _error(500, "failed to load todo", e)
    if todo is None:
        return _error(404, "not found")
    return _response(200, todo.to_api())


async def _create_todo(store: TodoStore, raw_body: str) -> tuple[dict, Optional[Todo]]:
    try:
        body = _parse_body(raw_body)
    except ValueError:
        return _error(400, "invalid request"), None

    if not isinstance(body, dict):
        body = {}
    title = body.get("title")
    if not isinstance(title, str) or not title.strip():
        return _error(400, "title is required"), None

    try:
        todo = await store.create(body)
    except ValidationError as e:
        return _error(400, "invalid request", e), None
    except StorageError as e:
        logger.error("Failed to create todo", error=str(e))
        return _error(500, "failed to create todo", e), None

    return _response(201, todo.to_api()), todo


async def _update_todo(store: TodoStore, todo_id: str, raw_body: str) -> dict:
    try:
        patch = _parse_body(raw_body)
    except ValueError:
        return _error(400, "invalid request")

    if patch is None:
        patch = {}
    if not isinstance(patch, dict):
        return _error(400, "invalid request")

    try:
        todo = await store.update(todo_id, patch)
    except ValidationError as e:
        return _error(400, "invalid request", e)
    except StorageError as e:
        logger.error("Failed to update todo", todo_id=todo_id, error=str(e))
        return _error(500, "failed to update todo", e)

    if todo is None:
        return _error(404, "not found")
    return _response(200, todo.to_api())


async def _delete_todo(store: TodoStore, todo_id: str) -> dict:
    try:
        deleted = await store.delete(todo_id)
    except StorageError as e:
        logger.error("Failed to delete todo", todo_id=todo_id, error=str(e))
        return _error(500, "failed to delete todo", e)

    if not deleted:
        return _error(404, "not found")
    return _response(204)


async def dispatch(
    store: TodoStore,
    method: str,
    path: str,
    raw_body: str = "",
) -> tuple[dict, Optional[Todo]]:
    """
    Route a request to the store.

    Returns the response dict and, for a successful create, the new todo
    so the caller can send the webhook after responding.
    """
    route = parse_route(path)
    if route is None:
        return _error(404, "not found"), None

    _, todo_id = route
    method = method.upper()

    if todo_id is None:
        if method == "GET":
            return await _list_todos(store), None
        if method == "POST":
            return await _create_todo(store, raw_body)
    else:
        if method == "GET":
            return await _get_todo(store, todo_id), None
        if method == "PUT":
            return await _update_todo(store, todo_id, raw_body), None
        if method == "DELETE":
            return await _delete_todo(store, todo_id), None

    return _error(405, "method not allowed"), None


def _get_loop() -> asyncio.AbstractEventLoop:
    """One event loop per process so the Supabase HTTP pool stays usable."""
    global _loop
    if _loop is None or _loop.is_closed():
        _loop = asyncio.new_event_loop()
    return _loop


async def _get_store() -> TodoStore:
    global _store
    if _store is None:
        _store = await build_todo_store()
    return _store


class handler(BaseHTTPRequestHandler):
    """Vercel serverless function handler for todos."""

    def _read_body(self) -> str:
        """Raises ValueError for a bad Content-Length or a body that is not UTF-8."""
        content_length = int(self.headers.get('Content-Length', 0) or 0)
        return self.rfile.read(content_length).decode('utf-8') if content_length > 0 else ""

    def _send(self, response: dict, correlation_id: str) -> None:
        self.send_response(response["statusCode"])
        for name, value in response["headers"].items():
            self.send_header(name, value)
        self.send_header(LoggingConfig.LOG_CORRELATION_ID_HEADER, correlation_id)
        self.end_headers()
        if response["body"]:
            self.wfile.write(response["body"].encode('utf-8'))

    def _process(self, method: str, loop: asyncio.AbstractEventLoop) -> tuple[dict, Optional[Todo]]:
        try:
            raw_body = self._read_body()
        except ValueError as e:
            logger.warning("Unreadable request body", method=method, path=self.path, error=str(e))
            return _error(400, "invalid request"), None

        try:
            store = loop.run_until_complete(_get_store())
        except StorageError as e:
            logger.error("Todo store initialization failed", error=str(e))
            return _error(500, "service initialization failed", e), None

        return loop.run_until_complete(dispatch(store, method, self.path, raw_body))

    def _handle(self, method: str) -> None:
        incoming_id = self.headers.get(LoggingConfig.LOG_CORRELATION_ID_HEADER)

        with correlation_context(incoming_id) as correlation_id:
            loop = _get_loop()
            created = None
            try:
                response, created = self._process(method, loop)
            except Exception as e:
                logger.error(
                    "Error processing todo request",
                    exc_info=True,
                    method=method,
                    path=self.path,
                    error=str(e),
                )
                response = _error(500, "internal server error")

            logger.info(
                "Todo request handled",
                method=method,
                path=self.path,
                status=response["statusCode"],
            )
            self._send(response, correlation_id)

            # Webhook runs after the response is written, so it cannot change it
            if created is not None:
                loop.run_until_complete(notify_todo_created(created))

    def do_GET(self):
        """Handle GET request."""
        self._handle("GET")

    def do_POST(self):
        """Handle POST request."""
        self._handle("POST")

    def do_PUT(self):
        """Handle PUT request."""
        self._handle("PUT")

    def do_DELETE(self):
        """Handle DELETE request."""
        self._handle("DELETE")
