"""Todo access layer on top of the Supabase todos table."""

import asyncio
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Type, TypeVar, Union
from pydantic import BaseModel, ValidationError as PydanticValidationError
from src.models.todo import SchemaCapabilities, Todo, TodoCreate, TodoPatch
from src.services.schema_probe import SchemaProbe
from src.services.supabase_client import get_supabase_client
from src.services.todo_mapper import (
    build_insert_row,
    build_update_row,
    generate_todo_id,
    row_to_todo,
    select_columns,
)
from src.utils.config import get_storage_timeout_seconds, get_table_name
from src.utils.errors import StorageError, StorageTimeoutError, ValidationError
from src.utils.logging import get_structured_logger, sanitize_text, timed

logger = get_structured_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _validation_message(error: PydanticValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "input"
    return f"{location}: {first.get('msg', 'invalid value')}"


def parse_input(model: Type[ModelT], data: Any) -> ModelT:
    """Validate caller input into `model`, raising ValidationError on bad shape."""
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data if data is not None else {})
    except PydanticValidationError as e:
        raise ValidationError(_validation_message(e)) from e


class TodoStore:
    """
    CRUD operations for todos.

    The capability snapshot decides whether the step column is read or
    written. Missing records are reported as None/False; every Supabase
    failure is raised as StorageError.
    """

    def __init__(
        self,
        client,
        capabilities: SchemaCapabilities,
        *,
        table: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.client = client
        self.capabilities = capabilities
        self.table = table or get_table_name()
        self.timeout_seconds = timeout_seconds
        self._clock = clock or _utcnow

    def _query(self):
        return self.client.table(self.table)

    async def _execute(self, operation: str, query) -> list[dict]:
        try:
            response = await asyncio.wait_for(query.execute(), timeout=self.timeout_seconds)
        except asyncio.TimeoutError as e:
            logger.error(
                "Supabase operation timed out",
                operation=operation,
                timeout_seconds=self.timeout_seconds,
            )
            raise StorageTimeoutError(
                f"Failed to {operation}: timed out after {self.timeout_seconds}s"
            ) from e
        except Exception as e:
            logger.error(
                "Supabase operation failed",
                exc_info=True,
                operation=operation,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise StorageError(f"Failed to {operation}: {e}") from e
        return response.data or []

    def _to_todo(self, row: dict) -> Todo:
        try:
            return row_to_todo(row, self.capabilities)
        except PydanticValidationError as e:
            raise StorageError(f"Malformed todo row: {_validation_message(e)}") from e

    @timed("todo_store.list")
    async def list(self) -> list[Todo]:
        """All todos, newest first."""
        rows = await self._execute(
            "list todos",
            self._query().select(select_columns(self.capabilities)).order("created_at", desc=True),
        )
        return [self._to_todo(row) for row in rows]

    @timed("todo_store.get_by_id")
    async def get_by_id(self, todo_id: str) -> Optional[Todo]:
        rows = await self._execute(
            "get todo",
            self._query().select(select_columns(self.capabilities)).eq("id", todo_id).limit(1),
        )
        if not rows:
            return None
        return self._to_todo(rows[0])

    @timed("todo_store.create")
    async def create(self, data: Union[TodoCreate, dict]) -> Todo:
        """Insert a new todo with a fresh ID and creation time."""
        payload = parse_input(TodoCreate, data)
        row = build_insert_row(
            payload,
            self.capabilities,
            todo_id=generate_todo_id(),
            created_at=self._clock(),
        )

        rows = await self._execute("create todo", self._query().insert(row))
        if not rows:
            raise StorageError("Failed to create todo: no data returned")

        todo = self._to_todo(rows[0])
        logger.info(
            "Todo created",
            todo_id=todo.id,
            priority=todo.priority.value,
            title_preview=sanitize_text(todo.title, max_length=100),
        )
        return todo

    @timed("todo_store.update")
    async def update(self, todo_id: str, patch: Union[TodoPatch, dict]) -> Optional[Todo]:
        """Apply only the fields present in `patch`; None if no such todo."""
        patch = parse_input(TodoPatch, patch)
        changes = build_update_row(patch, self.capabilities)
        if not changes:
            return await self.get_by_id(todo_id)

        rows = await self._execute(
            "update todo",
            self._query().update(changes).eq("id", todo_id),
        )
        if not rows:
            logger.info("Todo not found for update", todo_id=todo_id)
            return None

        logger.info("Todo updated", todo_id=todo_id, fields=sorted(changes))
        return self._to_todo(rows[0])

    @timed("todo_store.delete")
    async def delete(self, todo_id: str) -> bool:
        """Remove a todo; False when nothing matched."""
        rows = await self._execute("delete todo", self._query().delete().eq("id", todo_id))
        deleted = len(rows) > 0
        logger.info("Todo delete finished", todo_id=todo_id, deleted=deleted)
        return deleted


async def build_todo_store(client=None) -> TodoStore:
    """Create a store with the schema probed once up front."""
    if client is None:
        client = await get_supabase_client()
    table = get_table_name()
    capabilities = await SchemaProbe(client, table).capabilities()
    return TodoStore(
        client,
        capabilities,
        table=table,
        timeout_seconds=get_storage_timeout_seconds(),
    )
