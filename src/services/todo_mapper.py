"""Conversion between todos table rows and Todo models."""

from datetime import datetime
from typing import Any
from ulid import ULID
from src.models.todo import (
    PatchAction,
    Priority,
    SchemaCapabilities,
    Todo,
    TodoCreate,
    TodoPatch,
    TodoRow,
)

BASE_COLUMNS = ("id", "title", "completed", "created_at", "due", "priority")
STEP_COLUMN = "step"

# Fields a patch may touch, in write order
PATCH_FIELDS = ("title", "completed", "due", "priority", "step")


def generate_todo_id() -> str:
    """Generate a text-based todo ID (ULID: millisecond timestamp + 80 random bits)."""
    return str(ULID())


def select_columns(capabilities: SchemaCapabilities) -> str:
    """Column projection for reads."""
    columns = BASE_COLUMNS + (STEP_COLUMN,) if capabilities.has_step else BASE_COLUMNS
    return ",".join(columns)


def row_to_todo(row: dict, capabilities: SchemaCapabilities) -> Todo:
    parsed = TodoRow.model_validate(row)
    return Todo(
        id=parsed.id,
        title=parsed.title,
        completed=parsed.completed,
        created_at=parsed.created_at,
        due=parsed.due,
        priority=parsed.priority,
        step=parsed.step if capabilities.has_step else None,
    )


def _column_value(value: Any) -> Any:
    if isinstance(value, Priority):
        return value.value
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


def build_insert_row(
    data: TodoCreate,
    capabilities: SchemaCapabilities,
    *,
    todo_id: str,
    created_at: datetime,
) -> dict:
    """Full row for insert; missing optionals are written as NULL."""
    row = {
        "id": todo_id,
        "title": data.title,
        "completed": False,
        "created_at": created_at.isoformat(),
        "due": _column_value(data.due),
        "priority": data.priority.value,
    }
    if capabilities.has_step:
        row[STEP_COLUMN] = data.step
    return row


def build_update_row(patch: TodoPatch, capabilities: SchemaCapabilities) -> dict:
    """Column changes for a partial update; untouched fields are omitted."""
    row: dict[str, Any] = {}
    for name in PATCH_FIELDS:
        if name == STEP_COLUMN and not capabilities.has_step:
            continue
        action = patch.action(name)
        if action is PatchAction.UNSET:
            continue
        if action is PatchAction.CLEAR:
            row[name] = Priority.MEDIUM.value if name == "priority" else None
        else:
            row[name] = _column_value(getattr(patch, name))
    return row
