"""Todo models."""

from datetime import date, datetime
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr, field_validator


class Priority(str, Enum):
    """Todo priority values."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class PatchAction(str, Enum):
    """What an update does to a single field."""
    UNSET = "unset"
    SET = "set"
    CLEAR = "clear"


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class SchemaCapabilities(BaseModel):
    """Snapshot of optional columns available in the todos table."""
    model_config = ConfigDict(frozen=True)

    has_step: bool = Field(default=False, description="Whether the optional step column exists")


class Todo(BaseModel):
    """Todo model as exposed to API clients (camelCase on the wire)."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Todo ID (ULID text)")
    title: str = Field(..., description="Todo title")
    completed: bool = Field(default=False, description="Completion flag")
    created_at: datetime = Field(..., alias="createdAt", description="Creation timestamp")
    due: Optional[date] = Field(None, description="Due date")
    priority: Priority = Field(default=Priority.MEDIUM, description="Priority: Low, Medium, High")
    step: Optional[str] = Field(None, description="Free-text step/notes")

    def to_api(self) -> dict:
        """JSON-ready dict with absent optional fields omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class TodoRow(BaseModel):
    """Row of the todos table."""
    id: str
    title: str
    completed: bool = False
    created_at: datetime
    due: Optional[date] = None
    priority: Priority = Priority.MEDIUM
    step: Optional[str] = None


class TodoCreate(BaseModel):
    """Input for creating a todo."""
    title: StrictStr = Field(..., description="Todo title (trimmed, non-empty)")
    due: Optional[date] = Field(None, description="Due date (YYYY-MM-DD)")
    priority: Priority = Field(default=Priority.MEDIUM, description="Priority, defaults to Medium")
    step: Optional[str] = Field(None, description="Free-text step/notes")

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title is required")
        return value

    @field_validator("due", "step", mode="before")
    @classmethod
    def blank_optional(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("priority", mode="before")
    @classmethod
    def default_priority(cls, value: Any) -> Any:
        value = _blank_to_none(value)
        return Priority.MEDIUM if value is None else value


class TodoPatch(BaseModel):
    """
    Partial update for a todo.

    A field missing from the input is left untouched. An explicit null
    (or "" for due/step) clears it; clearing priority resets it to Medium.
    Title and completed cannot be cleared.
    """
    title: Optional[StrictStr] = None
    completed: Optional[StrictBool] = None
    due: Optional[date] = None
    priority: Optional[Priority] = None
    step: Optional[str] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: Optional[str]) -> str:
        if value is None or not value.strip():
            raise ValueError("title cannot be empty")
        return value.strip()

    @field_validator("completed")
    @classmethod
    def completed_not_null(cls, value: Optional[bool]) -> bool:
        if value is None:
            raise ValueError("completed cannot be null")
        return value

    @field_validator("due", "step", "priority", mode="before")
    @classmethod
    def blank_optional(cls, value: Any) -> Any:
        return _blank_to_none(value)

    def action(self, name: str) -> PatchAction:
        """Tri-state of a field: untouched, set to a value, or cleared."""
        if name not in self.model_fields_set:
            return PatchAction.UNSET
        if getattr(self, name) is None:
            return PatchAction.CLEAR
        return PatchAction.SET

    def is_empty(self) -> bool:
        return not self.model_fields_set
