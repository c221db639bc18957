# =============================================================================
# core/models/todo.py - Todo Schemas
# =============================================================================
# These models define the shape of a todo row:
# - Todo: A row as returned by the backend (server-assigned id/created_at)
# - TodoInsert: The payload sent when creating a todo
#
# Rows are owned by one user. Ownership is enforced by row-level security
# on the backend; the client only supplies user_id on insert.
# =============================================================================

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class Todo(BaseModel):
    """
    A persisted todo row.

    Example:
        {
            "id": 42,
            "task": "Buy milk",
            "is_complete": false,
            "user_id": "550e8400-e29b-41d4-a716-446655440000",
            "image_url": null,
            "created_at": "2024-01-15T10:30:00Z"
        }
    """
    model_config = ConfigDict(frozen=True)

    # Server-assigned, stable id
    id: int = Field(..., description="Todo id")

    task: str = Field(..., min_length=1, description="What needs to be done")

    is_complete: bool = Field(default=False, description="Completion flag")

    # Owner; never changes after insert
    user_id: UUID | None = Field(default=None, description="Owning user id")

    # Public URL of the attached image, if any
    image_url: str | None = Field(default=None, description="Attached image URL")

    # Used for newest-first ordering
    created_at: datetime | None = Field(default=None, description="Creation timestamp")

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Todo":
        """Create a Todo from a PostgREST row, ignoring unknown columns."""
        return cls.model_validate({k: v for k, v in row.items() if k in cls.model_fields})

    def with_completion(self, is_complete: bool) -> "Todo":
        """Return a copy with the completion flag replaced."""
        return self.model_copy(update={"is_complete": is_complete})


class TodoInsert(BaseModel):
    """
    Payload for inserting a todo.

    The task is trimmed before validation, so whitespace-only input is
    rejected by min_length.
    """

    task: str = Field(..., min_length=1)
    is_complete: bool = False
    user_id: UUID
    image_url: str | None = None

    def to_row(self) -> dict[str, Any]:
        """Serialize for PostgREST; omits image_url when there is none."""
        return self.model_dump(mode="json", exclude_none=True)
