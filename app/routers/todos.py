# =============================================================================
# app/routers/todos.py - Todo Endpoints
# =============================================================================
# List, add and toggle todos for the calling client.
#
# The list is served from the client's local state; it is only fetched
# from Supabase when the session is established.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Path, Request, UploadFile, status
from pydantic import BaseModel, Field

from app.auth import get_current_user
from app.dependencies import ControllerDep
from app.exceptions import AddInProgressError, EmptyTaskError
from core.models.draft import ImageFile
from core.models.session import SessionUser
from core.models.state import AddStatus
from core.models.todo import Todo

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Request/Response Models
# =============================================================================

class ToggleRequest(BaseModel):
    """Current completion flag as shown to the user (optional)."""
    current: bool | None = Field(
        default=None,
        description="Flag before the toggle; read from local state when omitted"
    )


class ToggleResponse(BaseModel):
    """Result of a toggle."""
    id: int
    is_complete: bool
    updated: bool = Field(..., description="False if the backend rejected the update")


# =============================================================================
# Endpoints
# =============================================================================

@router.get("", response_model=list[Todo])
async def list_todos(
    controller: ControllerDep,
    user: SessionUser = Depends(get_current_user),
):
    """
    Get the client's todos, newest first.
    """
    return controller.snapshot().todos


@router.post("", response_model=Todo, status_code=status.HTTP_201_CREATED)
async def add_todo(
    request: Request,
    controller: ControllerDep,
    task: Annotated[str | None, Form(description="Task text; defaults to the draft")] = None,
    image: Annotated[UploadFile | None, File(description="Optional image")] = None,
):
    """
    Add a todo.

    When an image is sent it replaces the draft image, is uploaded first,
    and the todo is only created if the upload succeeded. Without form
    fields the current draft is submitted; an empty task field is
    rejected, not replaced by the draft.

    Raises:
        400: If the task is blank
        401: If the session is gone
        409: If another add is still in flight
        502: If the upload or insert failed
    """
    # An empty "task=" field is parsed as None; the raw form tells it apart
    # from a request that sends no task and submits the draft
    if task is None:
        sent = (await request.form()).get("task")
        if isinstance(sent, str):
            task = sent

    if task is not None:
        controller.set_draft_task(task)

    if image is not None:
        content = await image.read()
        controller.select_image(ImageFile(
            filename=image.filename or "image",
            content=content,
            content_type=image.content_type or "application/octet-stream",
        ))

    result = controller.add()

    if result.status == AddStatus.SKIPPED:
        raise EmptyTaskError()
    if result.status == AddStatus.BUSY:
        raise AddInProgressError()
    if result.error is not None:
        raise result.error

    return result.todo


@router.post("/{todo_id}/toggle", response_model=ToggleResponse)
async def toggle_todo(
    todo_id: Annotated[int, Path(description="Todo id")],
    controller: ControllerDep,
    body: ToggleRequest | None = None,
    user: SessionUser = Depends(get_current_user),
):
    """
    Flip a todo's completion flag.

    A rejected update is logged and reported as updated=false; the local
    flag is left unchanged in that case.

    Raises:
        404: If current is omitted and the todo is not in the local list
    """
    current = body.current if body else None
    updated = controller.toggle(todo_id, current)

    todo = controller.todos.get(todo_id)
    if todo is not None:
        is_complete = todo.is_complete
    else:
        is_complete = (not current) if updated else bool(current)

    return ToggleResponse(id=todo_id, is_complete=is_complete, updated=updated)
