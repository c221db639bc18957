# =============================================================================
# app/routers/draft.py - Draft Input Endpoints
# =============================================================================
# The text and image being composed before a todo is added.
# The selected image gets a local preview that the client can display
# before submitting.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, File, UploadFile
from fastapi.responses import FileResponse
from pydantic import BaseModel

from app.dependencies import ControllerDep
from app.exceptions import NoPreviewError
from core.models.draft import ImageFile
from core.models.state import DraftState

logger = logging.getLogger(__name__)

router = APIRouter()


class DraftTaskRequest(BaseModel):
    task: str


@router.get("", response_model=DraftState)
async def get_draft(controller: ControllerDep):
    """Get the current draft."""
    return controller.snapshot().draft


@router.put("", response_model=DraftState)
async def set_draft_task(body: DraftTaskRequest, controller: ControllerDep):
    """Replace the draft text."""
    return controller.set_draft_task(body.task)


@router.post("/image", response_model=DraftState)
async def select_draft_image(
    image: Annotated[UploadFile, File(description="Image to attach")],
    controller: ControllerDep,
):
    """
    Select an image for the next todo. Replaces (and releases the preview
    of) any previously selected image.

    Raises:
        400: If the type is not allowed
        413: If the image is too large
    """
    content = await image.read()
    return controller.select_image(ImageFile(
        filename=image.filename or "image",
        content=content,
        content_type=image.content_type or "application/octet-stream",
    ))


@router.delete("/image", response_model=DraftState)
async def clear_draft_image(controller: ControllerDep):
    """Drop the selected image."""
    return controller.clear_image()


@router.get("/image/preview")
async def get_draft_preview(controller: ControllerDep):
    """
    Serve the local preview of the selected image.

    Raises:
        404: If no image is selected
    """
    preview = controller.preview
    if preview is None or preview.released:
        raise NoPreviewError()
    return FileResponse(preview.path, media_type=preview.content_type)
