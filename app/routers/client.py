# =============================================================================
# app/routers/client.py - Client State Endpoints
# =============================================================================
# The full state snapshot a front-end renders from, and explicit teardown
# of the client's controller.
# =============================================================================

import logging

from fastapi import APIRouter, Response

from app.config import settings
from app.clients import client_manager
from app.dependencies import ClientIdDep, ControllerDep
from core.models.state import AppState

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/state", response_model=AppState)
async def get_state(controller: ControllerDep):
    """
    Get everything needed to render the client.

    With no user, render the sign-in form; otherwise the todo list.
    """
    return controller.snapshot()


@router.delete("/client")
async def close_client(client_id: ClientIdDep, response: Response):
    """
    End this client: unsubscribe from auth events, release the draft
    preview, end its Supabase session and forget the controller. The
    cookie is dropped, so the next request starts a new, signed-out client.
    """
    closed = client_manager.close(client_id)
    response.delete_cookie(settings.CLIENT_COOKIE_NAME)
    return {"closed": closed}
