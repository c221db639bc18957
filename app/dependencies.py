# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for the per-client controller.
# These are injected into route handlers using Depends().
# =============================================================================

from typing import Annotated

from fastapi import Depends, Request, Response

from app.config import settings
from app.clients import (
    client_manager,
    decode_client_token,
    encode_client_token,
    new_client_id,
)
from core.controller import TodoAppController


def get_client_id(request: Request, response: Response) -> str:
    """
    Read the client id from the signed cookie, issuing a new one when the
    cookie is missing or fails verification.
    """
    token = request.cookies.get(settings.CLIENT_COOKIE_NAME)
    client_id = decode_client_token(token)

    if client_id is None:
        client_id = new_client_id()
        response.set_cookie(
            settings.CLIENT_COOKIE_NAME,
            encode_client_token(client_id),
            httponly=True,
            samesite="lax",
            secure=settings.is_production,
        )

    return client_id


ClientIdDep = Annotated[str, Depends(get_client_id)]


def get_controller(client_id: ClientIdDep) -> TodoAppController:
    """
    Get this client's controller.

    Creates and starts one on the client's first request.
    """
    return client_manager.get_or_create(client_id)


# Type alias for dependency injection
ControllerDep = Annotated[TodoAppController, Depends(get_controller)]
