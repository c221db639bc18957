# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Routes that only make sense for a signed-in client depend on
# get_current_user. The identity comes from the client's controller,
# which tracks it through Supabase auth events.
#
# Usage:
#   from app.auth import get_current_user
#
#   @router.get("/protected")
#   async def protected(user: SessionUser = Depends(get_current_user)):
#       return {"user_id": user.id}
# =============================================================================

import logging
from typing import Optional

from app.dependencies import ControllerDep
from app.exceptions import NotAuthenticatedError
from core.models.session import SessionUser

logger = logging.getLogger(__name__)


async def get_current_user(controller: ControllerDep) -> SessionUser:
    """
    Return the signed-in user of this client.

    Raises:
        NotAuthenticatedError: 401 if the client is signed out
    """
    user = controller.user
    if user is None:
        logger.debug("Request needs a signed-in user, client has none")
        raise NotAuthenticatedError()
    return user


async def get_current_user_optional(controller: ControllerDep) -> Optional[SessionUser]:
    """Return the signed-in user, or None for a signed-out client."""
    return controller.user
