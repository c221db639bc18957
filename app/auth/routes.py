# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# Sign-up, sign-in and sign-out for the calling client.
#
# Sign-in does not set the user directly: Supabase emits a SIGNED_IN event
# that the client's controller reacts to (which also loads the todos).
# =============================================================================

import logging

from fastapi import APIRouter, Depends, Request

from app.auth.dependencies import get_current_user
from app.auth.models import Credentials, SignUpResponse
from app.config import settings
from app.dependencies import ControllerDep
from core.models.session import SessionUser
from core.models.state import AppState

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/signup", response_model=SignUpResponse)
async def sign_up(body: Credentials, request: Request, controller: ControllerDep):
    """
    Request a new account.

    The confirmation email links back to EMAIL_REDIRECT_URL, or to this
    server's origin when that is unset.

    Raises:
        400: If the backend rejects the sign-up
        409: If another auth request is in flight
    """
    redirect_to = settings.EMAIL_REDIRECT_URL or str(request.base_url).rstrip("/")
    message = controller.register(body.email, body.password, redirect_to=redirect_to)
    return SignUpResponse(message=message)


@router.post("/signin", response_model=AppState)
async def sign_in(body: Credentials, controller: ControllerDep):
    """
    Sign in with email and password.

    Returns the client state after the session was established.

    Raises:
        400: If the credentials are rejected
        409: If another auth request is in flight
    """
    return controller.authenticate(body.email, body.password)


@router.post("/signout", response_model=AppState)
async def sign_out(controller: ControllerDep):
    """
    Sign out. The local todo list is always cleared.
    """
    return controller.deauthenticate()


@router.get("/me", response_model=SessionUser)
async def get_current_user_info(user: SessionUser = Depends(get_current_user)):
    """
    Get the signed-in user.

    Raises:
        401: If not signed in
    """
    return user
