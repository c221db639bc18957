# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Sign-up / sign-in / sign-out routes and the signed-in user dependency.
#
# Usage:
#   from app.auth import get_current_user
#
#   @router.get("/protected")
#   async def protected(user: SessionUser = Depends(get_current_user)):
#       return {"user_id": user.id}
# =============================================================================

from app.auth.dependencies import get_current_user, get_current_user_optional
from app.auth.models import Credentials, SignUpResponse

__all__ = [
    "get_current_user",
    "get_current_user_optional",
    "Credentials",
    "SignUpResponse",
]
