# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Request/response bodies for the auth endpoints.
# =============================================================================

from pydantic import BaseModel, Field


class Credentials(BaseModel):
    """Email and password for sign-up and sign-in."""
    email: str = Field(..., min_length=3, examples=["a@x.com"])
    password: str = Field(..., min_length=1, examples=["secret1"])


class SignUpResponse(BaseModel):
    """Returned after a sign-up request was accepted."""
    message: str
