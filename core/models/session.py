# =============================================================================
# core/models/session.py - Session Identity
# =============================================================================
# The identity of the currently authenticated user, as reported by
# Supabase Auth. Owned by the SessionManager; everything else reads it.
# =============================================================================

from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class SessionUser(BaseModel):
    """
    Authenticated user taken from a Supabase session.

    Only the id and email are kept; tokens stay inside the SDK.
    """
    model_config = ConfigDict(frozen=True)

    id: UUID
    email: str | None = None

    @classmethod
    def from_auth_user(cls, user: Any) -> "SessionUser":
        """Build from a supabase-py User object (or anything with id/email)."""
        return cls(id=UUID(str(user.id)), email=getattr(user, "email", None))
