# =============================================================================
# app/clients/tokens.py - Signed Client Cookies
# =============================================================================
# A browser client is identified by a random id carried in a cookie.
# The id is wrapped in an HS256 JWT signed with SECRET_KEY so a client
# cannot pick up another client's controller by guessing ids.
# =============================================================================

import logging
import secrets
import time

from jose import jwt, JWTError

from app.config import settings

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
AUDIENCE = "todo-client"


def new_client_id() -> str:
    return secrets.token_urlsafe(16)


def encode_client_token(client_id: str, secret: str | None = None) -> str:
    """Sign a client id into a cookie value."""
    payload = {
        "sub": client_id,
        "aud": AUDIENCE,
        "iat": int(time.time()),
    }
    return jwt.encode(payload, secret or settings.SECRET_KEY, algorithm=ALGORITHM)


def decode_client_token(token: str | None, secret: str | None = None) -> str | None:
    """
    Verify a cookie value and return the client id.

    Returns:
        The client id, or None if the token is missing or invalid
    """
    if not token:
        return None

    try:
        payload = jwt.decode(
            token,
            secret or settings.SECRET_KEY,
            algorithms=[ALGORITHM],
            audience=AUDIENCE,
        )
    except JWTError as e:
        logger.warning(f"Rejected client token: {e}")
        return None

    client_id = payload.get("sub")
    return client_id if isinstance(client_id, str) and client_id else None
