# =============================================================================
# app/clients/__init__.py - Browser Client Module
# =============================================================================
# One controller per browser client, identified by a signed cookie.
#
# Usage:
#   from app.clients import client_manager
#   controller = client_manager.get_or_create(client_id)
# =============================================================================

from app.clients.manager import ClientManager, client_manager
from app.clients.tokens import (
    decode_client_token,
    encode_client_token,
    new_client_id,
)

__all__ = [
    "ClientManager",
    "client_manager",
    "decode_client_token",
    "encode_client_token",
    "new_client_id",
]
