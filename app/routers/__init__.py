# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - client.py: State snapshot and client teardown
# - todos.py: List, add and toggle todos
# - draft.py: Draft text, image selection and preview
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import client
from . import todos
from . import draft

__all__ = [
    "health",
    "client",
    "todos",
    "draft",
]
