# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .session_service import SessionManager
from .storage_service import ImageStorageService
from .todo_service import TodoSynchronizer

__all__ = [
    "SessionManager",
    "ImageStorageService",
    "TodoSynchronizer",
]
