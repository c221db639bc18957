# =============================================================================
# core/models/ - Data Models
# =============================================================================
# This package contains the client's data shapes:
# - session.py: SessionUser (current identity)
# - todo.py: Todo row and insert payload
# - draft.py: Draft input, selected image and its local preview
# - state.py: Immutable AppState snapshots and the add pipeline result
# =============================================================================

from .session import SessionUser
from .todo import Todo, TodoInsert
from .draft import DraftInput, ImageFile, ImagePreview
from .state import (
    AddResult,
    AddStage,
    AddStatus,
    AppState,
    DraftState,
    StageResult,
)

__all__ = [
    # Session
    "SessionUser",
    # Todo
    "Todo",
    "TodoInsert",
    # Draft
    "DraftInput",
    "ImageFile",
    "ImagePreview",
    # State
    "AddResult",
    "AddStage",
    "AddStatus",
    "AppState",
    "DraftState",
    "StageResult",
]
