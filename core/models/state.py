# =============================================================================
# core/models/state.py - Application State Snapshots
# =============================================================================
# Immutable views of the controller's state handed to front-ends, plus the
# result type of the add pipeline (upload stage, then insert stage).
# =============================================================================

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from .session import SessionUser
from .todo import Todo


class DraftState(BaseModel):
    """Read-only view of the draft input."""
    model_config = ConfigDict(frozen=True)

    task: str = ""
    image_filename: str | None = None
    has_preview: bool = False


class AppState(BaseModel):
    """
    Snapshot of everything a front-end needs to render.

    - No user: render the sign-up / sign-in form
    - User: render the todo list and the add form
    """
    model_config = ConfigDict(frozen=True)

    user: SessionUser | None = None
    todos: list[Todo] = Field(default_factory=list)
    draft: DraftState = Field(default_factory=DraftState)

    # Add button is disabled while an add (including upload) is in flight
    adding: bool = False

    # Sign-up / sign-in buttons are disabled while a request is in flight
    auth_pending: bool = False


class AddStatus(str, Enum):
    """
    Outcome of an add.

    - added: row inserted and prepended locally
    - skipped: task was blank, nothing happened
    - busy: another add was still in flight
    - failed: a stage failed, see AddResult.error
    """
    ADDED = "added"
    SKIPPED = "skipped"
    BUSY = "busy"
    FAILED = "failed"


class AddStage(str, Enum):
    UPLOAD = "upload"
    INSERT = "insert"


class StageResult(BaseModel):
    """Outcome of one stage of the add pipeline."""
    model_config = ConfigDict(frozen=True)

    stage: AddStage
    ok: bool
    detail: str | None = None


class AddResult(BaseModel):
    """
    Result of add(): upload (optional) then insert, stopping at the first
    failure. A failed upload means the insert stage never ran.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    status: AddStatus
    upload: StageResult | None = None
    insert: StageResult | None = None
    todo: Todo | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.status == AddStatus.ADDED

    @property
    def failed_stage(self) -> AddStage | None:
        for result in (self.upload, self.insert):
            if result is not None and not result.ok:
                return result.stage
        return None
