# =============================================================================
# core/services/todo_service.py - Todo Synchronization
# =============================================================================
# Keeps the local todo list in step with the backend:
# - load(): full fetch, only when a session is established
# - add(): optional image upload, then insert; the returned row is prepended
# - toggle(): update, then flip the local flag
#
# The list is never re-fetched after a mutation, so it can drift from the
# backend if the same user edits from somewhere else.
# =============================================================================

import logging
import threading

from pydantic import ValidationError

from lib.supabase_client import SupabaseClient, SupabaseClientError
from core.models.draft import ImageFile
from core.models.session import SessionUser
from core.models.state import AddResult, AddStage, AddStatus, StageResult
from core.models.todo import Todo, TodoInsert
from core.services.storage_service import ImageStorageService
from app.exceptions import (
    FetchError,
    InsertError,
    SessionMissingError,
    UpdateError,
    UploadError,
)

logger = logging.getLogger(__name__)


class TodoSynchronizer:
    """
    Local mirror of the signed-in user's todos.

    The list is replaced by load(), prepended to by add() and patched by
    toggle(). Nothing is ever removed except by clear().
    """

    def __init__(self, backend: SupabaseClient, storage: ImageStorageService):
        self.backend = backend
        self.storage = storage
        self._todos: list[Todo] = []
        self._adding = False
        self._add_lock = threading.Lock()

    @property
    def todos(self) -> list[Todo]:
        return list(self._todos)

    @property
    def adding(self) -> bool:
        return self._adding

    def get(self, todo_id: int) -> Todo | None:
        for todo in self._todos:
            if todo.id == todo_id:
                return todo
        return None

    def clear(self) -> None:
        self._todos = []

    # -------------------------------------------------------------------------
    # Load
    # -------------------------------------------------------------------------

    def load(self, user: SessionUser | None) -> bool:
        """
        Replace the local list with the user's todos, newest first.

        Failures are logged and the current list is kept.

        Returns:
            True if the list was replaced
        """
        if user is None:
            return False

        try:
            rows = self.backend.fetch_todos(user.id)
            todos = [Todo.from_row(row) for row in rows]
        except SupabaseClientError as e:
            logger.error(FetchError(e.message).message)
            return False
        except ValidationError as e:
            logger.error(FetchError(f"unreadable todo row: {e}").message)
            return False

        self._todos = todos
        logger.info(f"Loaded {len(self._todos)} todos for user {user.id}")
        return True

    # -------------------------------------------------------------------------
    # Add
    # -------------------------------------------------------------------------

    def add(self, task_text: str, image: ImageFile | None = None) -> AddResult:
        """
        Create a todo, uploading its image first when one is given.

        Steps stop at the first failure, so a failed upload never leads
        to an insert.
        """
        task = (task_text or "").strip()
        if not task:
            return AddResult(status=AddStatus.SKIPPED)

        with self._add_lock:
            if self._adding:
                return AddResult(status=AddStatus.BUSY)
            self._adding = True

        try:
            return self._add(task, image)
        finally:
            self._adding = False

    def _add(self, task: str, image: ImageFile | None) -> AddResult:
        # The session may have expired since the form was rendered
        try:
            user = self.backend.get_user()
        except SupabaseClientError as e:
            logger.warning(f"Could not resolve user before insert: {e.message}")
            user = None
        if user is None:
            return AddResult(status=AddStatus.FAILED, error=SessionMissingError())

        # 1. Upload
        upload_result = None
        image_url = None
        if image is not None:
            try:
                image_url = self.storage.upload(user.id, image)
            except UploadError as e:
                return AddResult(
                    status=AddStatus.FAILED,
                    upload=StageResult(stage=AddStage.UPLOAD, ok=False, detail=e.message),
                    error=e,
                )
            upload_result = StageResult(stage=AddStage.UPLOAD, ok=True, detail=image_url)

        # 2. Insert
        payload = TodoInsert(task=task, user_id=user.id, image_url=image_url)
        try:
            row = self.backend.insert_todo(payload.to_row())
        except SupabaseClientError as e:
            logger.error(f"Insert error: {e}")
            error = InsertError(e.message)
            return AddResult(
                status=AddStatus.FAILED,
                upload=upload_result,
                insert=StageResult(stage=AddStage.INSERT, ok=False, detail=e.message),
                error=error,
            )

        todo = Todo.from_row(row)
        self._todos = [todo, *self._todos]
        logger.info(f"Added todo {todo.id} for user {user.id}")

        return AddResult(
            status=AddStatus.ADDED,
            upload=upload_result,
            insert=StageResult(stage=AddStage.INSERT, ok=True),
            todo=todo,
        )

    # -------------------------------------------------------------------------
    # Toggle
    # -------------------------------------------------------------------------

    def toggle(self, todo_id: int, current: bool) -> bool:
        """
        Flip a todo's completion flag.

        The new value is `not current`; the backend response is only used
        to decide whether the update went through. On failure the local
        flag is left as it was.

        Returns:
            True if the update succeeded
        """
        new_value = not current

        try:
            self.backend.update_todo(todo_id, {"is_complete": new_value})
        except SupabaseClientError as e:
            logger.error(UpdateError(todo_id, e.message).message)
            return False

        self._todos = [
            todo.with_completion(new_value) if todo.id == todo_id else todo
            for todo in self._todos
        ]
        logger.debug(f"Todo {todo_id} is_complete -> {new_value}")
        return True
