# =============================================================================
# core/controller.py - Application Controller
# =============================================================================
# Owns all state of one todo client: identity, todo list and draft input.
# Front-ends call the operation methods and render AppState snapshots;
# they never touch the services directly.
#
# Usage:
#   with TodoAppController.from_settings(settings) as controller:
#       controller.authenticate("a@x.com", "secret1")
#       controller.set_draft_task("Buy milk")
#       result = controller.add()
#       print(controller.snapshot().todos)
# =============================================================================

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from lib.supabase_client import SupabaseClient
from core.models.draft import DraftInput, ImageFile, ImagePreview
from core.models.session import SessionUser
from core.models.state import AddResult, AppState, DraftState
from core.services.session_service import SessionManager
from core.services.storage_service import ImageStorageService
from core.services.todo_service import TodoSynchronizer
from app.exceptions import TodoNotFoundError

if TYPE_CHECKING:
    from app.config import Settings

logger = logging.getLogger(__name__)


class TodoAppController:
    """
    Top-level state owner for one client.

    start() restores the session and subscribes to auth events;
    close() unsubscribes, releases the draft preview and ends the
    backend connection's local session.
    """

    def __init__(
        self,
        backend: SupabaseClient,
        storage: ImageStorageService | None = None,
        email_redirect_url: str | None = None,
    ):
        self.backend = backend
        self.storage = storage or ImageStorageService(backend)
        self.email_redirect_url = email_redirect_url
        self.todos = TodoSynchronizer(backend, self.storage)
        self.session = SessionManager(backend, on_identity=self._on_identity)
        self.draft = DraftInput()
        self.closed = False

    @classmethod
    def from_settings(cls, settings: Settings) -> TodoAppController:
        """Build a controller with its own Supabase connection."""
        backend = SupabaseClient(
            settings.SUPABASE_URL,
            settings.SUPABASE_ANON_KEY,
            todos_table=settings.TODOS_TABLE,
        )
        storage = ImageStorageService(
            backend,
            bucket=settings.IMAGE_BUCKET,
            cache_control=settings.IMAGE_CACHE_CONTROL,
            allowed_types=settings.allowed_image_types_list,
            max_size_bytes=settings.max_image_size_bytes,
        )
        return cls(backend, storage=storage, email_redirect_url=settings.EMAIL_REDIRECT_URL)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> AppState:
        self.session.start()
        return self.snapshot()

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.session.close()
        self.draft.release_preview()
        self.backend.release()

    def __enter__(self) -> TodoAppController:
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _on_identity(self, user: SessionUser | None) -> None:
        if user is not None:
            self.todos.load(user)
        else:
            self.todos.clear()

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def user(self) -> SessionUser | None:
        return self.session.user

    @property
    def preview(self) -> ImagePreview | None:
        return self.draft.preview

    def snapshot(self) -> AppState:
        """Immutable view of the current state."""
        return AppState(
            user=self.session.user,
            todos=self.todos.todos,
            draft=DraftState(
                task=self.draft.task,
                image_filename=self.draft.image.filename if self.draft.image else None,
                has_preview=self.draft.preview is not None,
            ),
            adding=self.todos.adding,
            auth_pending=self.session.auth_pending,
        )

    # -------------------------------------------------------------------------
    # Auth
    # -------------------------------------------------------------------------

    def register(self, email: str, password: str, redirect_to: str | None = None) -> str:
        return self.session.register(email, password, redirect_to=redirect_to or self.email_redirect_url)

    def authenticate(self, email: str, password: str) -> AppState:
        self.session.authenticate(email, password)
        return self.snapshot()

    def deauthenticate(self) -> AppState:
        self.session.deauthenticate()
        return self.snapshot()

    # -------------------------------------------------------------------------
    # Todos
    # -------------------------------------------------------------------------

    def load(self) -> bool:
        return self.todos.load(self.session.user)

    def add(self, task_text: str | None = None, image: ImageFile | None = None) -> AddResult:
        """
        Add a todo. With no arguments the current draft is submitted.

        The draft is cleared only when the todo was added.
        """
        if task_text is None:
            task_text = self.draft.task
            image = image or self.draft.image

        result = self.todos.add(task_text, image)
        if result.ok:
            self.draft.clear()
        elif result.error is not None:
            logger.warning(f"Add failed: {result.error}")
        return result

    def toggle(self, todo_id: int, current: bool | None = None) -> bool:
        """
        Flip a todo's completion flag.

        Raises:
            TodoNotFoundError: If current is omitted and the id is not in the local list
        """
        if current is None:
            todo = self.todos.get(todo_id)
            if todo is None:
                raise TodoNotFoundError(todo_id)
            current = todo.is_complete
        return self.todos.toggle(todo_id, current)

    # -------------------------------------------------------------------------
    # Draft
    # -------------------------------------------------------------------------

    def set_draft_task(self, text: str) -> DraftState:
        self.draft.task = text
        return self.snapshot().draft

    def select_image(self, image: ImageFile) -> DraftState:
        """
        Validate and select an image for the next add.

        Raises:
            InvalidImageTypeError: If the type is not allowed
            ImageTooLargeError: If the image is too big
        """
        self.storage.validate(image)
        self.draft.select_image(image)
        return self.snapshot().draft

    def clear_image(self) -> DraftState:
        self.draft.clear_image()
        return self.snapshot().draft
