# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - FakeBackend: an in-memory stand-in for the SupabaseClient wrapper that
#   records every call and can be told to fail specific operations
# =============================================================================

import os
from datetime import datetime, timedelta, timezone
from uuid import UUID

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SECRET_KEY", "test-secret-key-0123456789")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import pytest

from lib.supabase_client import SupabaseClientError
from core.controller import TodoAppController
from core.models.draft import ImageFile
from core.models.session import SessionUser
from core.services.storage_service import ImageStorageService


USER_ID = UUID("550e8400-e29b-41d4-a716-446655440000")
OTHER_USER_ID = UUID("660e8400-e29b-41d4-a716-446655440001")
BASE_TIME = datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)


# =============================================================================
# Fake Backend
# =============================================================================

class FakeSubscription:
    def __init__(self, backend, listener):
        self.backend = backend
        self.listener = listener
        self.unsubscribed = False

    def unsubscribe(self):
        self.unsubscribed = True
        if self.listener in self.backend.listeners:
            self.backend.listeners.remove(self.listener)


class FakeBackend:
    """
    In-memory SupabaseClient.

    - accounts: email -> (password, SessionUser)
    - rows: todo rows across all users
    - fail: method name -> error message for calls that should fail
    - calls: (method name, args) for every call, in order
    """

    def __init__(self, session_user=None, rows=None):
        self.session_user = session_user
        self.accounts = {}
        self.rows = list(rows or [])
        self.objects = {}
        self.listeners = []
        self.subscriptions = []
        self.fail = {}
        self.calls = []
        self._next_id = 100
        self.released = False

    def _record(self, name, *args):
        self.calls.append((name, args))
        if name in self.fail:
            raise SupabaseClientError(self.fail[name], code=f"{name.upper()}_FAILED")

    def call_names(self):
        return [name for name, _ in self.calls]

    def count(self, name):
        return self.call_names().count(name)

    def emit(self, event, user):
        for listener in list(self.listeners):
            listener(event, user)

    # Auth ------------------------------------------------------------------

    def get_session_user(self):
        self._record("get_session_user")
        return self.session_user

    def get_user(self):
        self._record("get_user")
        return self.session_user

    def sign_up(self, email, password, redirect_to=None):
        self._record("sign_up", email, password, redirect_to)

    def sign_in(self, email, password):
        self._record("sign_in", email, password)
        account = self.accounts.get(email)
        if account is None or account[0] != password:
            raise SupabaseClientError("Invalid login credentials", code="SIGN_IN_FAILED")
        self.session_user = account[1]
        self.emit("SIGNED_IN", self.session_user)

    def sign_out(self):
        self._record("sign_out")
        self.session_user = None
        self.emit("SIGNED_OUT", None)

    def on_auth_state_change(self, listener):
        self._record("on_auth_state_change")
        self.listeners.append(listener)
        subscription = FakeSubscription(self, listener)
        self.subscriptions.append(subscription)
        return subscription

    def release(self):
        self._record("release")
        self.released = True

    # Rows ------------------------------------------------------------------

    def fetch_todos(self, user_id):
        self._record("fetch_todos", user_id)
        owned = [row for row in self.rows if row["user_id"] == str(user_id)]
        return sorted(owned, key=lambda row: row["created_at"], reverse=True)

    def insert_todo(self, row):
        self._record("insert_todo", row)
        self._next_id += 1
        stored = {
            "id": self._next_id,
            "image_url": None,
            "created_at": (BASE_TIME + timedelta(days=1, minutes=self._next_id)).isoformat(),
            **row,
        }
        self.rows.append(stored)
        return dict(stored)

    def update_todo(self, todo_id, fields):
        self._record("update_todo", todo_id, fields)
        for row in self.rows:
            if row["id"] == todo_id:
                row.update(fields)

    # Storage ---------------------------------------------------------------

    def upload_object(self, bucket, path, content, content_type, cache_control="3600"):
        self._record("upload_object", bucket, path, content_type, cache_control)
        if (bucket, path) in self.objects:
            raise SupabaseClientError("The resource already exists", code="UPLOAD_FAILED")
        self.objects[(bucket, path)] = content
        return path

    def get_public_url(self, bucket, path):
        self._record("get_public_url", bucket, path)
        return f"https://test-project.supabase.co/storage/v1/object/public/{bucket}/{path}"


def make_row(todo_id, task, minutes=0, is_complete=False, user_id=USER_ID, image_url=None):
    """A todo row as PostgREST returns it."""
    return {
        "id": todo_id,
        "task": task,
        "is_complete": is_complete,
        "user_id": str(user_id),
        "image_url": image_url,
        "created_at": (BASE_TIME + timedelta(minutes=minutes)).isoformat(),
    }


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def user():
    return SessionUser(id=USER_ID, email="a@x.com")


@pytest.fixture
def existing_rows():
    """Two rows for the test user and one belonging to someone else."""
    return [
        make_row(1, "Water plants", minutes=0),
        make_row(2, "Call mom", minutes=30, is_complete=True),
        make_row(3, "Not mine", minutes=45, user_id=OTHER_USER_ID),
    ]


@pytest.fixture
def backend(existing_rows, user):
    """Signed-out backend with one known account and existing rows."""
    fake = FakeBackend(rows=existing_rows)
    fake.accounts["a@x.com"] = ("secret1", user)
    return fake


@pytest.fixture
def signed_in_backend(backend, user):
    """Backend with a stored session for the test user."""
    backend.session_user = user
    return backend


@pytest.fixture
def storage(backend):
    return ImageStorageService(backend, bucket="todo-images", max_size_bytes=1024)


@pytest.fixture
def controller(backend, storage):
    """Started controller over the signed-out backend."""
    app_controller = TodoAppController(backend, storage=storage, email_redirect_url="http://localhost:5173")
    app_controller.start()
    yield app_controller
    app_controller.close()


@pytest.fixture
def png_image():
    return ImageFile(filename="milk.png", content=b"\x89PNG\r\n\x1a\nfake", content_type="image/png")


@pytest.fixture
def signed_in_controller(signed_in_backend, storage):
    """Started controller whose backend already holds a session."""
    app_controller = TodoAppController(signed_in_backend, storage=storage)
    app_controller.start()
    yield app_controller
    app_controller.close()
