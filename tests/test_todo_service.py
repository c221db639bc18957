# =============================================================================
# tests/test_todo_service.py - Todo Synchronizer Tests
# =============================================================================
# This module contains tests for:
# - load(): only with a session, newest first, failures keep the list
# - add(): blank tasks, busy guard, session check, upload-then-insert
# - toggle(): sends the negated flag, flips locally only on success
#
# Tests run against the in-memory FakeBackend from conftest.
# =============================================================================

from unittest.mock import patch

import pytest

from app.exceptions import InsertError, SessionMissingError, UploadError
from core.models import AddStage, AddStatus, ImageFile, Todo
from core.services.todo_service import TodoSynchronizer

from tests.conftest import USER_ID, make_row


@pytest.fixture
def synchronizer(backend, storage):
    return TodoSynchronizer(backend, storage)


@pytest.fixture
def loaded(synchronizer, signed_in_backend, user):
    """Synchronizer holding the user's two existing todos."""
    synchronizer.load(user)
    signed_in_backend.calls.clear()
    return synchronizer


# =============================================================================
# Load Tests
# =============================================================================

class TestLoad:
    """Tests for TodoSynchronizer.load."""

    def test_load_without_user_does_nothing(self, synchronizer, backend):
        """Test that no fetch is issued while signed out."""
        assert synchronizer.load(None) is False
        assert backend.count("fetch_todos") == 0
        assert synchronizer.todos == []

    def test_load_newest_first(self, synchronizer, user):
        """Test that only the user's rows are loaded, newest first."""
        assert synchronizer.load(user) is True

        assert [todo.id for todo in synchronizer.todos] == [2, 1]
        assert all(todo.user_id == USER_ID for todo in synchronizer.todos)

    def test_load_replaces_list(self, synchronizer, backend, user):
        synchronizer.load(user)
        backend.rows = [make_row(9, "Only one")]

        synchronizer.load(user)

        assert [todo.id for todo in synchronizer.todos] == [9]

    def test_load_failure_keeps_list(self, loaded, backend, user, caplog):
        """Test that a failed fetch is logged and the list left alone."""
        backend.fail["fetch_todos"] = "connection refused"

        assert loaded.load(user) is False

        assert [todo.id for todo in loaded.todos] == [2, 1]
        assert "Fetch error: connection refused" in caplog.text

    def test_unreadable_row_keeps_list(self, loaded, backend, user, caplog):
        """Test that a stored row failing validation is logged, not raised."""
        backend.rows.append(make_row(9, ""))

        assert loaded.load(user) is False

        assert [todo.id for todo in loaded.todos] == [2, 1]
        assert "Fetch error: unreadable todo row" in caplog.text

    def test_todos_is_a_copy(self, loaded):
        loaded.todos.clear()

        assert len(loaded.todos) == 2


# =============================================================================
# Add Tests
# =============================================================================

class TestAdd:
    """Tests for TodoSynchronizer.add."""

    @pytest.mark.parametrize("text", ["", "   ", "\t\n", None])
    def test_blank_task_is_skipped(self, loaded, backend, text):
        """Test that blank input makes no backend calls."""
        result = loaded.add(text)

        assert result.status == AddStatus.SKIPPED
        assert backend.calls == []
        assert len(loaded.todos) == 2

    def test_add_without_image(self, loaded, backend):
        """Test one insert with the trimmed task, prepended locally."""
        result = loaded.add("  Buy milk  ")

        assert result.status == AddStatus.ADDED
        assert result.upload is None
        assert result.insert.ok is True
        assert backend.call_names() == ["get_user", "insert_todo"]

        _, (row,) = backend.calls[-1]
        assert row == {"task": "Buy milk", "is_complete": False, "user_id": str(USER_ID)}

        assert loaded.todos[0] == result.todo
        assert loaded.todos[0].task == "Buy milk"
        assert [todo.id for todo in loaded.todos[1:]] == [2, 1]

    def test_add_with_image(self, loaded, backend, png_image):
        """Test that the image is uploaded first and its URL stored."""
        result = loaded.add("Buy milk", png_image)

        assert result.status == AddStatus.ADDED
        assert backend.call_names() == ["get_user", "upload_object", "get_public_url", "insert_todo"]

        _, (bucket, path, content_type, cache_control) = backend.calls[1]
        assert bucket == "todo-images"
        assert path.startswith(f"{USER_ID}/")
        assert path.endswith(".png")
        assert content_type == "image/png"
        assert cache_control == "3600"

        assert result.upload.ok is True
        assert result.todo.image_url.endswith(f"/todo-images/{path}")
        assert backend.calls[-1][1][0]["image_url"] == result.todo.image_url

    def test_upload_failure_skips_insert(self, loaded, backend, png_image):
        """Test that no insert happens after a failed upload."""
        backend.fail["upload_object"] = "Bucket not found"

        result = loaded.add("Buy milk", png_image)

        assert result.status == AddStatus.FAILED
        assert result.failed_stage == AddStage.UPLOAD
        assert result.insert is None
        assert isinstance(result.error, UploadError)
        assert "Bucket not found" in result.error.message
        assert backend.count("insert_todo") == 0
        assert len(loaded.todos) == 2

    def test_public_url_failure_skips_insert(self, loaded, backend, png_image):
        backend.fail["get_public_url"] = "boom"

        result = loaded.add("Buy milk", png_image)

        assert result.failed_stage == AddStage.UPLOAD
        assert backend.count("insert_todo") == 0

    def test_insert_failure(self, loaded, backend):
        """Test that a rejected insert leaves the list unchanged."""
        backend.fail["insert_todo"] = "new row violates row-level security policy"

        result = loaded.add("Buy milk")

        assert result.status == AddStatus.FAILED
        assert result.failed_stage == AddStage.INSERT
        assert isinstance(result.error, InsertError)
        assert result.error.message == "Error: new row violates row-level security policy"
        assert len(loaded.todos) == 2

    def test_missing_session(self, synchronizer, backend):
        """Test that add fails before any write when the session is gone."""
        result = synchronizer.add("Buy milk")

        assert result.status == AddStatus.FAILED
        assert isinstance(result.error, SessionMissingError)
        assert result.error.message == "You must be logged in!"
        assert backend.call_names() == ["get_user"]

    def test_get_user_error_counts_as_missing_session(self, loaded, backend):
        backend.fail["get_user"] = "JWT expired"

        result = loaded.add("Buy milk")

        assert isinstance(result.error, SessionMissingError)
        assert backend.count("insert_todo") == 0

    def test_busy_while_adding(self, loaded, backend):
        """Test that a second add during an in-flight add is rejected."""
        nested = {}

        def insert_and_retry(row):
            nested["result"] = loaded.add("Second")
            assert loaded.adding is True
            return backend.__class__.insert_todo(backend, row)

        with patch.object(backend, "insert_todo", side_effect=insert_and_retry):
            result = loaded.add("First")

        assert result.status == AddStatus.ADDED
        assert nested["result"].status == AddStatus.BUSY
        assert [todo.task for todo in loaded.todos][:1] == ["First"]
        assert len(loaded.todos) == 3

    def test_adding_resets_after_failure(self, loaded, backend):
        backend.fail["insert_todo"] = "boom"
        loaded.add("Buy milk")

        assert loaded.adding is False

        del backend.fail["insert_todo"]
        assert loaded.add("Buy milk").status == AddStatus.ADDED

    def test_rapid_uploads_use_distinct_paths(self, loaded, backend, png_image):
        """Test that two adds with the same file do not collide."""
        first = loaded.add("One", png_image)
        second = loaded.add("Two", png_image)

        assert first.ok and second.ok
        paths = [args[1] for name, args in backend.calls if name == "upload_object"]
        assert len(set(paths)) == 2


# =============================================================================
# Toggle Tests
# =============================================================================

class TestToggle:
    """Tests for TodoSynchronizer.toggle."""

    def test_toggle_sends_negated_flag(self, loaded, backend):
        assert loaded.toggle(1, False) is True

        assert backend.calls == [("update_todo", (1, {"is_complete": True}))]
        assert loaded.get(1).is_complete is True

    def test_toggle_completed_todo(self, loaded):
        assert loaded.toggle(2, True) is True

        assert loaded.get(2).is_complete is False

    def test_toggle_only_touches_target(self, loaded):
        loaded.toggle(1, False)

        assert loaded.get(2).is_complete is True

    def test_toggle_twice_restores(self, loaded, backend):
        """Test that toggling back and forth ends at the original value."""
        loaded.toggle(1, False)
        loaded.toggle(1, True)

        assert loaded.get(1).is_complete is False
        assert backend.rows[0]["is_complete"] is False

    def test_toggle_failure_keeps_flag(self, loaded, backend, caplog):
        """Test that a rejected update is logged and nothing flips."""
        backend.fail["update_todo"] = "permission denied"

        assert loaded.toggle(1, False) is False

        assert loaded.get(1).is_complete is False
        assert "permission denied" in caplog.text

    def test_toggle_unknown_id_leaves_list(self, loaded, backend):
        """Test that an id missing locally still goes to the backend."""
        assert loaded.toggle(999, False) is True

        assert backend.count("update_todo") == 1
        assert [todo.id for todo in loaded.todos] == [2, 1]

    def test_toggle_keeps_order(self, loaded):
        loaded.toggle(1, False)

        assert [todo.id for todo in loaded.todos] == [2, 1]


class TestClear:
    def test_clear(self, loaded):
        loaded.clear()

        assert loaded.todos == []
        assert loaded.get(1) is None
