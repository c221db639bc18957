# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper around the supabase-py client.
# It is the only place that talks to the SDK and covers:
# - Auth: current session/user, sign-up, sign-in, sign-out, auth events
# - Todo rows: select by owner, insert, update
# - Storage: object upload and public URLs
#
# Unlike a server-side service client, one wrapper instance belongs to one
# signed-in user. It uses the anon key, so row-level security applies to
# every query.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   backend = SupabaseClient(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY)
#   user = backend.get_session_user()
# =============================================================================

from __future__ import annotations

import logging
from typing import Any, Callable, Protocol
from uuid import UUID

from supabase import create_client, Client

from core.models.session import SessionUser

# Set up logging for this module
logger = logging.getLogger(__name__)


AuthListener = Callable[[str, "SessionUser | None"], None]


class Subscription(Protocol):
    """Handle returned by on_auth_state_change."""

    def unsubscribe(self) -> None: ...


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    Carries the backend's own message so it can be shown to the user.
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


def _error_message(exc: Exception) -> str:
    """Auth and PostgREST errors expose .message; fall back to str()."""
    message = getattr(exc, "message", None)
    return message if isinstance(message, str) and message else str(exc)


class SupabaseClient:
    """
    Typed wrapper for one user's Supabase connection.

    Example:
        backend = SupabaseClient(url, anon_key)
        backend.sign_in("a@x.com", "secret1")
        rows = backend.fetch_todos(backend.get_user().id)
    """

    def __init__(
        self,
        url: str,
        key: str,
        todos_table: str = "todos",
        client: Client | None = None,
    ):
        self.url = url
        self.todos_table = todos_table
        self._key = key
        self._client = client

    @property
    def client(self) -> Client:
        """
        Get or create the underlying supabase client.

        Raises:
            SupabaseClientError: If client creation fails
        """
        if self._client is None:
            try:
                self._client = create_client(self.url, self._key)
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_ANON_KEY in your .env file"
                )
        return self._client

    @staticmethod
    def _normalize_uuid(uuid_value: str | UUID) -> str:
        """Convert UUID to string for queries."""
        return str(uuid_value) if isinstance(uuid_value, UUID) else uuid_value

    # -------------------------------------------------------------------------
    # Auth
    # -------------------------------------------------------------------------

    def get_session_user(self) -> SessionUser | None:
        """
        Return the user of the stored session, or None when signed out.

        Raises:
            SupabaseClientError: If the session cannot be read
        """
        try:
            session = self.client.auth.get_session()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to read session: {_error_message(e)}",
                code="GET_SESSION_FAILED",
            )
        if session is None or session.user is None:
            return None
        return SessionUser.from_auth_user(session.user)

    def get_user(self) -> SessionUser | None:
        """
        Re-resolve the current user with the auth server.

        Unlike get_session_user this validates the access token, so an
        expired or revoked session comes back as None.

        Raises:
            SupabaseClientError: If the auth server rejects the request
        """
        try:
            response = self.client.auth.get_user()
        except Exception as e:
            raise SupabaseClientError(
                message=_error_message(e),
                code="GET_USER_FAILED",
            )
        if response is None or response.user is None:
            return None
        return SessionUser.from_auth_user(response.user)

    def sign_up(self, email: str, password: str, redirect_to: str | None = None) -> None:
        """
        Request account creation. The user must confirm by email before
        a session exists.

        Raises:
            SupabaseClientError: With the backend's message on rejection
        """
        credentials: dict[str, Any] = {"email": email, "password": password}
        if redirect_to:
            credentials["options"] = {"email_redirect_to": redirect_to}

        try:
            self.client.auth.sign_up(credentials)
            logger.info(f"Sign-up requested for {email}")
        except Exception as e:
            raise SupabaseClientError(
                message=_error_message(e),
                code="SIGN_UP_FAILED",
                details={"email": email},
            )

    def sign_in(self, email: str, password: str) -> None:
        """
        Sign in with email and password.

        The new session is reported through on_auth_state_change listeners.

        Raises:
            SupabaseClientError: With the backend's message on rejection
        """
        try:
            self.client.auth.sign_in_with_password({"email": email, "password": password})
            logger.info(f"Signed in {email}")
        except Exception as e:
            raise SupabaseClientError(
                message=_error_message(e),
                code="SIGN_IN_FAILED",
                details={"email": email},
            )

    def sign_out(self) -> None:
        """
        Sign out and drop the stored session.

        Raises:
            SupabaseClientError: If the backend call fails
        """
        try:
            self.client.auth.sign_out()
        except Exception as e:
            raise SupabaseClientError(
                message=_error_message(e),
                code="SIGN_OUT_FAILED",
            )

    def release(self) -> None:
        """
        End this connection's local session and stop its token auto-refresh.

        Uses scope "local", so the user's sessions elsewhere stay valid.
        A failed sign-out is logged; the SDK client is dropped either way.
        """
        if self._client is None:
            return
        client, self._client = self._client, None

        try:
            client.auth.sign_out({"scope": "local"})
            logger.debug("Released Supabase session")
        except Exception as e:
            logger.warning(f"Failed to release Supabase session: {_error_message(e)}")

    def on_auth_state_change(self, listener: AuthListener) -> Subscription:
        """
        Subscribe to auth events (SIGNED_IN, SIGNED_OUT, TOKEN_REFRESHED, ...).

        The listener gets the event name and the session's user (None when
        signed out). Call unsubscribe() on the returned handle when done.
        """

        def _callback(event: Any, session: Any) -> None:
            user = None
            if session is not None and getattr(session, "user", None) is not None:
                user = SessionUser.from_auth_user(session.user)
            listener(str(getattr(event, "value", event)), user)

        return self.client.auth.on_auth_state_change(_callback)

    # -------------------------------------------------------------------------
    # Todo Rows
    # -------------------------------------------------------------------------

    def fetch_todos(self, user_id: str | UUID) -> list[dict[str, Any]]:
        """
        Fetch all todos owned by a user, newest first.

        Raises:
            SupabaseClientError: If query fails
        """
        user_id_str = self._normalize_uuid(user_id)

        try:
            response = (
                self.client.table(self.todos_table)
                .select("*")
                .eq("user_id", user_id_str)
                .order("created_at", desc=True)
                .execute()
            )

            rows = response.data or []
            logger.debug(f"Fetched {len(rows)} todos for user {user_id_str}")
            return rows

        except Exception as e:
            raise SupabaseClientError(
                message=_error_message(e),
                code="FETCH_TODOS_FAILED",
                details={"user_id": user_id_str},
            )

    def insert_todo(self, row: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a todo and return the stored row (with id and created_at).

        Raises:
            SupabaseClientError: If insert fails
        """
        try:
            response = (
                self.client.table(self.todos_table)
                .insert(row)
                .execute()
            )

            if response.data:
                return response.data[0]
            raise SupabaseClientError(
                message="Insert returned no data",
                code="INSERT_NO_DATA",
                suggestion="Check the insert policy on the todos table",
            )

        except SupabaseClientError:
            raise
        except Exception as e:
            raise SupabaseClientError(
                message=_error_message(e),
                code="INSERT_TODO_FAILED",
                details={"task": row.get("task")},
            )

    def update_todo(self, todo_id: int, fields: dict[str, Any]) -> None:
        """
        Update a todo by id. Only success or failure is reported.

        Raises:
            SupabaseClientError: If update fails
        """
        try:
            (
                self.client.table(self.todos_table)
                .update(fields)
                .eq("id", todo_id)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=_error_message(e),
                code="UPDATE_TODO_FAILED",
                details={"todo_id": todo_id},
            )

    def ping(self) -> None:
        """
        Run a minimal query against the todos table.

        Raises:
            SupabaseClientError: If the database is unreachable
        """
        try:
            self.client.table(self.todos_table).select("id").limit(1).execute()
        except Exception as e:
            raise SupabaseClientError(
                message=_error_message(e),
                code="PING_FAILED",
            )

    # -------------------------------------------------------------------------
    # Storage
    # -------------------------------------------------------------------------

    def upload_object(
        self,
        bucket: str,
        path: str,
        content: bytes,
        content_type: str,
        cache_control: str = "3600",
    ) -> str:
        """
        Upload bytes to a storage bucket without overwriting.

        Returns:
            The storage path

        Raises:
            SupabaseClientError: If upload fails (including path collisions)
        """
        try:
            self.client.storage.from_(bucket).upload(
                path=path,
                file=content,
                file_options={
                    "cache-control": cache_control,
                    "upsert": "false",
                    "content-type": content_type,
                },
            )
            logger.info(f"Uploaded object to {bucket}/{path}")
            return path

        except Exception as e:
            raise SupabaseClientError(
                message=_error_message(e),
                code="UPLOAD_FAILED",
                details={"bucket": bucket, "path": path},
            )

    def get_public_url(self, bucket: str, path: str) -> str:
        """
        Get the public URL of a stored object.

        Raises:
            SupabaseClientError: If the URL cannot be built
        """
        try:
            return self.client.storage.from_(bucket).get_public_url(path)
        except Exception as e:
            raise SupabaseClientError(
                message=_error_message(e),
                code="PUBLIC_URL_FAILED",
                details={"bucket": bucket, "path": path},
            )
