# =============================================================================
# core/services/session_service.py - Session Management
# =============================================================================
# Tracks who is signed in and reacts to auth events pushed by Supabase.
# Sign-up, sign-in and sign-out delegate to the backend and only report
# success or failure; the identity itself changes through auth events.
# =============================================================================

import logging
import threading
from contextlib import contextmanager
from typing import Callable, Iterator

from lib.supabase_client import SupabaseClient, SupabaseClientError, Subscription
from core.models.session import SessionUser
from app.exceptions import AuthError, AuthPendingError

logger = logging.getLogger(__name__)

SIGN_UP_MESSAGE = "Check your email for confirmation link!"

# Called with the new identity (or None) whenever it changes
IdentityListener = Callable[[SessionUser | None], None]


class SessionManager:
    """
    Owns the current identity.

    Other components read `user`; only this class writes it.
    """

    def __init__(self, backend: SupabaseClient, on_identity: IdentityListener):
        self.backend = backend
        self._on_identity = on_identity
        self._user: SessionUser | None = None
        self._subscription: Subscription | None = None
        self._auth_pending = False
        self._auth_lock = threading.Lock()

    @property
    def user(self) -> SessionUser | None:
        return self._user

    @property
    def auth_pending(self) -> bool:
        return self._auth_pending

    @property
    def subscribed(self) -> bool:
        return self._subscription is not None

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> SessionUser | None:
        """
        Restore an existing session and subscribe to auth events.

        Returns:
            The restored user, or None when there is no session
        """
        try:
            user = self.backend.get_session_user()
        except SupabaseClientError as e:
            logger.error(f"Could not restore session: {e}")
            user = None

        self._set_user(user)

        if self._subscription is None:
            self._subscription = self.backend.on_auth_state_change(self._handle_auth_event)
            logger.info("Subscribed to auth state changes")

        return user

    def close(self) -> None:
        """Unsubscribe from auth events. Safe to call more than once."""
        if self._subscription is None:
            return
        subscription, self._subscription = self._subscription, None
        subscription.unsubscribe()
        logger.info("Unsubscribed from auth state changes")

    def _handle_auth_event(self, event: str, user: SessionUser | None) -> None:
        logger.debug(f"Auth event {event} (user: {user.id if user else None})")
        self._set_user(user)

    def _set_user(self, user: SessionUser | None) -> None:
        self._user = user
        self._on_identity(user)

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def register(self, email: str, password: str, redirect_to: str | None = None) -> str:
        """
        Request a new account.

        No session exists until the user follows the confirmation link,
        so local state does not change.

        Returns:
            Message telling the user to confirm by email

        Raises:
            AuthError: With the backend's message
            AuthPendingError: If another auth request is in flight
        """
        with self._pending():
            try:
                self.backend.sign_up(email, password, redirect_to=redirect_to)
            except SupabaseClientError as e:
                logger.warning(f"Sign-up failed for {email}: {e.message}")
                raise AuthError(e.message, action="sign_up")
        return SIGN_UP_MESSAGE

    def authenticate(self, email: str, password: str) -> None:
        """
        Sign in. The identity is set by the SIGNED_IN event, not here.

        Raises:
            AuthError: With the backend's message
            AuthPendingError: If another auth request is in flight
        """
        with self._pending():
            try:
                self.backend.sign_in(email, password)
            except SupabaseClientError as e:
                logger.warning(f"Sign-in failed for {email}: {e.message}")
                raise AuthError(e.message, action="sign_in")

    def deauthenticate(self) -> None:
        """Sign out. Local identity is cleared whatever the backend says."""
        try:
            self.backend.sign_out()
        except SupabaseClientError as e:
            logger.warning(f"Sign-out failed, clearing local session anyway: {e.message}")
        self._set_user(None)

    @contextmanager
    def _pending(self) -> Iterator[None]:
        """Hold auth_pending for the duration of one auth request."""
        with self._auth_lock:
            if self._auth_pending:
                raise AuthPendingError()
            self._auth_pending = True
        try:
            yield
        finally:
            self._auth_pending = False
