# =============================================================================
# app/clients/manager.py - Client Controller Registry
# =============================================================================
# Keeps one TodoAppController per browser client.
#
# Each client has its own Supabase connection and therefore its own auth
# session; controllers are started when created and closed (which
# unsubscribes from auth events and ends the local Supabase session) when
# the client leaves, goes idle, or the app stops.
#
# Limits:
# - Clients idle for longer than idle_timeout seconds are closed
# - At most max_clients are kept; the least recently used one is closed
#   to make room for a new client
#
# Usage:
#   from app.clients import client_manager
#
#   controller = client_manager.get_or_create(client_id)
#   client_manager.close(client_id)
# =============================================================================

import logging
import threading
import time
from typing import Callable, Dict

from app.config import settings
from core.controller import TodoAppController

logger = logging.getLogger(__name__)

ControllerFactory = Callable[[], TodoAppController]


def _default_factory() -> TodoAppController:
    return TodoAppController.from_settings(settings)


class ClientManager:
    """
    Registry of live controllers keyed by client id.

    A client id comes from the signed cookie (see app/clients/tokens.py).
    Only started controllers are ever registered.
    """

    def __init__(
        self,
        factory: ControllerFactory = _default_factory,
        idle_timeout: float = 1800,
        max_clients: int = 500,
        clock: Callable[[], float] = time.monotonic,
    ):
        # client_id -> controller
        self.controllers: Dict[str, TodoAppController] = {}
        # client_id -> clock value of the last request
        self.last_seen: Dict[str, float] = {}
        self.idle_timeout = idle_timeout
        self.max_clients = max_clients
        self._factory = factory
        self._clock = clock
        self._lock = threading.Lock()

    def get_or_create(self, client_id: str) -> TodoAppController:
        """
        Return the client's controller, creating and starting it if needed.

        Idle clients are evicted first. If two requests race to create the
        same client, the second controller is closed and the first returned.

        Args:
            client_id: The client this controller belongs to

        Returns:
            TodoAppController: Started controller
        """
        self.evict_idle()

        with self._lock:
            controller = self.controllers.get(client_id)
            if controller is not None:
                self.last_seen[client_id] = self._clock()
                return controller

        controller = self._factory()
        try:
            controller.start()
        except Exception:
            logger.exception(f"Failed to start controller for client {client_id}")
            controller.close()
            raise

        with self._lock:
            existing = self.controllers.get(client_id)
            if existing is None:
                self.controllers[client_id] = controller
                self.last_seen[client_id] = self._clock()
                evicted = self._pop_over_limit()
            else:
                evicted = [controller]
                controller = existing
                self.last_seen[client_id] = self._clock()

        self._close_controllers(evicted)
        logger.info(
            f"Client {client_id} connected. "
            f"Active clients: {len(self.controllers)}"
        )
        return controller

    def get(self, client_id: str) -> TodoAppController | None:
        return self.controllers.get(client_id)

    def close(self, client_id: str) -> bool:
        """
        Close and forget a client's controller.

        Returns:
            bool: True if a controller was closed
        """
        with self._lock:
            controller = self.controllers.pop(client_id, None)
            self.last_seen.pop(client_id, None)

        if controller is None:
            return False

        controller.close()
        logger.info(
            f"Client {client_id} closed. "
            f"Active clients: {len(self.controllers)}"
        )
        return True

    def evict_idle(self) -> int:
        """
        Close clients that have not made a request within idle_timeout.

        Returns:
            int: Number of clients closed
        """
        cutoff = self._clock() - self.idle_timeout
        with self._lock:
            idle = [cid for cid, seen in self.last_seen.items() if seen < cutoff]
            controllers = [self._forget(cid) for cid in idle]

        self._close_controllers(controllers)
        if controllers:
            logger.info(f"Evicted {len(controllers)} idle clients")
        return len(controllers)

    def close_all(self) -> int:
        """Close every controller (application shutdown)."""
        with self._lock:
            controllers, self.controllers = self.controllers, {}
            self.last_seen = {}

        self._close_controllers(list(controllers.values()))

        if controllers:
            logger.info(f"Closed {len(controllers)} client controllers")
        return len(controllers)

    def get_client_count(self) -> int:
        return len(self.controllers)

    # -------------------------------------------------------------------------
    # Internals (callers hold self._lock)
    # -------------------------------------------------------------------------

    def _forget(self, client_id: str) -> TodoAppController:
        self.last_seen.pop(client_id, None)
        return self.controllers.pop(client_id)

    def _pop_over_limit(self) -> list[TodoAppController]:
        evicted = []
        while len(self.controllers) > self.max_clients:
            oldest = min(self.last_seen, key=self.last_seen.get)
            logger.info(f"Client limit reached, evicting client {oldest}")
            evicted.append(self._forget(oldest))
        return evicted

    @staticmethod
    def _close_controllers(controllers: list[TodoAppController]) -> None:
        for controller in controllers:
            try:
                controller.close()
            except Exception as e:
                logger.warning(f"Failed to close controller: {e}")


# Global singleton instance
client_manager = ClientManager(
    idle_timeout=settings.CLIENT_IDLE_TIMEOUT_SECONDS,
    max_clients=settings.MAX_CLIENTS,
)
