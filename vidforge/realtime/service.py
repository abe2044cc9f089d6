"""
Bridge service
Hosts the realtime bridge on a background event loop and mirrors its
connection state into the persistent service notification
"""
from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Optional

from ..core.event_bus import EventBus, Events
from .client import ConnectionState, ConnectionStatus, RealtimeBridge
from .notifier import NotificationCenter

logger = logging.getLogger(__name__)

STATUS_TEXT = {
    ConnectionState.CONNECTING: "Connecting...",
    ConnectionState.CONNECTED: "WebSocket connected",
    ConnectionState.ERROR: "Connection error",
    ConnectionState.DISCONNECTED: "Disconnected",
}


class BridgeService:
    """Long-running host for one RealtimeBridge"""

    def __init__(self, bridge: RealtimeBridge, notifications: NotificationCenter, event_bus: EventBus,
                 shutdown_timeout: float = 10.0):
        self.bridge = bridge
        self.notifications = notifications
        self.event_bus = event_bus
        self.shutdown_timeout = shutdown_timeout

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self._stopped = False
        self.event_bus.subscribe(Events.CONNECTION_STATE_CHANGED, self._on_state_changed)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stopped

    def _on_state_changed(self, status: ConnectionStatus):
        text = STATUS_TEXT.get(status.state, "Disconnected")
        self.notifications.set_service_status(text)
        self.event_bus.emit(Events.SERVICE_STATUS_CHANGED, text)

    def _run_loop(self):
        asyncio.set_event_loop(self._loop)
        try:
            self._loop.run_forever()
        finally:
            self._loop.close()

    def _ensure_loop(self):
        if self._thread is not None and self._thread.is_alive():
            return
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run_loop, name="realtime-bridge", daemon=True)
        self._thread.start()

    def _run(self, coro, timeout: Optional[float] = None) -> Any:
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        return future.result(timeout=timeout)

    def start(self, user_id: Any, token: str, timeout: Optional[float] = None) -> None:
        """Bind the bridge to ``user_id`` and open the connection.

        Calling start again for the same user keeps the existing connection;
        a different user replaces it.
        """
        with self._lock:
            if self._stopped:
                raise RuntimeError("bridge service has been stopped")
            self._ensure_loop()
        self.notifications.set_service_status(STATUS_TEXT[ConnectionState.CONNECTING])
        self._run(self.bridge.initialize(user_id, token), timeout=timeout)
        self._run(self.bridge.connect(), timeout=timeout)
        logger.info("Bridge service started for user %s", user_id)

    def stop(self) -> None:
        """Close the connection and stop the loop; later calls are no-ops"""
        with self._lock:
            if self._stopped:
                return
            self._stopped = True
            loop, thread = self._loop, self._thread
        self.event_bus.unsubscribe(Events.CONNECTION_STATE_CHANGED, self._on_state_changed)
        if loop is None or thread is None:
            return
        try:
            self._run(self.bridge.disconnect(), timeout=self.shutdown_timeout)
        except Exception:
            logger.exception("Bridge disconnect during shutdown failed")
        loop.call_soon_threadsafe(loop.stop)
        thread.join(timeout=self.shutdown_timeout)
        self.notifications.set_service_status(STATUS_TEXT[ConnectionState.DISCONNECTED])
        logger.info("Bridge service stopped")
