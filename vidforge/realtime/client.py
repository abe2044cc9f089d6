"""
Realtime bridge
Connection state machine over a messaging transport. Subscribes to the
signed-in user's channel and hands each publication to the event dispatcher
in arrival order.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
import logging
from typing import Any, Callable, Optional

from ..core.event_bus import EventBus, Events
from .channels import user_channel
from .events import parse_message
from .notifier import EventDispatcher
from .transport import Transport

logger = logging.getLogger(__name__)

RECONNECT_EXHAUSTED = "Reconnect attempts exhausted"


class ConnectionState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


@dataclass(frozen=True)
class ConnectionStatus:
    state: ConnectionState
    message: Optional[str] = None


TransportFactory = Callable[[str], Transport]


class RealtimeBridge:
    """Single long-lived connection for one user.

    All methods run on the bridge host's event loop thread; transport
    callbacks arrive on the same loop, so no locking is needed here.
    """

    def __init__(
        self,
        transport_factory: TransportFactory,
        dispatcher: EventDispatcher,
        event_bus: EventBus,
        max_reconnect_attempts: int = 8,
    ):
        self._transport_factory = transport_factory
        self.dispatcher = dispatcher
        self.event_bus = event_bus
        self.max_reconnect_attempts = max(1, int(max_reconnect_attempts))

        self.user_id: Optional[str] = None
        self._transport: Optional[Transport] = None
        self._status = ConnectionStatus(ConnectionState.DISCONNECTED)
        # True between a connect attempt starting and its handshake completing.
        self._handshake_pending = False
        self._connection_open = False
        self._subscribed_channel: Optional[str] = None
        self._failed_attempts = 0
        self._exhausted = False

    @property
    def status(self) -> ConnectionStatus:
        return self._status

    @property
    def state(self) -> ConnectionState:
        return self._status.state

    @property
    def channel(self) -> Optional[str]:
        return user_channel(self.user_id) if self.user_id else None

    def _set_state(self, state: ConnectionState, message: Optional[str] = None) -> None:
        status = ConnectionStatus(state, message)
        if status == self._status:
            return
        self._status = status
        logger.info("Realtime connection %s%s", state.value, f": {message}" if message else "")
        self.event_bus.emit(Events.CONNECTION_STATE_CHANGED, status)

    async def initialize(self, user_id: Any, token: str) -> bool:
        """Bind the bridge to a user; returns False when already bound to that user"""
        user_id = str(user_id)
        if self.user_id == user_id and self._transport is not None:
            return False
        if self._transport is not None:
            # Late callbacks from the old transport must not reach the new session.
            self._transport.set_listener(None)
            await self.disconnect()
        self.user_id = user_id
        self._transport = self._transport_factory(token)
        self._transport.set_listener(self)
        self._failed_attempts = 0
        self._exhausted = False
        return True

    async def connect(self) -> None:
        if self._transport is None:
            self._set_state(ConnectionState.ERROR, "Bridge is not initialized")
            return
        if self._connection_open:
            # Already connected, or the SDK is reconnecting.
            return
        self._handshake_pending = True
        self._connection_open = True
        self._exhausted = False
        self._failed_attempts = 0
        self._set_state(ConnectionState.CONNECTING)
        try:
            await self._transport.connect()
        except Exception as exc:
            logger.exception("Transport connect failed")
            self.on_error(str(exc) or "Connection failed")
            self._connection_open = False
            self._handshake_pending = False

    async def disconnect(self) -> None:
        """Release the subscription and socket; idempotent and safe before connect()"""
        transport = self._transport
        if transport is None or not self._connection_open:
            self._handshake_pending = False
            if not self._exhausted:
                self._set_state(ConnectionState.DISCONNECTED)
            return
        self._connection_open = False
        self._handshake_pending = False
        channel = self._subscribed_channel
        self._subscribed_channel = None
        if channel:
            try:
                await transport.unsubscribe(channel)
            except Exception:
                logger.exception("Unsubscribe from %s failed", channel)
        try:
            await transport.disconnect()
        except Exception:
            logger.exception("Transport disconnect failed")
        if not self._exhausted:
            self._set_state(ConnectionState.DISCONNECTED)

    async def _subscribe_user_channel(self) -> None:
        channel = self.channel
        if not channel or self._subscribed_channel == channel or self._transport is None:
            return
        self._subscribed_channel = channel
        try:
            await self._transport.subscribe(channel)
        except Exception as exc:
            self._subscribed_channel = None
            logger.exception("Subscribe to %s failed", channel)
            self.on_error(str(exc) or f"Subscribe to {channel} failed")

    # Transport callbacks

    def on_connecting(self, reason: str) -> None:
        if not self._connection_open or self._exhausted:
            return
        if self.state == ConnectionState.CONNECTING and self._handshake_pending:
            return
        self._handshake_pending = True
        self._set_state(ConnectionState.CONNECTING, reason or None)

    def on_connected(self) -> None:
        if not self._connection_open or not self._handshake_pending or self._exhausted:
            logger.debug("Ignoring duplicate handshake callback")
            return
        self._handshake_pending = False
        self._failed_attempts = 0
        self._set_state(ConnectionState.CONNECTED)
        self._schedule(self._subscribe_user_channel())

    def on_disconnected(self, reason: str) -> None:
        """Transport dropped; the SDK reconnects on its own unless the bridge closed it"""
        if not self._connection_open or self._exhausted:
            return
        # Subscriptions are restored by the SDK along with the connection.
        self._handshake_pending = True
        self._set_state(ConnectionState.CONNECTING, reason or None)

    def on_error(self, message: str) -> None:
        if self._exhausted:
            return
        self._set_state(ConnectionState.ERROR, message or "Connection error")
        if not self._handshake_pending or not self._connection_open:
            return
        self._failed_attempts += 1
        if self._failed_attempts >= self.max_reconnect_attempts:
            logger.error("Giving up after %s failed connection attempts", self._failed_attempts)
            self._exhausted = True
            self._set_state(ConnectionState.ERROR, RECONNECT_EXHAUSTED)
            self._schedule(self.disconnect())

    def on_publication(self, channel: str, data: Any) -> None:
        event = parse_message(channel, data)
        if event is None:
            return
        try:
            self.dispatcher.dispatch(event)
        except Exception:
            logger.exception("Failed to handle %s", type(event).__name__)

    def _schedule(self, coro) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            logger.warning("No running event loop; dropped scheduled bridge task")
            return
        loop.create_task(coro)
