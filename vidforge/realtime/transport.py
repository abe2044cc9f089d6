"""
Messaging transport
Narrow async interface the bridge drives, plus its centrifuge-python backed
implementation
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Protocol

from centrifuge import Client, ClientEventHandler, SubscriptionEventHandler

logger = logging.getLogger(__name__)


class TransportListener(Protocol):
    def on_connecting(self, reason: str) -> None: ...

    def on_connected(self) -> None: ...

    def on_disconnected(self, reason: str) -> None: ...

    def on_error(self, message: str) -> None: ...

    def on_publication(self, channel: str, data: Any) -> None: ...


class Transport(Protocol):
    """Subscriptions made through a transport survive its own reconnects."""

    def set_listener(self, listener: Optional[TransportListener]) -> None: ...

    async def connect(self) -> None: ...

    async def disconnect(self) -> None: ...

    async def subscribe(self, channel: str) -> None: ...

    async def unsubscribe(self, channel: str) -> None: ...


class _ClientEvents(ClientEventHandler):
    def __init__(self, transport: "CentrifugeTransport"):
        self._transport = transport

    async def on_connecting(self, ctx) -> None:
        self._transport._notify("on_connecting", str(ctx.reason or ""))

    async def on_connected(self, ctx) -> None:
        self._transport._notify("on_connected")

    async def on_disconnected(self, ctx) -> None:
        self._transport._notify("on_disconnected", str(ctx.reason or ""))

    async def on_error(self, ctx) -> None:
        self._transport._notify("on_error", str(ctx.error))


class _SubscriptionEvents(SubscriptionEventHandler):
    def __init__(self, transport: "CentrifugeTransport", channel: str):
        self._transport = transport
        self._channel = channel

    async def on_publication(self, ctx) -> None:
        self._transport._notify("on_publication", self._channel, ctx.pub.data)

    async def on_error(self, ctx) -> None:
        logger.warning("Subscription error on %s: %s", self._channel, ctx.error)


class CentrifugeTransport:
    """Centrifugo websocket client with SDK-managed exponential backoff"""

    def __init__(
        self,
        url: str,
        token: str,
        min_reconnect_delay: float = 0.5,
        max_reconnect_delay: float = 20.0,
        timeout: float = 5.0,
    ):
        self.url = url
        self.token = token
        self.min_reconnect_delay = min_reconnect_delay
        self.max_reconnect_delay = max_reconnect_delay
        self.timeout = timeout
        self._listener: Optional[TransportListener] = None
        self._client: Optional[Client] = None
        self._subscriptions: Dict[str, Any] = {}

    def set_listener(self, listener: Optional[TransportListener]) -> None:
        self._listener = listener

    def _notify(self, method: str, *args) -> None:
        if self._listener is None:
            return
        try:
            getattr(self._listener, method)(*args)
        except Exception:
            logger.exception("Transport listener %s failed", method)

    async def connect(self) -> None:
        if self._client is None:
            self._client = Client(
                self.url,
                events=_ClientEvents(self),
                token=self.token,
                timeout=self.timeout,
                min_reconnect_delay=self.min_reconnect_delay,
                max_reconnect_delay=self.max_reconnect_delay,
            )
        await self._client.connect()

    async def disconnect(self) -> None:
        if self._client is None:
            return
        await self._client.disconnect()

    async def subscribe(self, channel: str) -> None:
        if self._client is None:
            raise RuntimeError("transport is not connected")
        sub = self._subscriptions.get(channel)
        if sub is None:
            sub = self._client.new_subscription(channel, events=_SubscriptionEvents(self, channel))
            self._subscriptions[channel] = sub
        await sub.subscribe()

    async def unsubscribe(self, channel: str) -> None:
        sub = self._subscriptions.get(channel)
        if sub is not None:
            await sub.unsubscribe()
