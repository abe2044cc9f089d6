import asyncio
import time
import unittest

from vidforge.core.config import AppConfig
from vidforge.core.event_bus import EventBus, Events
from vidforge.core.result import Err, Ok
from vidforge.models.user import User
from vidforge.realtime.app_context import build_app_context
from vidforge.realtime.client import RECONNECT_EXHAUSTED, ConnectionState, RealtimeBridge
from vidforge.realtime.notifier import SERVICE_NOTIFICATION_KEY, EventDispatcher, NotificationCenter
from vidforge.realtime.service import BridgeService


class FakeTransport:
    def __init__(self, token):
        self.token = token
        self.listener = None
        self.calls = []
        self.fail_connect = None

    def set_listener(self, listener):
        self.listener = listener

    def fire(self, callback, *args):
        if self.listener is not None:
            getattr(self.listener, callback)(*args)

    async def connect(self):
        self.calls.append("connect")
        if self.fail_connect:
            raise self.fail_connect

    async def disconnect(self):
        self.calls.append("disconnect")

    async def subscribe(self, channel):
        self.calls.append(f"subscribe {channel}")

    async def unsubscribe(self, channel):
        self.calls.append(f"unsubscribe {channel}")


class _Factory:
    def __init__(self):
        self.created = []

    def __call__(self, token):
        transport = FakeTransport(token)
        self.created.append(transport)
        return transport

    @property
    def last(self):
        return self.created[-1]


def make_bridge(max_attempts=8):
    bus = EventBus()
    notifications = NotificationCenter(bus)
    factory = _Factory()
    bridge = RealtimeBridge(factory, EventDispatcher(notifications, bus), bus, max_reconnect_attempts=max_attempts)
    states = []
    bus.subscribe(Events.CONNECTION_STATE_CHANGED, lambda status: states.append(status.state))
    return bridge, factory, notifications, states


class TestRealtimeBridge(unittest.IsolatedAsyncioTestCase):
    async def test_connect_is_idempotent(self):
        bridge, factory, _, _ = make_bridge()
        await bridge.initialize(42, "tok")
        await bridge.connect()
        await bridge.connect()
        self.assertEqual(factory.last.calls, ["connect"])
        self.assertEqual(bridge.state, ConnectionState.CONNECTING)

    async def test_connected_reported_once_and_subscribes_once(self):
        bridge, factory, _, states = make_bridge()
        await bridge.initialize(42, "tok")
        await bridge.connect()
        bridge.on_connected()
        bridge.on_connected()
        await asyncio.sleep(0)
        self.assertEqual(states.count(ConnectionState.CONNECTED), 1)
        self.assertEqual(factory.last.calls, ["connect", "subscribe user:42"])

    async def test_transport_drop_reconnects_and_keeps_subscription(self):
        bridge, factory, _, states = make_bridge()
        await bridge.initialize(42, "tok")
        await bridge.connect()
        transport = factory.last
        transport.fire("on_connected")
        await asyncio.sleep(0)
        transport.fire("on_disconnected", "transport closed")
        self.assertEqual(bridge.state, ConnectionState.CONNECTING)
        self.assertEqual(bridge.status.message, "transport closed")
        transport.fire("on_connected")
        await asyncio.sleep(0)
        self.assertEqual(bridge.state, ConnectionState.CONNECTED)
        self.assertEqual(states.count(ConnectionState.CONNECTED), 2)
        self.assertEqual(transport.calls.count("subscribe user:42"), 1)

    async def test_failed_reconnects_after_drop_hit_the_cap(self):
        bridge, factory, _, _ = make_bridge(max_attempts=2)
        await bridge.initialize(42, "tok")
        await bridge.connect()
        transport = factory.last
        transport.fire("on_connected")
        await asyncio.sleep(0)
        transport.fire("on_disconnected", "transport closed")
        transport.fire("on_error", "connection refused")
        transport.fire("on_error", "connection refused")
        await asyncio.sleep(0)
        self.assertEqual(bridge.state, ConnectionState.ERROR)
        self.assertEqual(bridge.status.message, RECONNECT_EXHAUSTED)
        self.assertEqual(transport.calls[-2:], ["unsubscribe user:42", "disconnect"])
        transport.fire("on_disconnected", "disconnect called")
        self.assertEqual(bridge.status.message, RECONNECT_EXHAUSTED)

    async def test_connect_while_sdk_reconnects_is_noop(self):
        bridge, factory, _, _ = make_bridge()
        await bridge.initialize(42, "tok")
        await bridge.connect()
        transport = factory.last
        transport.fire("on_connected")
        await asyncio.sleep(0)
        transport.fire("on_disconnected", "transport closed")
        transport.fire("on_error", "connection refused")
        await bridge.connect()
        self.assertEqual(transport.calls.count("connect"), 1)
        transport.fire("on_connected")
        self.assertEqual(bridge.state, ConnectionState.CONNECTED)

    async def test_previous_transport_is_detached_on_user_change(self):
        bridge, factory, _, _ = make_bridge(max_attempts=1)
        await bridge.initialize(1, "a")
        await bridge.connect()
        old = factory.last
        old.fire("on_connected")
        await asyncio.sleep(0)
        await bridge.initialize(2, "b")
        await bridge.connect()
        factory.last.fire("on_connected")
        await asyncio.sleep(0)
        self.assertIsNone(old.listener)
        old.fire("on_disconnected", "disconnect called")
        old.fire("on_error", "socket closed")
        self.assertEqual(bridge.state, ConnectionState.CONNECTED)
        self.assertIsNone(bridge.status.message)
        self.assertEqual(bridge.channel, "user:2")

    async def test_disconnect_before_connect_is_noop(self):
        bridge, factory, _, _ = make_bridge()
        await bridge.disconnect()
        await bridge.initialize(42, "tok")
        await bridge.disconnect()
        self.assertEqual(factory.last.calls, [])
        self.assertEqual(bridge.state, ConnectionState.DISCONNECTED)

    async def test_disconnect_closes_once(self):
        bridge, factory, _, _ = make_bridge()
        await bridge.initialize(42, "tok")
        await bridge.connect()
        bridge.on_connected()
        await asyncio.sleep(0)
        await bridge.disconnect()
        await bridge.disconnect()
        bridge.on_disconnected("client")
        self.assertEqual(factory.last.calls, ["connect", "subscribe user:42", "unsubscribe user:42", "disconnect"])
        self.assertEqual(bridge.state, ConnectionState.DISCONNECTED)

    async def test_reinitialize_only_on_user_change(self):
        bridge, factory, _, _ = make_bridge()
        self.assertTrue(await bridge.initialize(1, "a"))
        self.assertFalse(await bridge.initialize("1", "a"))
        await bridge.connect()
        first = factory.last
        self.assertTrue(await bridge.initialize(2, "b"))
        self.assertEqual(first.calls, ["connect", "disconnect"])
        self.assertEqual(len(factory.created), 2)
        self.assertEqual(bridge.channel, "user:2")

    async def test_publications_dispatch_in_order(self):
        bridge, _, notifications, _ = make_bridge()
        await bridge.initialize(42, "tok")
        bridge.on_publication("user:42", {"event": "download.created", "payload": {"id": "t1", "title": "Clip"}})
        bridge.on_publication("user:42", {"event": "download.progress", "payload": {"task_id": "t1", "progress": 30}})
        bridge.on_publication("user:42", {"event": "download.failed", "payload": {"task_id": "t1", "error_message": "Video is private"}})
        bridge.on_publication("user:42", "garbage")
        note = notifications.get("t1")
        self.assertEqual(note.title, "Download failed")
        self.assertEqual(note.body, "Video is private")
        self.assertEqual(len(notifications.active()), 1)

    async def test_attempt_cap_stops_retrying(self):
        bridge, factory, _, _ = make_bridge(max_attempts=3)
        await bridge.initialize(42, "tok")
        await bridge.connect()
        for _ in range(3):
            bridge.on_error("connection refused")
            bridge.on_connecting("reconnecting")
        await asyncio.sleep(0)
        self.assertEqual(bridge.state, ConnectionState.ERROR)
        self.assertEqual(bridge.status.message, RECONNECT_EXHAUSTED)
        self.assertEqual(factory.last.calls, ["connect", "disconnect"])

    async def test_errors_after_handshake_do_not_count(self):
        bridge, factory, _, _ = make_bridge(max_attempts=1)
        await bridge.initialize(42, "tok")
        await bridge.connect()
        bridge.on_connected()
        await asyncio.sleep(0)
        bridge.on_error("publish failed")
        await asyncio.sleep(0)
        self.assertEqual(bridge.status.message, "publish failed")
        self.assertNotIn("disconnect", factory.last.calls)

    async def test_connect_exception_becomes_error_state(self):
        bridge, factory, _, _ = make_bridge()
        await bridge.initialize(42, "tok")
        factory.last.fail_connect = OSError("unreachable")
        await bridge.connect()
        self.assertEqual(bridge.state, ConnectionState.ERROR)
        self.assertEqual(bridge.status.message, "unreachable")


def _wait_for(predicate, timeout=2.0):
    deadline = time.time() + timeout
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


class TestBridgeService(unittest.TestCase):
    def test_status_mirrors_state_and_stop_is_once(self):
        bridge, factory, notifications, _ = make_bridge()
        service = BridgeService(bridge, notifications, bridge.event_bus)
        service.start(42, "tok")
        status = notifications.get(SERVICE_NOTIFICATION_KEY)
        self.assertEqual(status.body, "Connecting...")
        self.assertTrue(service.running)

        async def handshake():
            bridge.on_connected()
            await asyncio.sleep(0)

        asyncio.run_coroutine_threadsafe(handshake(), service._loop).result(timeout=2)
        self.assertTrue(_wait_for(lambda: "subscribe user:42" in factory.last.calls))
        self.assertEqual(notifications.get(SERVICE_NOTIFICATION_KEY).body, "WebSocket connected")

        service.stop()
        service.stop()
        self.assertEqual(factory.last.calls.count("disconnect"), 1)
        self.assertEqual(notifications.get(SERVICE_NOTIFICATION_KEY).body, "Disconnected")
        self.assertFalse(service.running)
        with self.assertRaises(RuntimeError):
            service.start(42, "tok")

    def test_stop_without_start(self):
        bridge, _, notifications, _ = make_bridge()
        service = BridgeService(bridge, notifications, bridge.event_bus)
        service.stop()
        self.assertFalse(service.running)


class _Mobile:
    def __init__(self, user=None, token=None):
        self.user = user
        self.token = token
        self.contexts = []

    def current_user(self, ctx):
        self.contexts.append(ctx)
        return Ok(self.user) if self.user else Err("Unauthorized", status=401)

    def messaging_token(self, ctx):
        return Ok(self.token) if self.token else Err("No token", status=502)


class TestAppContext(unittest.TestCase):
    def test_start_for_resolves_user_and_token(self):
        factory = _Factory()
        app_ctx = build_app_context(AppConfig(reconnect_max_attempts=2), transport_factory=factory)
        app_ctx.mobile = _Mobile(User(id="7", email="a@b.c"), "centrifugo-jwt")
        try:
            result = app_ctx.start_for("mobile-token")
            self.assertEqual(result.value.id, "7")
            self.assertEqual(factory.last.token, "centrifugo-jwt")
            self.assertEqual(app_ctx.mobile.contexts[0].platform, "android")
            self.assertEqual(app_ctx.bridge.max_reconnect_attempts, 2)
            self.assertTrue(_wait_for(lambda: factory.last.calls == ["connect"]))
        finally:
            app_ctx.shutdown()

    def test_start_for_without_user_does_not_connect(self):
        factory = _Factory()
        app_ctx = build_app_context(AppConfig(), transport_factory=factory)
        app_ctx.mobile = _Mobile()
        result = app_ctx.start_for("expired")
        self.assertIsInstance(result, Err)
        self.assertEqual(factory.created, [])
        self.assertFalse(app_ctx.bridge_service.running)
        app_ctx.shutdown()


if __name__ == "__main__":
    unittest.main()
