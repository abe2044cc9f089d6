import unittest

from vidforge.core.event_bus import EventBus, Events


class TestEventBus(unittest.TestCase):
    def test_subscribe_emit_unsubscribe(self):
        bus = EventBus()
        seen = []
        bus.subscribe(Events.DOWNLOAD_COMPLETED, seen.append)
        bus.subscribe(Events.DOWNLOAD_COMPLETED, seen.append)
        bus.emit(Events.DOWNLOAD_COMPLETED, "a")
        bus.unsubscribe(Events.DOWNLOAD_COMPLETED, seen.append)
        bus.emit(Events.DOWNLOAD_COMPLETED, "b")
        self.assertEqual(seen, ["a"])

    def test_handler_errors_do_not_stop_delivery(self):
        bus = EventBus()
        seen = []

        def broken(_):
            raise RuntimeError("handler bug")

        bus.subscribe(Events.DOWNLOAD_FAILED, broken)
        bus.subscribe(Events.DOWNLOAD_FAILED, seen.append)
        with self.assertLogs("vidforge.core.event_bus", level="ERROR"):
            bus.emit(Events.DOWNLOAD_FAILED, 1)
        self.assertEqual(seen, [1])

    def test_handler_may_unsubscribe_during_emit(self):
        bus = EventBus()
        seen = []

        def once(data):
            seen.append(data)
            bus.unsubscribe(Events.NOTIFICATION_POSTED, once)

        bus.subscribe(Events.NOTIFICATION_POSTED, once)
        bus.emit(Events.NOTIFICATION_POSTED, 1)
        bus.emit(Events.NOTIFICATION_POSTED, 2)
        self.assertEqual(seen, [1])


if __name__ == "__main__":
    unittest.main()
