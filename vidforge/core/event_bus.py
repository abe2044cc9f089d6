"""
Event Bus - Central event dispatching system
Relays bridge output (connection state, download events, notifications) to observers
"""
from typing import Callable, Dict, List
import logging
import threading

logger = logging.getLogger(__name__)


class EventBus:
    """Thread-safe event bus for component communication"""

    def __init__(self):
        self._subscribers: Dict[str, List[Callable]] = {}
        self._lock = threading.RLock()

    def subscribe(self, event_type: str, callback: Callable):
        """Subscribe to an event type"""
        with self._lock:
            if event_type not in self._subscribers:
                self._subscribers[event_type] = []
            if callback not in self._subscribers[event_type]:
                self._subscribers[event_type].append(callback)

    def unsubscribe(self, event_type: str, callback: Callable):
        """Unsubscribe from an event type"""
        with self._lock:
            if callback in self._subscribers.get(event_type, []):
                self._subscribers[event_type].remove(callback)

    def emit(self, event_type: str, data=None):
        """Emit an event to all subscribers; handler errors are logged, never raised"""
        with self._lock:
            callbacks = list(self._subscribers.get(event_type, []))
        for callback in callbacks:
            try:
                callback(data)
            except Exception:
                logger.exception("Error in event handler for %s", event_type)


# Event types
class Events:
    # Connection events
    CONNECTION_STATE_CHANGED = "connection_state_changed"
    SERVICE_STATUS_CHANGED = "service_status_changed"

    # Download lifecycle events
    DOWNLOAD_CREATED = "download_created"
    DOWNLOAD_PROGRESS = "download_progress"
    DOWNLOAD_COMPLETED = "download_completed"
    DOWNLOAD_FAILED = "download_failed"

    # Notification events
    NOTIFICATION_POSTED = "notification_posted"
