"""
Notification center and event dispatch
Turns download events into local notifications keyed by task id
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
import threading
import time
from typing import Dict, List, Optional

from ..core.event_bus import EventBus, Events
from .events import Completed, Created, DownloadEvent, Failed, ProgressUpdate

logger = logging.getLogger(__name__)

SERVICE_NOTIFICATION_KEY = "bridge-service"


@dataclass(frozen=True)
class Notification:
    key: str
    title: str
    body: str
    ongoing: bool = False
    posted_at: float = field(default_factory=time.time)


class NotificationCenter:
    """Persistent local notifications; posting with an existing key replaces it"""

    def __init__(self, event_bus: EventBus):
        self.event_bus = event_bus
        self._notifications: Dict[str, Notification] = {}
        self._lock = threading.RLock()

    def post(self, key: str, title: str, body: str, ongoing: bool = False) -> Notification:
        notification = Notification(key=key, title=title, body=body, ongoing=ongoing)
        with self._lock:
            self._notifications[key] = notification
        self.event_bus.emit(Events.NOTIFICATION_POSTED, notification)
        return notification

    def get(self, key: str) -> Optional[Notification]:
        with self._lock:
            return self._notifications.get(key)

    def active(self) -> List[Notification]:
        with self._lock:
            return list(self._notifications.values())

    def set_service_status(self, text: str) -> Notification:
        return self.post(SERVICE_NOTIFICATION_KEY, "Video Downloader", text, ongoing=True)


class EventDispatcher:
    """Handles each DownloadEvent variant; every variant has exactly one branch"""

    def __init__(self, notifications: NotificationCenter, event_bus: EventBus):
        self.notifications = notifications
        self.event_bus = event_bus

    def dispatch(self, event: DownloadEvent) -> Optional[Notification]:
        if isinstance(event, Created):
            self.event_bus.emit(Events.DOWNLOAD_CREATED, event)
            return self.notifications.post(event.task.id, "Download created", event.task.title or "New download")
        if isinstance(event, ProgressUpdate):
            logger.debug("Progress for %s: %s%%", event.task_id, event.progress)
            self.event_bus.emit(Events.DOWNLOAD_PROGRESS, event)
            return None
        if isinstance(event, Completed):
            self.event_bus.emit(Events.DOWNLOAD_COMPLETED, event)
            return self.notifications.post(event.task.id, "Download completed", event.task.title or "Download finished")
        if isinstance(event, Failed):
            self.event_bus.emit(Events.DOWNLOAD_FAILED, event)
            return self.notifications.post(event.task_id, "Download failed", event.error)
        raise TypeError(f"Unhandled download event: {event!r}")
