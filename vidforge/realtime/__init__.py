"""Real-time download notifications over the messaging server."""

from .app_context import AppContext, build_app_context
from .client import ConnectionState, ConnectionStatus, RealtimeBridge
from .events import Completed, Created, DownloadEvent, Failed, ProgressUpdate, parse_message
from .notifier import EventDispatcher, Notification, NotificationCenter
from .service import BridgeService
from .transport import CentrifugeTransport, Transport, TransportListener

__all__ = [
    "AppContext",
    "BridgeService",
    "CentrifugeTransport",
    "Completed",
    "ConnectionState",
    "ConnectionStatus",
    "Created",
    "DownloadEvent",
    "EventDispatcher",
    "Failed",
    "Notification",
    "NotificationCenter",
    "ProgressUpdate",
    "RealtimeBridge",
    "Transport",
    "TransportListener",
    "build_app_context",
    "parse_message",
]
