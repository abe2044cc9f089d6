"""Explicit dependency container for the bridge host."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Optional

from ..core.config import AppConfig, load_config
from ..core.event_bus import EventBus
from ..core.result import Err, Ok, Result
from ..models.user import User
from ..services.api_client import ApiClient
from ..services.mobile_service import MobileService, mobile_context
from .client import RealtimeBridge, TransportFactory
from .notifier import EventDispatcher, NotificationCenter
from .service import BridgeService
from .transport import CentrifugeTransport

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Process-wide service graph, built once and passed to whoever needs it."""

    config: AppConfig
    event_bus: EventBus
    api: ApiClient
    mobile: MobileService
    notifications: NotificationCenter
    bridge: RealtimeBridge
    bridge_service: BridgeService

    def start_for(self, access_token: str) -> Result[User]:
        """Resolve the signed-in user, fetch a messaging token and start the bridge"""
        ctx = mobile_context(access_token)
        user = self.mobile.current_user(ctx)
        if isinstance(user, Err):
            logger.warning("Cannot start bridge: %s", user.message)
            return user
        token = self.mobile.messaging_token(ctx)
        if isinstance(token, Err):
            logger.warning("Cannot start bridge: %s", token.message)
            return token
        self.bridge_service.start(user.value.id, token.value)
        return Ok(user.value)

    def shutdown(self) -> None:
        self.bridge_service.stop()


def centrifuge_transport_factory(config: AppConfig) -> TransportFactory:
    def factory(token: str) -> CentrifugeTransport:
        return CentrifugeTransport(
            config.messaging_url,
            token,
            min_reconnect_delay=config.reconnect_min_delay,
            max_reconnect_delay=config.reconnect_max_delay,
        )

    return factory


def build_app_context(
    config: Optional[AppConfig] = None,
    transport_factory: Optional[TransportFactory] = None,
) -> AppContext:
    config = config or load_config()
    event_bus = EventBus()
    api = ApiClient(config)
    notifications = NotificationCenter(event_bus)
    dispatcher = EventDispatcher(notifications, event_bus)
    bridge = RealtimeBridge(
        transport_factory or centrifuge_transport_factory(config),
        dispatcher,
        event_bus,
        max_reconnect_attempts=config.reconnect_max_attempts,
    )
    return AppContext(
        config=config,
        event_bus=event_bus,
        api=api,
        mobile=MobileService(api),
        notifications=notifications,
        bridge=bridge,
        bridge_service=BridgeService(bridge, notifications, event_bus),
    )
