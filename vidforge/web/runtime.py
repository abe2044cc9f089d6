"""Runtime bootstrap for the vidforge web app."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.config import AppConfig, load_config
from ..services.admin_service import AdminService
from ..services.api_client import ApiClient
from ..services.auth_service import AuthService
from ..services.platform_service import PlatformService
from ..services.resource_services import ApplicationService, DownloadService, SubscriptionService
from ..services.server_status_service import ServerStatusService
from ..services.setting_service import SettingService
from ..services.user_service import UserService
from ..services.web_service import WebService
from .artifacts import ArtifactStore


@dataclass
class VidforgeRuntime:
    """Service graph shared by every request for the lifetime of the server."""

    config: AppConfig
    api: ApiClient
    auth: AuthService
    users: UserService
    admin: AdminService
    platforms: PlatformService
    applications: ApplicationService
    downloads: DownloadService
    settings: SettingService
    subscriptions: SubscriptionService
    server_status: ServerStatusService
    web: WebService
    artifacts: ArtifactStore


def build_runtime(config: Optional[AppConfig] = None) -> VidforgeRuntime:
    """Create and wire the stateless services once."""

    config = config or load_config()
    api = ApiClient(config)
    return VidforgeRuntime(
        config=config,
        api=api,
        auth=AuthService(api),
        users=UserService(api),
        admin=AdminService(api),
        platforms=PlatformService(api),
        applications=ApplicationService(api),
        downloads=DownloadService(api),
        settings=SettingService(api),
        subscriptions=SubscriptionService(api),
        server_status=ServerStatusService(api),
        web=WebService(api),
        artifacts=ArtifactStore(config.static_dir),
    )
