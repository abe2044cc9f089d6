"""
Catalog Models
Platforms, registered mobile applications and subscriptions
"""
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional


def _known(cls, data: Dict[str, Any]) -> Dict[str, Any]:
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in (data or {}).items() if k in names}


@dataclass(frozen=True)
class Platform:
    """Supported video source (YouTube, TikTok, ...)"""
    id: str
    name: str = ""
    slug: str = ""
    type: str = ""
    thumbnail_url: str = ""
    url_pattern: str = ""
    category: str = ""
    is_active: bool = True
    is_premium: bool = False
    config: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Platform":
        values = _known(cls, data)
        values["id"] = str(data.get("id") or "")
        values["config"] = dict(data.get("config") or {})
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class Application:
    """Mobile application registered against the backend"""
    id: str
    name: str = ""
    package_name: str = ""
    version: str = ""
    platform: str = ""
    is_active: bool = True
    enable_monetization: bool = False
    enable_admob: bool = False
    enable_unity_ad: bool = False
    enable_start_app: bool = False
    enable_in_app_purchase: bool = False
    admob_ad_unit_id: Optional[str] = None
    unity_ad_unit_id: Optional[str] = None
    start_app_ad_unit_id: Optional[str] = None
    admob_banner_ad_unit_id: Optional[str] = None
    admob_interstitial_ad_unit_id: Optional[str] = None
    admob_native_ad_unit_id: Optional[str] = None
    admob_rewarded_ad_unit_id: Optional[str] = None
    unity_banner_ad_unit_id: Optional[str] = None
    unity_interstitial_ad_unit_id: Optional[str] = None
    unity_native_ad_unit_id: Optional[str] = None
    unity_rewarded_ad_unit_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Application":
        values = _known(cls, data)
        values["id"] = str(data.get("id") or "")
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class Subscription:
    id: str
    user_id: str = ""
    plan: str = ""
    status: str = ""
    amount: float = 0.0
    currency: str = ""
    started_at: Optional[str] = None
    expires_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Subscription":
        values = _known(cls, data)
        values["id"] = str(data.get("id") or "")
        values["user_id"] = str(data.get("user_id") or "")
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
