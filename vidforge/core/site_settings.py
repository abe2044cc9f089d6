"""
Site settings
Grouped public settings (WEBSITE, EMAIL, SYSTEM, MONETIZE) merged over defaults
"""
from __future__ import annotations

import copy
import logging
from typing import Any, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

GROUPS = ("WEBSITE", "EMAIL", "SYSTEM", "MONETIZE")

DEFAULT_SETTINGS: Dict[str, Dict[str, Any]] = {
    "WEBSITE": {
        "site_name": "Video Downloader",
        "site_tagline": "Download any Videos for Free",
        "site_description": (
            "Discover a vast collection of videos available for free downloading at Video Downloader. "
            "Enjoy the latest blockbusters and timeless classics without any cost."
        ),
        "site_keywords": "Video Downloader, Videos, Free Downloading",
        "site_logo": "/images/icon.png",
        "site_favicon": "/images/icon.png",
        "site_email": "contact@idvideodownloader.com",
        "site_phone": "+1 323 456 7890",
        "site_url": "localhost:5173",
    },
    "EMAIL": {
        "smtp_enabled": True,
        "smtp_service": "gmail",
        "smtp_host": "smtp.gmail.com",
        "smtp_port": 587,
        "smtp_user": "",
        "smtp_password": "",
        "from_email": "contact@idvideodownloader.com",
        "from_name": "Video Downloader",
    },
    "SYSTEM": {
        "enable_documentation": True,
        "maintenance_mode": False,
        "maintenance_message": "Video Downloader is currently under maintenance. We will be back soon!",
        "source_logo_favicon": "local",
        "histats_tracking_code": "",
        "google_analytics_code": "",
        "play_store_app_url": "",
        "app_store_app_url": "",
    },
    "MONETIZE": {
        "enable_monetize": False,
        "type_monetize": "adsense",
        "enable_popup_ad": False,
        "auto_ad_code": "",
        "popup_ad_code": "",
        "socialbar_ad_code": "",
        "banner_rectangle_ad_code": "",
        "banner_horizontal_ad_code": "",
        "banner_vertical_ad_code": "",
        "native_ad_code": "",
        "direct_link_ad_code": "",
    },
}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def coerce_value(value: Any, template: Any) -> Any:
    """Coerce a backend value (usually a string) to the type of its default"""
    if value is None:
        return template
    if isinstance(template, bool):
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
        return template
    if isinstance(template, int):
        try:
            return int(str(value).strip())
        except ValueError:
            return template
    if isinstance(template, str):
        return value if isinstance(value, str) else str(value)
    return value


class SiteSettings:
    """Read-only view over grouped settings with defaults filled in"""

    def __init__(self, groups: Optional[Dict[str, Dict[str, Any]]] = None):
        self._groups = merge_settings(groups or {})

    def group(self, name: str) -> Dict[str, Any]:
        return dict(self._groups.get(name.upper(), {}))

    def get(self, group: str, key: str, default: Any = None) -> Any:
        return self._groups.get(group.upper(), {}).get(key, default)

    @property
    def site_name(self) -> str:
        return str(self.get("WEBSITE", "site_name") or DEFAULT_SETTINGS["WEBSITE"]["site_name"])

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return copy.deepcopy(self._groups)

    @classmethod
    def defaults(cls) -> "SiteSettings":
        return cls()

    @classmethod
    def from_payload(cls, payload: Any) -> "SiteSettings":
        """Accept either ``{GROUP: {key: value}}`` or a list of setting records"""
        if isinstance(payload, list):
            return cls(group_records(payload))
        if isinstance(payload, dict):
            return cls({str(k).upper(): v for k, v in payload.items() if isinstance(v, dict)})
        return cls()


def group_records(records: Iterable[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    grouped: Dict[str, Dict[str, Any]] = {}
    for record in records:
        if not isinstance(record, dict) or not record.get("key"):
            continue
        group = str(record.get("group_name") or "").upper()
        grouped.setdefault(group, {})[str(record["key"])] = record.get("value")
    return grouped


def merge_settings(groups: Dict[str, Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    merged = copy.deepcopy(DEFAULT_SETTINGS)
    for group_name, values in groups.items():
        target = merged.setdefault(group_name, {})
        for key, value in (values or {}).items():
            if key in target:
                target[key] = coerce_value(value, target[key])
            else:
                target[key] = value
    return merged


def to_bulk_payload(values: Dict[str, Any], group_name: str) -> List[Dict[str, Any]]:
    """Turn validated form values into the backend's bulk settings update body.

    Args:
        values: field name to value, as produced by a settings form
        group_name: WEBSITE, EMAIL, SYSTEM or MONETIZE

    Returns:
        list of ``{key, value, group_name}`` records with stringified values
    """
    group = group_name.upper()
    if group not in GROUPS:
        logger.warning("Unknown settings group %s", group_name)
    items: List[Dict[str, Any]] = []
    for key, value in values.items():
        if value is None:
            continue
        if isinstance(value, bool):
            text = "true" if value else "false"
        else:
            text = str(value)
        items.append({"key": key, "value": text, "group_name": group})
    return items
