"""Site settings: public read, admin bulk update and logo/favicon upload."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..core.request_context import RequestContext
from ..core.result import Err, Ok, Result
from ..core.site_settings import SiteSettings
from .base import BaseService

logger = logging.getLogger(__name__)


class SettingService(BaseService):
    def public_settings(self, ctx: RequestContext) -> SiteSettings:
        """Public settings merged over defaults; a failed fetch yields pure defaults"""
        response = self.api.request(ctx, "GET", "/public-admin/settings/public", public=True)
        if not response.success:
            logger.warning("Public settings fetch failed: %s", response.message)
            return SiteSettings.defaults()
        return SiteSettings.from_payload(response.data)

    def all_settings(self, ctx: RequestContext) -> Result[SiteSettings]:
        result = self.api.call(ctx, "GET", "/protected-admin/settings")
        if isinstance(result, Err):
            return result
        return Ok(SiteSettings.from_payload(result.value.data), result.message)

    def update_bulk(self, ctx: RequestContext, items: List[Dict[str, Any]]) -> Result[str]:
        if not items:
            return Err("No settings to update", status=400, code="EMPTY_SETTINGS")
        return self._mutate(ctx, "PUT", "/protected-admin/settings/bulk", items, default_message="Settings updated successfully.")

    def _upload(self, ctx: RequestContext, key: str, filename: str, content: bytes, content_type: str) -> Result[str]:
        result = self.api.call(
            ctx,
            "POST",
            "/protected-admin/settings/upload",
            {"key": key},
            files={"file": (filename, content, content_type or "application/octet-stream")},
        )
        if isinstance(result, Err):
            return result
        data = result.value.data if isinstance(result.value.data, dict) else {}
        url = str(data.get("url") or "")
        if not url:
            return Err("Upload response contained no URL", status=502, code="EMPTY_DATA")
        return Ok(url, result.message)

    def update_logo(self, ctx: RequestContext, filename: str, content: bytes, content_type: str = "") -> Result[str]:
        return self._upload(ctx, "site_logo", filename, content, content_type)

    def update_favicon(self, ctx: RequestContext, filename: str, content: bytes, content_type: str = "") -> Result[str]:
        return self._upload(ctx, "site_favicon", filename, content, content_type)
