"""Backend health, log tail and metrics."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ..core.request_context import RequestContext
from ..core.result import Result
from .base import BaseService

logger = logging.getLogger(__name__)


class ServerStatusService(BaseService):
    def health(self, ctx: RequestContext) -> Optional[Dict[str, Any]]:
        response = self.api.request(ctx, "GET", "/protected-admin/health/check")
        if not response.success:
            logger.warning("Health check failed: %s", response.message)
            return None
        return response.data if isinstance(response.data, dict) else {}

    def logs(self, ctx: RequestContext, page: int = 1, limit: int = 50) -> Optional[Dict[str, Any]]:
        response = self.api.request(
            ctx,
            "GET",
            "/protected-admin/health/log",
            params={"page": max(1, int(page)), "limit": max(1, int(limit))},
        )
        if not response.success:
            logger.warning("Log fetch failed: %s", response.message)
            return None
        data = response.data
        if isinstance(data, list):
            data = {"logs": data}
        payload = dict(data) if isinstance(data, dict) else {"logs": []}
        if response.pagination:
            payload["pagination"] = response.pagination
        return payload

    def clear_logs(self, ctx: RequestContext) -> Result[str]:
        return self._mutate(ctx, "POST", "/protected-admin/health/log", default_message="Logs cleared successfully")

    def metrics(self, ctx: RequestContext) -> Result[Any]:
        return self.api.fetch_raw(ctx, "/metrics")
