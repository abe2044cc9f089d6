"""Platform catalog: admin management and the public listing."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from ..core.request_context import RequestContext
from ..core.result import Err, Ok, Result
from ..models.catalog import Platform
from ..models.pagination import PaginatedResult, QueryParams
from .base import BaseService


class PlatformService(BaseService):
    ADMIN = "/protected-admin/platforms"
    PUBLIC = "/web-client/platforms"

    def list(self, ctx: RequestContext, query: Optional[QueryParams] = None) -> PaginatedResult[Platform]:
        return self._paginate(ctx, self.ADMIN, query, Platform.from_dict)

    def get(self, ctx: RequestContext, platform_id: str) -> Result[Platform]:
        return self._fetch(ctx, f"{self.ADMIN}/{platform_id}", Platform.from_dict)

    def get_by_type(self, ctx: RequestContext, platform_type: str) -> Result[Platform]:
        return self._fetch(ctx, f"{self.ADMIN}/type/{platform_type}", Platform.from_dict)

    def update(self, ctx: RequestContext, platform_id: str, values: Dict[str, Any]) -> Result[str]:
        return self._mutate(ctx, "PUT", f"{self.ADMIN}/{platform_id}", values, default_message="Platform updated successfully")

    def delete(self, ctx: RequestContext, platform_id: str) -> Result[str]:
        return self._mutate(ctx, "DELETE", f"{self.ADMIN}/{platform_id}", default_message="Platform deleted successfully")

    def bulk_delete(self, ctx: RequestContext, ids: Iterable[Any]) -> Result[str]:
        return self._bulk_delete(ctx, f"{self.ADMIN}/bulk", ids, "platform")

    def upload_thumbnail(self, ctx: RequestContext, platform_id: str, filename: str, content: bytes, content_type: str = "") -> Result[str]:
        result = self.api.call(
            ctx,
            "POST",
            f"{self.ADMIN}/thumbnail/{platform_id}",
            files={"thumbnail": (filename, content, content_type or "application/octet-stream")},
        )
        if isinstance(result, Err):
            return result
        data = result.value.data if isinstance(result.value.data, dict) else {}
        url = str(data.get("thumbnail_url") or "")
        if not url:
            return Err("Upload response contained no thumbnail URL", status=502, code="EMPTY_DATA")
        return Ok(url, result.message)

    def all(self, ctx: RequestContext) -> Result[List[Platform]]:
        return self._fetch_list(ctx, self.PUBLIC, Platform.from_dict, public=True)

    def public_get(self, ctx: RequestContext, platform_id: str) -> Result[Platform]:
        return self._fetch(ctx, f"{self.PUBLIC}/{platform_id}", Platform.from_dict, public=True)

    def public_get_by_slug(self, ctx: RequestContext, slug: str) -> Result[Platform]:
        return self._fetch(ctx, f"{self.PUBLIC}/slug/{slug}", Platform.from_dict, public=True)

    def public_get_by_type(self, ctx: RequestContext, platform_type: str) -> Result[Platform]:
        return self._fetch(ctx, f"{self.PUBLIC}/type/{platform_type}", Platform.from_dict, public=True)

    def public_by_category(self, ctx: RequestContext, category: str) -> Result[List[Platform]]:
        return self._fetch_list(ctx, f"{self.PUBLIC}/category/{category}", Platform.from_dict, public=True)
