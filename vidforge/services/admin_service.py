"""Back-office dashboard, user management and downloader cookies."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

from ..core.request_context import RequestContext
from ..core.result import Err, Ok, Result
from ..models.pagination import PaginatedResult, QueryParams
from ..models.user import User
from .base import BaseService


def normalize_cookies(data: Any) -> Dict[str, Any]:
    """Cookie file state as ``{lines, content, path, valid}``"""
    data = data if isinstance(data, dict) else {}
    raw = data.get("lines")
    if raw is None:
        raw = data.get("content")
    if isinstance(raw, list):
        lines = [str(line) for line in raw]
    elif isinstance(raw, str):
        lines = raw.split("\n")
    else:
        lines = []
    return {
        "lines": lines,
        "content": "\n".join(lines),
        "path": str(data.get("path") or ""),
        "valid": bool(data.get("valid")),
    }


class AdminService(BaseService):
    def dashboard(self, ctx: RequestContext, query: Optional[QueryParams] = None) -> Result[Dict[str, Any]]:
        params = (query or QueryParams()).to_query()
        result = self.api.call(ctx, "GET", "/protected-admin/dashboard", params=params)
        if isinstance(result, Err):
            return result
        data = result.value.data if isinstance(result.value.data, dict) else {}
        return Ok(data, result.message)

    def list_users(self, ctx: RequestContext, query: Optional[QueryParams] = None) -> PaginatedResult[User]:
        return self._paginate(ctx, "/protected-admin/users/search", query, User.from_dict)

    def find_user(self, ctx: RequestContext, user_id: str) -> Result[User]:
        return self._fetch(ctx, f"/protected-admin/users/find/{user_id}", User.from_dict)

    def delete_user(self, ctx: RequestContext, user_id: str) -> Result[str]:
        return self._mutate(ctx, "DELETE", f"/protected-admin/users/{user_id}", default_message="User deleted successfully")

    def bulk_delete_users(self, ctx: RequestContext, ids: Iterable[Any]) -> Result[str]:
        return self._bulk_delete(ctx, "/protected-admin/users/bulk", ids, "user")

    def get_cookies(self, ctx: RequestContext) -> Result[Dict[str, Any]]:
        result = self.api.call(ctx, "GET", "/protected-admin/cookies")
        if isinstance(result, Err):
            return result
        return Ok(normalize_cookies(result.value.data), result.message)

    def update_cookies(self, ctx: RequestContext, content: str) -> Result[Dict[str, Any]]:
        result = self.api.call(ctx, "PUT", "/protected-admin/cookies", {"content": content})
        if isinstance(result, Err):
            return result
        return self.get_cookies(ctx)
