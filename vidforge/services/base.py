"""Shared helpers for the stateless domain services."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar

from ..core.request_context import RequestContext
from ..core.result import Err, Ok, Result
from ..models.pagination import PaginatedResult, QueryParams
from .api_client import ApiClient

T = TypeVar("T")

logger = logging.getLogger(__name__)


class BaseService:
    """Resource service built once per process around the shared ApiClient"""

    def __init__(self, api: ApiClient):
        self.api = api

    def _fetch(
        self,
        ctx: RequestContext,
        path: str,
        parse: Callable[[Dict[str, Any]], T],
        *,
        public: bool = False,
        params: Optional[Dict[str, Any]] = None,
    ) -> Result[T]:
        result = self.api.call(ctx, "GET", path, public=public, params=params)
        if isinstance(result, Err):
            return result
        data = result.value.data
        if not isinstance(data, dict):
            return Err("Response contained no data", status=502, code="EMPTY_DATA")
        try:
            return Ok(parse(data), result.message)
        except (TypeError, ValueError) as exc:
            logger.warning("Unexpected payload from %s: %s", path, exc)
            return Err(f"Unexpected response from {path}", status=502, code="BAD_PAYLOAD")

    def _fetch_list(
        self,
        ctx: RequestContext,
        path: str,
        parse: Callable[[Dict[str, Any]], T],
        *,
        public: bool = False,
        params: Optional[Dict[str, Any]] = None,
    ) -> Result[List[T]]:
        result = self.api.call(ctx, "GET", path, public=public, params=params)
        if isinstance(result, Err):
            return result
        items = result.value.data if isinstance(result.value.data, list) else []
        try:
            return Ok([parse(item) for item in items if isinstance(item, dict)], result.message)
        except (TypeError, ValueError) as exc:
            logger.warning("Unexpected list payload from %s: %s", path, exc)
            return Err(f"Unexpected response from {path}", status=502, code="BAD_PAYLOAD")

    def _paginate(
        self,
        ctx: RequestContext,
        path: str,
        query: Optional[QueryParams],
        parse: Callable[[Dict[str, Any]], T],
    ) -> PaginatedResult[T]:
        """Paginated listing; failures are logged and degrade to an empty page"""
        query = query or QueryParams()
        response = self.api.request(ctx, "GET", path, params=query.to_query())
        if not response.success:
            logger.warning("Listing %s failed: %s", path, response.message)
            return PaginatedResult.empty()
        try:
            return PaginatedResult.build(response.data, response.pagination, parse)
        except (TypeError, ValueError) as exc:
            logger.warning("Unexpected listing payload from %s: %s", path, exc)
            return PaginatedResult.empty()

    def _mutate(
        self,
        ctx: RequestContext,
        method: str,
        path: str,
        body: Any = None,
        *,
        default_message: str,
        public: bool = False,
    ) -> Result[str]:
        """Write call whose only useful output is the backend message"""
        result = self.api.call(ctx, method, path, body, public=public)
        if isinstance(result, Err):
            return result
        message = result.value.message if result.value.explicit_message else default_message
        return Ok(message, message)

    def _bulk_delete(self, ctx: RequestContext, path: str, ids: Iterable[Any], noun: str) -> Result[str]:
        id_list = [str(i) for i in ids if str(i).strip()]
        if not id_list:
            return Err("No IDs provided", status=400, code="EMPTY_IDS")
        return self._mutate(
            ctx,
            "DELETE",
            path,
            {"ids": id_list},
            default_message=f"{len(id_list)} {noun}(s) deleted successfully",
        )
