"""Applications, downloads and subscriptions: list/get/delete/bulk-delete resources."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

from ..core.request_context import RequestContext
from ..core.result import Result
from ..models.catalog import Application, Subscription
from ..models.download_task import DownloadTask
from ..models.pagination import PaginatedResult, QueryParams
from .base import BaseService


class ApplicationService(BaseService):
    PATH = "/protected-admin/applications"

    def list(self, ctx: RequestContext, query: Optional[QueryParams] = None) -> PaginatedResult[Application]:
        return self._paginate(ctx, self.PATH, query, Application.from_dict)

    def create(self, ctx: RequestContext, values: Dict[str, Any]) -> Result[str]:
        return self._mutate(ctx, "POST", self.PATH, values, default_message="Application created successfully")

    def get(self, ctx: RequestContext, app_id: str) -> Result[Application]:
        return self._fetch(ctx, f"{self.PATH}/{app_id}", Application.from_dict)

    def update(self, ctx: RequestContext, app_id: str, values: Dict[str, Any]) -> Result[str]:
        return self._mutate(ctx, "PUT", f"{self.PATH}/{app_id}", values, default_message="Application updated successfully")

    def delete(self, ctx: RequestContext, app_id: str) -> Result[str]:
        return self._mutate(ctx, "DELETE", f"{self.PATH}/{app_id}", default_message="Application deleted successfully")

    def bulk_delete(self, ctx: RequestContext, ids: Iterable[Any]) -> Result[str]:
        return self._bulk_delete(ctx, f"{self.PATH}/bulk", ids, "application")


class DownloadService(BaseService):
    PATH = "/protected-admin/downloads"

    def list(self, ctx: RequestContext, query: Optional[QueryParams] = None) -> PaginatedResult[DownloadTask]:
        return self._paginate(ctx, self.PATH, query, DownloadTask.from_dict)

    def get(self, ctx: RequestContext, download_id: str) -> Result[DownloadTask]:
        return self._fetch(ctx, f"{self.PATH}/{download_id}", DownloadTask.from_dict)

    def delete(self, ctx: RequestContext, download_id: str) -> Result[str]:
        return self._mutate(ctx, "DELETE", f"{self.PATH}/{download_id}", default_message="Download deleted successfully")

    def bulk_delete(self, ctx: RequestContext, ids: Iterable[Any]) -> Result[str]:
        return self._bulk_delete(ctx, f"{self.PATH}/bulk", ids, "download")


class SubscriptionService(BaseService):
    PATH = "/protected-admin/subscriptions"

    def list(self, ctx: RequestContext, query: Optional[QueryParams] = None) -> PaginatedResult[Subscription]:
        return self._paginate(ctx, self.PATH, query, Subscription.from_dict)

    def get(self, ctx: RequestContext, subscription_id: str) -> Result[Subscription]:
        return self._fetch(ctx, f"{self.PATH}/{subscription_id}", Subscription.from_dict)

    def delete(self, ctx: RequestContext, subscription_id: str) -> Result[str]:
        return self._mutate(ctx, "DELETE", f"{self.PATH}/{subscription_id}", default_message="Subscription deleted successfully")

    def bulk_delete(self, ctx: RequestContext, ids: Iterable[Any]) -> Result[str]:
        return self._bulk_delete(ctx, f"{self.PATH}/bulk", ids, "subscription")
