"""
Mobile Service
Repository used by the bridge host: mobile-client auth, downloads and the
messaging connection token
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..core.request_context import RequestContext
from ..core.result import Err, Ok, Result
from ..models.catalog import Application, Platform
from ..models.download_task import DownloadTask
from ..models.pagination import PaginatedResult, QueryParams
from ..models.user import AuthSession, User
from .base import BaseService


def mobile_context(access_token: str = "") -> RequestContext:
    return RequestContext(access_token=access_token, platform="android")


class MobileService(BaseService):
    PREFIX = "/mobile-client"
    PROTECTED = "/mobile-client/protected-mobile"

    def application(self, ctx: RequestContext) -> Result[Application]:
        return self._fetch(ctx, f"{self.PREFIX}/application", Application.from_dict, public=True)

    def platforms(self, ctx: RequestContext) -> Result[List[Platform]]:
        return self._fetch_list(ctx, f"{self.PREFIX}/platforms", Platform.from_dict, public=True)

    def platform(self, ctx: RequestContext, platform_id: str) -> Result[Platform]:
        return self._fetch(ctx, f"{self.PREFIX}/platforms/{platform_id}", Platform.from_dict, public=True)

    def _create_download(self, ctx: RequestContext, kind: str, url: str, platform_id: str, fmt: Optional[str]) -> Result[DownloadTask]:
        body = {"url": url, "platform_id": platform_id}
        if fmt:
            body["format"] = fmt
        result = self.api.call(ctx, "POST", f"{self.PREFIX}/download/process/{kind}", body, public=not ctx.access_token)
        if isinstance(result, Err):
            return result
        try:
            return Ok(DownloadTask.from_dict(result.value.data), result.message)
        except ValueError as exc:
            return Err(str(exc), status=502, code="BAD_PAYLOAD")

    def create_download_video(self, ctx: RequestContext, url: str, platform_id: str, fmt: Optional[str] = None) -> Result[DownloadTask]:
        return self._create_download(ctx, "video", url, platform_id, fmt)

    def create_download_mp3(self, ctx: RequestContext, url: str, platform_id: str, fmt: Optional[str] = None) -> Result[DownloadTask]:
        return self._create_download(ctx, "mp3", url, platform_id, fmt)

    def download_task(self, ctx: RequestContext, task_id: str) -> Result[DownloadTask]:
        return self._fetch(ctx, f"{self.PROTECTED}/downloads/{task_id}", DownloadTask.from_dict)

    def downloads(self, ctx: RequestContext, page: int = 1, limit: int = 20) -> PaginatedResult[DownloadTask]:
        query = QueryParams(page=page, limit=limit, sort_by="", order_by="")
        return self._paginate(ctx, f"{self.PROTECTED}/downloads", query, DownloadTask.from_dict)

    def _auth(self, ctx: RequestContext, action: str, body: Dict[str, Any]) -> Result[AuthSession]:
        result = self.api.call(ctx, "POST", f"{self.PREFIX}/auth/{action}", body, public=True)
        if isinstance(result, Err):
            return result
        data = result.value.data
        if not isinstance(data, dict) or not data.get("access_token"):
            return Err("Login response contained no access token", status=502, code="EMPTY_DATA")
        return Ok(AuthSession.from_dict(data), result.message)

    def login(self, ctx: RequestContext, email: str, password: str) -> Result[AuthSession]:
        return self._auth(ctx, "email", {"email": email, "password": password})

    def login_google(self, ctx: RequestContext, credential: str) -> Result[AuthSession]:
        return self._auth(ctx, "google", {"credential": credential})

    def register(self, ctx: RequestContext, full_name: str, email: str, password: str) -> Result[AuthSession]:
        return self._auth(ctx, "register", {"full_name": full_name, "email": email, "password": password})

    def forgot_password(self, ctx: RequestContext, email: str) -> Result[str]:
        return self._mutate(
            ctx, "POST", f"{self.PREFIX}/auth/forgot-password", {"email": email},
            default_message="If your email is registered, you will receive a reset link", public=True,
        )

    def reset_password(self, ctx: RequestContext, token: str, new_password: str) -> Result[str]:
        return self._mutate(
            ctx, "POST", f"{self.PREFIX}/auth/reset-password", {"token": token, "new_password": new_password},
            default_message="Password has been reset successfully", public=True,
        )

    def current_user(self, ctx: RequestContext) -> Result[User]:
        return self._fetch(ctx, f"{self.PROTECTED}/users/current", User.from_dict)

    def logout(self, ctx: RequestContext) -> Result[str]:
        return self._mutate(ctx, "POST", f"{self.PROTECTED}/auth/logout", default_message="Logged out successfully")

    def messaging_token(self, ctx: RequestContext) -> Result[str]:
        """Connection token for the real-time messaging server"""
        result = self.api.call(ctx, "GET", f"{self.PREFIX}/centrifugo/token")
        if isinstance(result, Err):
            return result
        data = result.value.data
        token = data.get("token") if isinstance(data, dict) else data
        if not token:
            return Err("Messaging token missing from response", status=502, code="EMPTY_DATA")
        return Ok(str(token), result.message)
