"""Current-user profile, password and avatar operations."""

from __future__ import annotations

import logging
from typing import Optional

from ..core.request_context import RequestContext
from ..core.result import Err, Ok, Result
from ..models.user import User
from .base import BaseService

logger = logging.getLogger(__name__)


class UserService(BaseService):
    ADMIN_PREFIX = "/protected-admin/users"
    CLIENT_PREFIX = "/web-client/protected-web/users"

    def current_user(self, ctx: RequestContext) -> Result[User]:
        if not ctx.access_token:
            return Err("Not authenticated", status=401, code="UNAUTHORIZED")
        return self._fetch(ctx, f"{self.CLIENT_PREFIX}/current", User.from_dict)

    def resolve_user(self, ctx: RequestContext) -> Optional[User]:
        """Current user or None; used by guards where failure means anonymous"""
        result = self.current_user(ctx)
        if isinstance(result, Ok) and result.value.id:
            return result.value
        return None

    def _profile(self, ctx: RequestContext, prefix: str, full_name: str, email: str) -> Result[str]:
        return self._mutate(
            ctx,
            "PUT",
            f"{prefix}/profile",
            {"full_name": full_name, "email": email},
            default_message="Profile updated successfully",
        )

    def _password(self, ctx: RequestContext, prefix: str, current_password: str, new_password: str, confirm_password: str) -> Result[str]:
        return self._mutate(
            ctx,
            "PUT",
            f"{prefix}/password",
            {
                "current_password": current_password,
                "new_password": new_password,
                "confirm_password": confirm_password,
            },
            default_message="Password updated successfully",
        )

    def _avatar(self, ctx: RequestContext, prefix: str, filename: str, content: bytes, content_type: str) -> Result[str]:
        result = self.api.call(
            ctx,
            "POST",
            f"{prefix}/avatar",
            files={"avatar": (filename, content, content_type or "application/octet-stream")},
        )
        if isinstance(result, Err):
            return result
        data = result.value.data if isinstance(result.value.data, dict) else {}
        url = str(data.get("avatar_url") or "")
        if not url:
            return Err("Upload response contained no avatar URL", status=502, code="EMPTY_DATA")
        return Ok(url, result.message)

    def update_profile(self, ctx: RequestContext, full_name: str, email: str) -> Result[str]:
        return self._profile(ctx, self.ADMIN_PREFIX, full_name, email)

    def update_password(self, ctx: RequestContext, current_password: str, new_password: str, confirm_password: str) -> Result[str]:
        return self._password(ctx, self.ADMIN_PREFIX, current_password, new_password, confirm_password)

    def update_avatar(self, ctx: RequestContext, filename: str, content: bytes, content_type: str = "") -> Result[str]:
        return self._avatar(ctx, self.ADMIN_PREFIX, filename, content, content_type)

    def client_update_profile(self, ctx: RequestContext, full_name: str, email: str) -> Result[str]:
        return self._profile(ctx, self.CLIENT_PREFIX, full_name, email)

    def client_update_password(self, ctx: RequestContext, current_password: str, new_password: str, confirm_password: str) -> Result[str]:
        return self._password(ctx, self.CLIENT_PREFIX, current_password, new_password, confirm_password)

    def client_update_avatar(self, ctx: RequestContext, filename: str, content: bytes, content_type: str = "") -> Result[str]:
        return self._avatar(ctx, self.CLIENT_PREFIX, filename, content, content_type)

    def logout(self, ctx: RequestContext) -> None:
        """Best-effort backend logout; failures are only logged"""
        response = self.api.request(ctx, "POST", "/public-admin/auth/logout", public=True)
        if not response.success:
            logger.warning("Backend logout failed: %s", response.message)
