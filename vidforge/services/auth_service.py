"""Authentication against the admin/web auth endpoints."""

from __future__ import annotations

from ..core.request_context import RequestContext
from ..core.result import Err, Ok, Result
from ..models.user import AuthSession
from .base import BaseService


class AuthService(BaseService):
    def _login(self, ctx: RequestContext, path: str, body: dict) -> Result[AuthSession]:
        result = self.api.call(ctx, "POST", path, body, public=True)
        if isinstance(result, Err):
            return result
        data = result.value.data
        if not isinstance(data, dict) or not data.get("access_token"):
            return Err("Login response contained no access token", status=502, code="EMPTY_DATA")
        return Ok(AuthSession.from_dict(data), result.message)

    def login_email(self, ctx: RequestContext, email: str, password: str) -> Result[AuthSession]:
        return self._login(ctx, "/public-admin/auth/email", {"email": email, "password": password})

    def login_google(self, ctx: RequestContext, credential: str) -> Result[AuthSession]:
        return self._login(ctx, "/public-admin/auth/google", {"credential": credential})

    def forgot_password(self, ctx: RequestContext, email: str) -> Result[str]:
        return self._mutate(
            ctx,
            "POST",
            "/public-admin/auth/forgot-password",
            {"email": email},
            default_message="If your email is registered, you will receive a reset link",
            public=True,
        )

    def reset_password(self, ctx: RequestContext, token: str, new_password: str) -> Result[str]:
        return self._mutate(
            ctx,
            "POST",
            "/public-admin/auth/reset-password",
            {"token": token, "new_password": new_password},
            default_message="Password has been reset successfully",
            public=True,
        )
