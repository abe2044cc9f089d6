"""Login, password recovery and the signed-in user area."""

from __future__ import annotations

import logging
from urllib.parse import urlparse

from fastapi import FastAPI, Request
from starlette.concurrency import run_in_threadpool

from ..core.result import Err
from .context import get_ctx, get_user, secure_cookies, set_access_token
from .forms import is_upload, read_fields, validate_form
from .pages import render_page
from .responses import clear_auth_cookies, fail, fail_from, form_failure, form_success, ok, redirect
from .runtime import VidforgeRuntime
from .schemas import ForgotForm, GoogleLoginRequest, LoginForm, PasswordForm, ProfileForm, ResetPasswordForm

logger = logging.getLogger(__name__)


def _safe_redirect(target: str, fallback: str) -> str:
    parsed = urlparse(target or "")
    if target and target.startswith("/") and not target.startswith("//") and not parsed.netloc:
        return target
    return fallback


def register_auth_routes(app: FastAPI, runtime: VidforgeRuntime) -> None:

    @app.get("/login")
    async def login_page(request: Request):
        return await render_page(runtime, request, "Login", redirect=request.query_params.get("redirect", ""))

    @app.post("/login")
    async def login_google(request: Request):
        try:
            body = await request.json()
        except ValueError:
            body = {}
        form = validate_form(GoogleLoginRequest, body if isinstance(body, dict) else {})
        if not form.valid:
            return fail(form.message or "Credential is required", 400)
        result = await run_in_threadpool(runtime.auth.login_google, get_ctx(request), form.model.credential)
        if isinstance(result, Err):
            logger.warning("Google login failed: %s", result.message)
            return fail(result.message or "Login failed", 400)
        session = result.value
        if not session.access_token or not session.user.id:
            return fail("Login failed: Missing token or user data", 400)
        user = session.user
        response = ok(
            "Login successful",
            {"full_name": user.full_name, "email": user.email, "avatar": user.avatar, "role": user.role},
        )
        return set_access_token(response, session.access_token, secure_cookies(request, runtime.config))

    @app.post("/login/email")
    async def login_email(request: Request):
        form = validate_form(LoginForm, await read_fields(request))
        if not form.valid:
            return form_failure(form)
        result = await run_in_threadpool(runtime.auth.login_email, get_ctx(request), form.model.email, form.model.password)
        if isinstance(result, Err):
            return form_failure(form, result.message or "Login failed", 400)
        session = result.value
        fallback = "/dashboard" if session.user.is_admin else "/user"
        response = redirect(_safe_redirect(request.query_params.get("redirect", ""), fallback))
        return set_access_token(
            response,
            session.access_token,
            secure_cookies(request, runtime.config),
            remember=form.model.remember_me,
        )

    @app.get("/forgot")
    async def forgot_page(request: Request):
        return await render_page(runtime, request, "Forgot Password")

    @app.post("/forgot")
    async def forgot_action(request: Request):
        form = validate_form(ForgotForm, await read_fields(request))
        if not form.valid:
            return form_failure(form)
        result = await run_in_threadpool(runtime.auth.forgot_password, get_ctx(request), form.model.email)
        if isinstance(result, Err):
            return form_failure(form, result.message or "Failed to send reset email", 400)
        return form_success(form, result.value or "Reset email sent successfully")

    @app.get("/reset-password")
    async def reset_password_page(request: Request):
        token = request.query_params.get("token")
        if not token:
            return redirect("/login", 302)
        return await render_page(runtime, request, "Reset Password", token=token)

    @app.post("/reset-password")
    async def reset_password_action(request: Request):
        fields = await read_fields(request)
        fields.setdefault("token", request.query_params.get("token", ""))
        form = validate_form(ResetPasswordForm, fields)
        if not form.valid:
            return form_failure(form)
        result = await run_in_threadpool(
            runtime.auth.reset_password, get_ctx(request), form.model.token, form.model.new_password
        )
        if isinstance(result, Err):
            return form_failure(form, result.message or "Failed to reset password", 400)
        return redirect("/login")

    @app.post("/user/logout")
    async def logout(request: Request):
        await run_in_threadpool(runtime.users.logout, get_ctx(request))
        response = ok("Logged out successfully")
        return clear_auth_cookies(response, secure_cookies(request, runtime.config))

    @app.get("/user")
    async def user_home(request: Request):
        return await render_page(runtime, request, "Account", robots="noindex, nofollow")

    @app.get("/user/password")
    async def user_password_page(request: Request):
        return await render_page(runtime, request, "Password", robots="noindex, nofollow")

    @app.post("/user/password")
    async def user_password_action(request: Request):
        form = validate_form(PasswordForm, await read_fields(request))
        if not form.valid:
            return form_failure(form)
        data = form.model
        result = await run_in_threadpool(
            runtime.users.client_update_password,
            get_ctx(request),
            data.current_password,
            data.new_password,
            data.confirm_password,
        )
        if isinstance(result, Err):
            return form_failure(form, result.message or "Failed to update password", 500)
        return clear_auth_cookies(redirect("/login"), secure_cookies(request, runtime.config))

    @app.get("/user/profile")
    async def user_profile_page(request: Request):
        user = get_user(request)
        initial = {"full_name": user.full_name, "email": user.email} if user else {}
        return await render_page(runtime, request, "Profile", robots="noindex, nofollow", form={"data": initial, "errors": {}})

    @app.post("/user/profile")
    async def user_profile_action(request: Request):
        form = validate_form(ProfileForm, await read_fields(request))
        if not form.valid:
            return form_failure(form)
        result = await run_in_threadpool(
            runtime.users.client_update_profile, get_ctx(request), form.model.full_name, form.model.email
        )
        if isinstance(result, Err):
            return form_failure(form, result.message or "Failed to update profile", 500)
        return form_success(form, result.value)

    @app.post("/user/avatar")
    async def user_avatar(request: Request):
        form = await request.form()
        upload = form.get("file")
        if not is_upload(upload):
            return fail("No file uploaded", 400)
        content = await upload.read()
        result = await run_in_threadpool(
            runtime.users.client_update_avatar,
            get_ctx(request),
            upload.filename or "avatar",
            content,
            upload.content_type or "",
        )
        if isinstance(result, Err):
            return fail_from(result, 500)
        return ok(result.message or "Avatar updated successfully", {"avatar_url": result.value})
