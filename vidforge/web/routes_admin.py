"""Back-office routes: dashboard, resource listings, deletes, edits and accounts."""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional

from fastapi import FastAPI, Request
from starlette.concurrency import run_in_threadpool

from ..core.result import Err
from ..models.pagination import QueryParams
from .context import get_ctx, get_user, secure_cookies
from .forms import is_upload, read_fields, validate_form
from .pages import render_page
from .responses import clear_auth_cookies, fail, fail_from, form_failure, form_success, ok, redirect
from .runtime import VidforgeRuntime
from .schemas import (
    ApplicationForm,
    ApplicationUpdateForm,
    CookiesForm,
    PasswordForm,
    PlatformUpdateForm,
    ProfileForm,
)

logger = logging.getLogger(__name__)


async def read_ids(request: Request) -> Optional[List[Any]]:
    """Non-blank ``ids`` from a JSON body, or None when missing, malformed or empty"""
    try:
        body = await request.json()
    except ValueError:
        return None
    ids = body.get("ids") if isinstance(body, dict) else None
    if not isinstance(ids, list):
        return None
    ids = [i for i in ids if i is not None and str(i).strip()]
    return ids or None


def register_admin_routes(app: FastAPI, runtime: VidforgeRuntime) -> None:

    async def bulk_delete(request: Request, action: Callable, default_status: int, fallback: str):
        ids = await read_ids(request)
        if ids is None:
            return fail("IDs are required", 400)
        result = await run_in_threadpool(action, get_ctx(request), ids)
        if isinstance(result, Err):
            logger.warning("Bulk delete failed: %s", result.message)
            return fail(result.message or fallback, default_status)
        return ok(result.value)

    async def single_delete(request: Request, action: Callable, item_id: str, default_status: int, fallback: str):
        if not item_id:
            return fail("ID is required", 400)
        result = await run_in_threadpool(action, get_ctx(request), item_id)
        if isinstance(result, Err):
            logger.warning("Delete of %s failed: %s", item_id, result.message)
            return fail(result.message or fallback, default_status)
        return ok(result.value)

    async def listing(request: Request, title: str, action: Callable, **extra):
        query = QueryParams.from_mapping(request.query_params)
        page = await run_in_threadpool(action, get_ctx(request), query)
        return await render_page(
            runtime, request, title, robots="noindex, nofollow", query=query.to_query(), **page.to_dict(), **extra
        )

    # Dashboard

    @app.get("/dashboard")
    async def dashboard(request: Request):
        query = QueryParams.from_mapping(request.query_params)
        result = await run_in_threadpool(runtime.admin.dashboard, get_ctx(request), query)
        if isinstance(result, Err):
            logger.warning("Dashboard load failed: %s", result.message)
            return await render_page(runtime, request, "Dashboard", robots="noindex, nofollow", data=None, message=result.message)
        return await render_page(runtime, request, "Dashboard", robots="noindex, nofollow", data=result.value)

    # Downloads

    @app.get("/download")
    async def download_list(request: Request):
        return await listing(request, "Downloads", runtime.downloads.list)

    @app.delete("/download/bulk")
    async def download_bulk_delete(request: Request):
        return await bulk_delete(request, runtime.downloads.bulk_delete, 400, "Failed to delete downloads")

    @app.delete("/download/{download_id}")
    async def download_delete(request: Request, download_id: str):
        return await single_delete(request, runtime.downloads.delete, download_id, 400, "Failed to delete download")

    # Applications

    @app.get("/application")
    async def application_list(request: Request):
        return await listing(request, "Applications", runtime.applications.list)

    @app.get("/application/create")
    async def application_create_page(request: Request):
        return await render_page(runtime, request, "Register Application", robots="noindex, nofollow")

    @app.post("/application/create")
    async def application_create(request: Request):
        form = validate_form(ApplicationForm, await read_fields(request))
        if not form.valid:
            return form_failure(form)
        result = await run_in_threadpool(runtime.applications.create, get_ctx(request), form.model.to_payload())
        if isinstance(result, Err):
            return form_failure(form, result.message or "Failed to create application", 500)
        return redirect("/application")

    @app.delete("/application/bulk")
    async def application_bulk_delete(request: Request):
        return await bulk_delete(request, runtime.applications.bulk_delete, 500, "Failed to delete applications")

    @app.get("/application/{app_id}")
    async def application_edit_page(request: Request, app_id: str):
        result = await run_in_threadpool(runtime.applications.get, get_ctx(request), app_id)
        if isinstance(result, Err):
            logger.warning("Application %s not loaded: %s", app_id, result.message)
            return redirect("/application")
        application = result.value.to_dict()
        return await render_page(
            runtime, request, "Edit Application", robots="noindex, nofollow",
            application=application, form={"data": application, "errors": {}},
        )

    @app.post("/application/{app_id}")
    async def application_update(request: Request, app_id: str):
        fields = await read_fields(request)
        fields.setdefault("id", app_id)
        form = validate_form(ApplicationUpdateForm, fields)
        if not form.valid:
            return form_failure(form)
        result = await run_in_threadpool(runtime.applications.update, get_ctx(request), form.model.id, form.model.to_payload())
        if isinstance(result, Err):
            return form_failure(form, result.message or "Failed to update application", 500)
        return redirect("/application")

    @app.delete("/application/{app_id}")
    async def application_delete(request: Request, app_id: str):
        return await single_delete(request, runtime.applications.delete, app_id, 500, "Failed to delete application")

    # Platforms

    @app.get("/platform")
    async def platform_list(request: Request):
        return await listing(request, "Platforms", runtime.platforms.list)

    @app.delete("/platform/bulk-delete")
    async def platform_bulk_delete(request: Request):
        return await bulk_delete(request, runtime.platforms.bulk_delete, 500, "Failed to delete platforms")

    @app.post("/platform/thumbnail")
    async def platform_thumbnail(request: Request):
        form = await request.form()
        platform_id = str(form.get("id") or "").strip()
        upload = form.get("file")
        if not platform_id:
            return fail("No platform ID provided", 400)
        if not is_upload(upload):
            return fail("No file uploaded", 400)
        content = await upload.read()
        result = await run_in_threadpool(
            runtime.platforms.upload_thumbnail,
            get_ctx(request),
            platform_id,
            upload.filename or "thumbnail",
            content,
            upload.content_type or "",
        )
        if isinstance(result, Err):
            return fail(result.message or "Failed to upload thumbnail", 500)
        return ok("Thumbnail updated successfully", {"url": result.value})

    @app.get("/platform/{platform_id}")
    async def platform_edit_page(request: Request, platform_id: str):
        result = await run_in_threadpool(runtime.platforms.get, get_ctx(request), platform_id)
        if isinstance(result, Err):
            logger.warning("Platform %s not loaded: %s", platform_id, result.message)
            return redirect("/platform", 302)
        platform = result.value.to_dict()
        return await render_page(
            runtime, request, "Edit Platform", robots="noindex, nofollow",
            platform=platform, form={"data": platform, "errors": {}},
        )

    @app.post("/platform/{platform_id}")
    async def platform_update(request: Request, platform_id: str):
        fields = await read_fields(request)
        fields.setdefault("id", platform_id)
        form = validate_form(PlatformUpdateForm, fields)
        if not form.valid:
            return form_failure(form)
        result = await run_in_threadpool(runtime.platforms.update, get_ctx(request), form.model.id, form.model.to_payload())
        if isinstance(result, Err):
            return form_failure(form, result.message or "Failed to update platform", 400)
        return redirect("/platform", 302)

    @app.delete("/platform/{platform_id}")
    async def platform_delete(request: Request, platform_id: str):
        return await single_delete(request, runtime.platforms.delete, platform_id, 500, "Failed to delete platform")

    # Subscriptions

    @app.get("/subscription")
    async def subscription_list(request: Request):
        return await listing(request, "Subscriptions", runtime.subscriptions.list)

    @app.delete("/subscription/bulk")
    async def subscription_bulk_delete(request: Request):
        return await bulk_delete(request, runtime.subscriptions.bulk_delete, 400, "Failed to delete subscriptions")

    @app.delete("/subscription/{subscription_id}")
    async def subscription_delete(request: Request, subscription_id: str):
        return await single_delete(
            request, runtime.subscriptions.delete, subscription_id, 400, "Failed to delete subscription"
        )

    # Users

    @app.get("/users")
    async def user_list(request: Request):
        return await listing(request, "Users", runtime.admin.list_users)

    @app.delete("/users")
    async def user_bulk_delete(request: Request):
        return await bulk_delete(request, runtime.admin.bulk_delete_users, 400, "Failed to delete users")

    @app.delete("/users/{user_id}")
    async def user_delete(request: Request, user_id: str):
        return await single_delete(request, runtime.admin.delete_user, user_id, 400, "Failed to delete user")

    # Server status

    @app.get("/server-status")
    async def server_status(request: Request):
        ctx = get_ctx(request)
        health = await run_in_threadpool(runtime.server_status.health, ctx)
        logs = await run_in_threadpool(runtime.server_status.logs, ctx, 1, 50)
        return await render_page(runtime, request, "Server Status", robots="noindex, nofollow", health=health, logs=logs)

    @app.get("/server-status/logs")
    async def server_logs(request: Request, page: int = 1, limit: int = 50):
        logs = await run_in_threadpool(runtime.server_status.logs, get_ctx(request), page, limit)
        if logs is None:
            return fail("Failed to fetch logs", 500)
        return ok("Logs fetched successfully", logs)

    @app.delete("/server-status/logs")
    async def server_logs_clear(request: Request):
        result = await run_in_threadpool(runtime.server_status.clear_logs, get_ctx(request))
        if isinstance(result, Err):
            return fail_from(result, 500, "Failed to clear logs")
        return ok(result.value)

    # Downloader cookies

    @app.get("/cookies")
    async def cookies_page(request: Request):
        result = await run_in_threadpool(runtime.admin.get_cookies, get_ctx(request))
        if isinstance(result, Err):
            logger.warning("Cookie file load failed: %s", result.message)
            return await render_page(
                runtime, request, "Cookies", robots="noindex, nofollow",
                cookies=None, form={"data": {"cookies": ""}, "errors": {}}, message=result.message,
            )
        cookies = result.value
        return await render_page(
            runtime, request, "Cookies", robots="noindex, nofollow",
            cookies=cookies, form={"data": {"cookies": cookies["content"]}, "errors": {}},
        )

    @app.post("/cookies")
    async def cookies_update(request: Request):
        form = validate_form(CookiesForm, await read_fields(request))
        if not form.valid:
            return form_failure(form)
        lines = [line.rstrip("\r") for line in form.model.cookies.split("\n")]
        content = "\n".join(line for line in lines if line.strip())
        result = await run_in_threadpool(runtime.admin.update_cookies, get_ctx(request), content)
        if isinstance(result, Err):
            return form_failure(form, result.message or "Failed to update cookies", 500)
        return form_success(form, "Cookies updated successfully.", cookies=result.value)

    # Admin account

    @app.get("/accounts/profile")
    async def account_profile_page(request: Request):
        user = get_user(request)
        initial = {"full_name": user.full_name, "email": user.email} if user else {}
        return await render_page(runtime, request, "Profile", robots="noindex, nofollow", form={"data": initial, "errors": {}})

    @app.post("/accounts/profile")
    async def account_profile_update(request: Request):
        form = validate_form(ProfileForm, await read_fields(request))
        if not form.valid:
            return form_failure(form)
        result = await run_in_threadpool(runtime.users.update_profile, get_ctx(request), form.model.full_name, form.model.email)
        if isinstance(result, Err):
            return form_failure(form, result.message or "Failed to update profile", 500)
        return form_success(form, result.value)

    @app.get("/accounts/password")
    async def account_password_page(request: Request):
        return await render_page(runtime, request, "Password", robots="noindex, nofollow")

    @app.post("/accounts/password")
    async def account_password_update(request: Request):
        form = validate_form(PasswordForm, await read_fields(request))
        if not form.valid:
            return form_failure(form)
        data = form.model
        result = await run_in_threadpool(
            runtime.users.update_password, get_ctx(request), data.current_password, data.new_password, data.confirm_password
        )
        if isinstance(result, Err):
            return form_failure(form, result.message or "Failed to update password", 500)
        return clear_auth_cookies(redirect("/login"), secure_cookies(request, runtime.config))

    @app.post("/accounts")
    async def account_avatar(request: Request):
        form = await request.form()
        upload = form.get("file")
        if not is_upload(upload):
            return fail("No file uploaded", 400)
        content = await upload.read()
        result = await run_in_threadpool(
            runtime.users.update_avatar, get_ctx(request), upload.filename or "avatar", content, upload.content_type or ""
        )
        if isinstance(result, Err):
            return fail(result.message or "Failed to upload avatar", 500)
        return ok("Avatar updated successfully", {"avatar_url": result.value})
