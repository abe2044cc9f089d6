"""FastAPI app exposing the vidforge front office, user area and admin back-office."""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import quote

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from starlette.concurrency import run_in_threadpool

from .context import build_request_context
from .routes_admin import register_admin_routes
from .routes_auth import register_auth_routes
from .routes_public import register_public_routes
from .routes_settings import register_settings_routes
from .runtime import VidforgeRuntime, build_runtime

logger = logging.getLogger(__name__)

ADMIN_PREFIXES = (
    "/dashboard",
    "/download",
    "/settings",
    "/accounts",
    "/application",
    "/cookies",
    "/users",
    "/platform",
    "/subscription",
    "/server-status",
)
USER_PREFIXES = ("/user",)
AUTH_PAGES = ("/login", "/forgot", "/reset-password")
USER_OPTIONAL_PREFIXES = ("/user/logout",)

ERROR_PAGE = """<!doctype html>
<html lang="en">
<head><meta charset="utf-8"><title>{status} - {title}</title></head>
<body><h1>{status}</h1><p>{title}</p></body>
</html>
"""


def _matches(path: str, prefixes) -> bool:
    return any(path == p or path.startswith(p + "/") for p in prefixes)


def guard_redirect(path: str, method: str, user) -> Optional[str]:
    """Where to send a request that may not reach its route, or None to let it through"""
    if _matches(path, USER_OPTIONAL_PREFIXES):
        return None
    if _matches(path, ADMIN_PREFIXES):
        if user is None:
            return f"/login?redirect={quote(path, safe='/')}"
        if not user.is_admin:
            return "/user"
        return None
    if _matches(path, USER_PREFIXES):
        return "/login" if user is None else None
    if method == "GET" and path in AUTH_PAGES and user is not None:
        return "/dashboard" if user.is_admin else "/user"
    return None


def create_app(runtime: Optional[VidforgeRuntime] = None) -> FastAPI:
    runtime = runtime or build_runtime()

    async def request_context_middleware(request: Request, call_next):
        ctx = build_request_context(request, runtime.config)
        user = None
        if ctx.access_token:
            user = await run_in_threadpool(runtime.users.resolve_user, ctx)
        request.state.ctx = ctx
        request.state.user = user

        target = guard_redirect(request.url.path or "/", request.method, user)
        if target:
            return RedirectResponse(target, status_code=302)
        return await call_next(request)

    app = FastAPI(title="vidforge", version="1.0.0")
    app.middleware("http")(request_context_middleware)

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        if _matches(request.url.path, ("/api",)):
            return JSONResponse(
                {"success": False, "error": "Internal Server Error", "message": str(exc) or "Unexpected error"},
                status_code=500,
            )
        return HTMLResponse(ERROR_PAGE.format(status=500, title="Internal Error"), status_code=500)

    # Fixed paths first; the catch-all platform page is registered last.
    register_auth_routes(app, runtime)
    register_admin_routes(app, runtime)
    register_settings_routes(app, runtime)
    register_public_routes(app, runtime)

    return app


app = create_app()
