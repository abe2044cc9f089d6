"""Page load payloads shared by the route modules."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from ..core.site_settings import SiteSettings
from .context import get_ctx, get_user, page_meta
from .runtime import VidforgeRuntime


async def load_settings(runtime: VidforgeRuntime, request: Request) -> SiteSettings:
    cached = getattr(request.state, "site_settings", None)
    if isinstance(cached, SiteSettings):
        return cached
    settings = await run_in_threadpool(runtime.settings.public_settings, get_ctx(request))
    request.state.site_settings = settings
    return settings


async def render_page(
    runtime: VidforgeRuntime,
    request: Request,
    title: Optional[str] = None,
    robots: str = "index, follow",
    status_code: int = 200,
    **data: Any,
) -> JSONResponse:
    """JSON page load: settings, user, page metadata and the page's own data"""
    settings = await load_settings(runtime, request)
    user = get_user(request)
    payload: Dict[str, Any] = {
        "page_meta": page_meta(settings, request, title=title, robots=robots),
        "settings": settings.to_dict(),
        "user": user.to_dict() if user else None,
        "lang": get_ctx(request).locale,
    }
    payload.update(data)
    return JSONResponse(payload, status_code=status_code)
