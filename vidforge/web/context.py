"""Per-request helpers: build the RequestContext, cookies and page metadata."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import Request

from ..core.config import AppConfig
from ..core.request_context import RequestContext, normalize_locale
from ..core.site_settings import SiteSettings
from ..models.user import User

LOCALE_COOKIE = "locale"
ACCESS_TOKEN_COOKIE = "access_token"
ACCESS_TOKEN_MAX_AGE = 60 * 60 * 24 * 7


def _client_ip(request: Request) -> str:
    forwarded = str(request.headers.get("x-forwarded-for") or "").split(",")[0].strip()
    if forwarded:
        return forwarded
    real_ip = str(request.headers.get("x-real-ip") or "").strip()
    if real_ip:
        return real_ip
    return request.client.host if request.client else ""


def detect_locale(request: Request) -> str:
    cookie = request.cookies.get(LOCALE_COOKIE)
    if cookie:
        return normalize_locale(cookie)
    accept = str(request.headers.get("accept-language") or "").split(",")[0]
    return normalize_locale(accept)


def request_origin(request: Request, config: AppConfig) -> str:
    if config.origin:
        return config.origin
    host = request.headers.get("x-forwarded-host") or request.headers.get("host") or request.url.netloc
    scheme = request.headers.get("x-forwarded-proto") or request.url.scheme
    return f"{scheme}://{host}"


def build_request_context(request: Request, config: AppConfig) -> RequestContext:
    return RequestContext(
        access_token=request.cookies.get(ACCESS_TOKEN_COOKIE, ""),
        cookies=dict(request.cookies),
        locale=detect_locale(request),
        origin=request_origin(request, config),
        host=request.headers.get("x-forwarded-host") or request.headers.get("host") or "",
        scheme=request.headers.get("x-forwarded-proto") or request.url.scheme,
        client_ip=_client_ip(request),
        user_agent=request.headers.get("user-agent", ""),
        referer=request.headers.get("referer", ""),
    )


def get_ctx(request: Request) -> RequestContext:
    ctx = getattr(request.state, "ctx", None)
    return ctx if isinstance(ctx, RequestContext) else RequestContext()


def get_user(request: Request) -> Optional[User]:
    return getattr(request.state, "user", None)


def secure_cookies(request: Request, config: AppConfig) -> bool:
    if config.secure_cookies is not None:
        return config.secure_cookies
    proto = str(request.headers.get("x-forwarded-proto") or request.url.scheme).strip().lower()
    return proto == "https"


def set_access_token(response, token: str, secure: bool, remember: bool = True):
    response.set_cookie(
        ACCESS_TOKEN_COOKIE,
        token,
        max_age=ACCESS_TOKEN_MAX_AGE if remember else None,
        path="/",
        httponly=True,
        secure=secure,
        samesite="lax",
    )
    return response


def page_meta(
    settings: SiteSettings,
    request: Request,
    title: Optional[str] = None,
    description: Optional[str] = None,
    robots: str = "index, follow",
) -> Dict[str, Any]:
    site_name = settings.site_name
    keywords = str(settings.get("WEBSITE", "site_keywords") or "")
    return {
        "title": f"{title} - {site_name}" if title else site_name,
        "description": description or settings.get("WEBSITE", "site_description"),
        "keywords": [k.strip() for k in keywords.split(",") if k.strip()],
        "robots": robots,
        "canonical": str(request.url.replace(query="")),
    }
