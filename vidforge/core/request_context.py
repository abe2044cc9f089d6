"""
Request context for the web runtime.

Services are built once per process and stay stateless; everything that
belongs to a single incoming request (credentials, cookies, forwarded client
headers, locale) travels in a RequestContext passed as the first argument.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Optional

from .config import DEFAULT_LOCALE, SUPPORTED_LOCALES

AUTH_COOKIES = ("access_token", "refresh_token", "csrf", "cookie")


@dataclass(frozen=True)
class RequestContext:
    access_token: str = ""
    cookies: Dict[str, str] = field(default_factory=dict)
    locale: str = DEFAULT_LOCALE
    origin: str = ""
    host: str = ""
    scheme: str = "http"
    client_ip: str = ""
    user_agent: str = ""
    referer: str = ""
    platform: str = "browser"

    @property
    def is_authenticated(self) -> bool:
        return bool(self.access_token)

    def cookie_header(self, overrides: Optional[Dict[str, str]] = None) -> str:
        jar = dict(self.cookies)
        jar.update(overrides or {})
        return "; ".join(f"{k}={v}" for k, v in jar.items() if v is not None)

    def forwarded_headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        if self.host:
            headers["X-Forwarded-Host"] = self.host
        if self.scheme:
            headers["X-Forwarded-Proto"] = self.scheme
        if self.client_ip:
            headers["X-Forwarded-For"] = self.client_ip
            headers["X-Real-IP"] = self.client_ip
        if self.origin:
            headers["Origin"] = self.origin
        if self.referer:
            headers["Referer"] = self.referer
        if self.user_agent:
            headers["User-Agent"] = self.user_agent
        return headers

    def with_token(self, access_token: str) -> "RequestContext":
        return replace(self, access_token=access_token)


def normalize_locale(value: Optional[str]) -> str:
    raw = str(value or "").strip().lower().replace("_", "-")
    base = raw.split("-", 1)[0]
    return base if base in SUPPORTED_LOCALES else DEFAULT_LOCALE
