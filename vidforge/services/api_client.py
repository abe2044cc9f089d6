"""
API Client
Single HTTP gateway to the backend REST API. Every call returns a normalized
ApiResponse; HTTP failures and network exceptions are never raised.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, Dict, Optional

import requests

from ..core.config import AppConfig
from ..core.request_context import RequestContext
from ..core.result import Err, Ok, Result

logger = logging.getLogger(__name__)


@dataclass
class ApiResponse:
    """Backend response envelope"""
    status: int
    success: bool
    message: str
    data: Any = None
    pagination: Optional[Dict[str, Any]] = None
    error: Optional[Dict[str, Any]] = None
    cookies: Dict[str, str] = field(default_factory=dict, repr=False)
    # False when ``message`` is the generic fallback rather than backend text
    explicit_message: bool = False

    @property
    def error_code(self) -> str:
        if isinstance(self.error, dict):
            return str(self.error.get("code") or "")
        return ""


def _http_ok(status: int) -> bool:
    return 200 <= int(status) < 300


def _response_cookies(response: Any) -> Dict[str, str]:
    jar = getattr(response, "cookies", None)
    try:
        items = jar.items() if jar is not None else []
        return {str(k): str(v) for k, v in items if isinstance(k, str) and isinstance(v, str)}
    except (AttributeError, TypeError):
        return {}


class ApiClient:
    """Backend API client shared by all domain services"""

    CSRF_PATH = "/token/csrf"

    def __init__(self, config: AppConfig):
        self.config = config
        self.base_url = config.base_url

    def _timeout(self, override: Optional[float] = None) -> float:
        if override:
            return float(override)
        return float(self.config.api_timeout_seconds or 15.0)

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _headers(self, ctx: RequestContext, *, public: bool, multipart: bool) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            "X-Requested-With": "XMLHttpRequest",
            "X-Platform": ctx.platform or "browser",
        }
        headers.update(ctx.forwarded_headers())
        if not multipart:
            headers["Content-Type"] = "application/json"
        if self.config.api_key:
            headers["X-API-Key"] = self.config.api_key
        if not public and ctx.access_token:
            headers["Authorization"] = f"Bearer {ctx.access_token}"
        return headers

    def fetch_csrf(self, ctx: RequestContext) -> Dict[str, str]:
        """Fetch a CSRF token; returns ``{"token": ..., "cookie": ...}`` or an empty dict"""
        response = self.request(ctx, "GET", self.CSRF_PATH, public=True, with_csrf=False)
        if not response.success:
            logger.warning("CSRF token fetch failed: %s", response.message)
            return {}
        data = response.data if isinstance(response.data, dict) else {}
        token = str(data.get("csrf_token") or "")
        if not token:
            return {}
        return {"token": token, "cookie": response.cookies.get("csrf_token", token)}

    def request(
        self,
        ctx: RequestContext,
        method: str,
        path: str,
        data: Any = None,
        *,
        public: bool = False,
        params: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
        with_csrf: bool = True,
    ) -> ApiResponse:
        """
        Issue one backend call

        Args:
            ctx: per-request credentials and forwarded client headers
            method: HTTP verb
            path: backend path relative to the base URL
            data: JSON body, or form fields when ``files`` is given
            public: skip the bearer token
            params: query string values
            files: multipart files (``{field: (filename, bytes, content_type)}``)
            timeout: per-call timeout override in seconds

        Returns:
            Normalized ApiResponse
        """
        method = method.upper()
        multipart = files is not None
        headers = self._headers(ctx, public=public, multipart=multipart)
        cookie_overrides: Dict[str, str] = {}
        if with_csrf and not public and method != "GET" and ctx.platform == "browser":
            csrf = self.fetch_csrf(ctx)
            if csrf:
                headers["X-XSRF-TOKEN"] = csrf["token"]
                cookie_overrides["csrf_token"] = csrf["cookie"]
        cookie_header = ctx.cookie_header(cookie_overrides)
        if cookie_header:
            headers["Cookie"] = cookie_header

        kwargs: Dict[str, Any] = {"headers": headers, "timeout": self._timeout(timeout)}
        if params:
            kwargs["params"] = {k: v for k, v in params.items() if v not in (None, "")}
        if multipart:
            kwargs["files"] = files
            if data:
                kwargs["data"] = data
        elif data is not None:
            kwargs["json"] = data

        url = self._url(path)
        try:
            response = requests.request(method, url, **kwargs)
        except requests.RequestException as exc:
            logger.error("API request %s %s failed: %s", method, path, exc)
            return ApiResponse(
                status=500,
                success=False,
                message=str(exc) or "API request failed",
                error={"code": "NETWORK_ERROR", "details": str(exc)},
            )
        return self._parse(response)

    def _parse(self, response: Any) -> ApiResponse:
        status = int(getattr(response, "status_code", 500) or 500)
        http_ok = _http_ok(status)
        reason = str(getattr(response, "reason", "") or "")
        cookies = _response_cookies(response)
        try:
            body = response.json()
        except ValueError:
            if status == 204:
                return ApiResponse(status=status, success=True, message="Request successful", cookies=cookies)
            return ApiResponse(
                status=status,
                success=False,
                message=f"Invalid JSON response: {status} {reason}".strip(),
                error={"code": "INVALID_JSON", "details": reason},
                cookies=cookies,
            )
        if not isinstance(body, dict):
            body = {"data": body}
        success = body.get("success")
        success = http_ok if success is None else bool(success) and http_ok
        message = body.get("message") or ("Request successful" if success else "Request failed")
        error = body.get("error")
        if not success and not isinstance(error, dict):
            error = {"code": "HTTP_ERROR", "details": error or reason}
        return ApiResponse(
            status=status,
            success=success,
            message=str(message),
            data=body.get("data"),
            pagination=body.get("pagination") if isinstance(body.get("pagination"), dict) else None,
            error=error if not success else body.get("error"),
            cookies=cookies,
            explicit_message=bool(body.get("message")),
        )

    def fetch_raw(self, ctx: RequestContext, path: str, timeout: Optional[float] = None) -> Result[Any]:
        """GET a path whose body is plain JSON rather than the response envelope"""
        try:
            response = requests.request(
                "GET",
                self._url(path),
                headers={"Accept": "application/json", **ctx.forwarded_headers()},
                timeout=self._timeout(timeout),
            )
        except requests.RequestException as exc:
            logger.error("API request GET %s failed: %s", path, exc)
            return Err(str(exc) or "API request failed", status=500, code="NETWORK_ERROR")
        status = int(getattr(response, "status_code", 500) or 500)
        if not _http_ok(status):
            reason = str(getattr(response, "reason", "") or "")
            return Err(f"Failed to fetch {path}: {reason or status}", status=status, code="HTTP_ERROR")
        try:
            return Ok(response.json())
        except ValueError:
            return Err(f"Invalid JSON response: {status}", status=status, code="INVALID_JSON")

    def call(self, ctx: RequestContext, method: str, path: str, data: Any = None, **kwargs) -> Result[ApiResponse]:
        """Like ``request`` but folds the outcome into a Result"""
        response = self.request(ctx, method, path, data, **kwargs)
        if response.success:
            return Ok(response, response.message)
        return Err(response.message, status=response.status, code=response.error_code, details=response.error)
