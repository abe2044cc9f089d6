"""Uniform JSON shapes returned by route handlers."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi.responses import JSONResponse, RedirectResponse

from ..core.request_context import AUTH_COOKIES
from ..core.result import Err
from .forms import FormState


def ok(message: str, data: Any = None, status_code: int = 200) -> JSONResponse:
    payload: Dict[str, Any] = {"success": True, "message": message}
    if data is not None:
        payload["data"] = data
    return JSONResponse(payload, status_code=status_code)


def fail(message: str, status_code: int = 400, data: Any = None) -> JSONResponse:
    payload: Dict[str, Any] = {"success": False, "message": message or "Request failed"}
    if data is not None:
        payload["data"] = data
    return JSONResponse(payload, status_code=status_code)


def fail_from(err: Err, status_code: Optional[int] = None, fallback: str = "Request failed") -> JSONResponse:
    return fail(err.message or fallback, status_code or (err.status if 400 <= err.status < 600 else 500))


def form_failure(form: FormState, message: Optional[str] = None, status_code: int = 400) -> JSONResponse:
    return JSONResponse(
        {"success": False, "form": form.to_dict(), "message": message or form.message or "Invalid form"},
        status_code=status_code,
    )


def form_success(form: FormState, message: str, **extra: Any) -> JSONResponse:
    payload = {"success": True, "form": form.to_dict(), "message": message}
    payload.update(extra)
    return JSONResponse(payload)


def redirect(location: str, status_code: int = 303) -> RedirectResponse:
    return RedirectResponse(location, status_code=status_code)


def clear_auth_cookies(response, secure: bool = False):
    for name in AUTH_COOKIES:
        response.delete_cookie(name, path="/", secure=secure, httponly=True, samesite="lax")
    return response
