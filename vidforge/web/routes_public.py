"""Public site: home, contact, platform download pages, SEO artifacts and relays."""

from __future__ import annotations

import logging
import re
import time
from typing import Any, Dict, List
from urllib.parse import quote, urlparse

import requests
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool

from ..core.config import SUPPORTED_LOCALES
from ..core.result import Err
from ..models.catalog import Platform
from .artifacts import render_locale_rss, render_rss_index, render_sitemap, sitemap_pages
from .context import get_ctx, get_user, request_origin
from .forms import read_fields, validate_form
from .pages import load_settings, render_page
from .responses import fail, form_failure, form_success, redirect
from .runtime import VidforgeRuntime
from .schemas import ContactForm, DownloadVideoForm, ErrorReport, ProxyDownloadRequest

logger = logging.getLogger(__name__)

TEXT_PLAIN = "text/plain; charset=utf-8"
SITEMAP_CACHE = "max-age=0, s-maxage=3600"
BROWSER_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36"
)


def _text(value: Any, default: str = "") -> str:
    return default if value is None else str(value)


def _number(value: Any, default: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if value != value or value in (float("inf"), float("-inf")):
        return default
    return value


def sanitize_error_report(report: ErrorReport) -> Dict[str, Any]:
    """Normalize a client error report into the telemetry payload"""
    return {
        "error": _text(report.error),
        "message": _text(report.message),
        "platform_id": _text(report.platform_id),
        "user_id": _text(report.user_id),
        "ip_address": "",
        "user_agent": _text(report.user_agent),
        "url": _text(report.url),
        "method": _text(report.method),
        "request": _text(report.request),
        "status": _number(report.status, 0),
        "level": _text(report.level, "error"),
        "locale": _text(report.locale),
        "timestamp_ms": _number(report.timestamp_ms, int(time.time() * 1000)),
    }


def clean_media_url(raw: str) -> str:
    return str(raw or "").strip().strip("`").replace("`", "")


def attachment_headers(filename: str) -> str:
    base = filename or "video"
    ascii_name = re.sub(r"[^a-zA-Z0-9\-._ ]", "_", base)
    return f"attachment; filename=\"{ascii_name}.mp4\"; filename*=UTF-8''{quote(base, safe='')}.mp4"


def register_public_routes(app: FastAPI, runtime: VidforgeRuntime) -> None:

    async def public_platforms(request: Request) -> List[Platform]:
        result = await run_in_threadpool(runtime.platforms.all, get_ctx(request))
        if isinstance(result, Err):
            logger.warning("Platform list unavailable: %s", result.message)
            return []
        return result.value

    async def platform_dicts(request: Request) -> List[Dict[str, Any]]:
        return [p.to_dict() for p in await public_platforms(request)]

    @app.get("/")
    async def home(request: Request):
        settings = await load_settings(runtime, request)
        return await render_page(
            runtime, request, settings.get("WEBSITE", "site_tagline"), platforms=await platform_dicts(request)
        )

    @app.get("/health")
    async def health(request: Request):
        result = await run_in_threadpool(runtime.server_status.metrics, get_ctx(request))
        if isinstance(result, Err):
            return fail(result.message or "Failed to check health", 500)
        return JSONResponse({"success": True, "message": "Health check successful", "data": {"metrics": result.value}})

    @app.post("/api/report/errors")
    async def report_errors(request: Request):
        try:
            body = await request.json()
        except ValueError:
            return JSONResponse({"ok": False}, status_code=400)
        if not isinstance(body, dict):
            return JSONResponse({"ok": False}, status_code=400)
        payload = sanitize_error_report(ErrorReport.model_validate(body))
        result = await run_in_threadpool(runtime.web.report_error, get_ctx(request), payload)
        if isinstance(result, Err):
            return JSONResponse({"ok": False}, status_code=502)
        return JSONResponse({"ok": True})

    @app.post("/proxy/download")
    async def proxy_download(request: Request):
        try:
            body = ProxyDownloadRequest.model_validate(await request.json())
        except ValueError:
            return JSONResponse({"error": "Video URL is required"}, status_code=400)
        target = clean_media_url(body.videoUrl)
        if not target:
            return JSONResponse({"error": "Video URL is required"}, status_code=400)
        parsed = urlparse(target)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            return JSONResponse({"error": "Invalid video URL"}, status_code=400)
        headers = {"User-Agent": BROWSER_UA} if "tiktok.com" in parsed.netloc else {}
        try:
            upstream = await run_in_threadpool(
                requests.request, "GET", target, headers=headers, timeout=runtime.config.api_timeout_seconds * 4
            )
        except requests.RequestException as exc:
            logger.error("Proxy download of %s failed: %s", target, exc)
            return JSONResponse({"error": "Download failed", "details": str(exc)}, status_code=500)
        if not 200 <= upstream.status_code < 300:
            return JSONResponse({"error": f"Failed to fetch video: {upstream.status_code}"}, status_code=upstream.status_code)
        return Response(
            content=upstream.content,
            media_type=upstream.headers.get("content-type") or "video/mp4",
            headers={"Content-Disposition": attachment_headers(body.filename or "video")},
        )

    @app.get("/ads.txt")
    async def ads_txt(request: Request):
        artifact = await run_in_threadpool(runtime.artifacts.ads_txt, request_origin(request, runtime.config))
        return Response(artifact.content, status_code=artifact.status_code, media_type=TEXT_PLAIN)

    @app.get("/robots.txt")
    async def robots_txt(request: Request):
        settings = await load_settings(runtime, request)
        artifact = await run_in_threadpool(
            runtime.artifacts.robots_txt, request_origin(request, runtime.config), settings.get("WEBSITE", "site_email")
        )
        return Response(
            artifact.content,
            status_code=artifact.status_code,
            media_type=TEXT_PLAIN,
            headers={"Cache-Control": "public, max-age=3600"},
        )

    async def sitemap_response(request: Request, locale: str = ""):
        if "application/json" in request.headers.get("accept", ""):
            return redirect(f"/sitemap-{locale}.xml" if locale else "/sitemap.xml", 307)
        slugs = [p.slug for p in await public_platforms(request)]
        body = render_sitemap(request_origin(request, runtime.config), sitemap_pages(slugs), locale or None)
        return Response(body, media_type="application/xml", headers={"Cache-Control": SITEMAP_CACHE})

    @app.get("/sitemap.xml")
    async def sitemap(request: Request):
        return await sitemap_response(request)

    @app.get("/sitemap-{locale}.xml")
    async def sitemap_locale(request: Request, locale: str):
        if locale not in SUPPORTED_LOCALES:
            return fail("Unsupported locale", 404)
        return await sitemap_response(request, locale)

    @app.get("/rss.xml")
    async def rss_index(request: Request):
        settings = await load_settings(runtime, request)
        body = render_rss_index(
            request_origin(request, runtime.config), settings.site_name, settings.get("WEBSITE", "site_description")
        )
        return Response(body, media_type="application/xml", headers={"Cache-Control": SITEMAP_CACHE})

    @app.get("/rss-{locale}.xml")
    async def rss_locale(request: Request, locale: str):
        if locale not in SUPPORTED_LOCALES:
            return fail("Unsupported locale", 404)
        settings = await load_settings(runtime, request)
        body = render_locale_rss(
            request_origin(request, runtime.config),
            locale,
            settings.site_name,
            settings.get("WEBSITE", "site_description"),
            await public_platforms(request),
        )
        return Response(body, media_type="application/xml", headers={"Cache-Control": SITEMAP_CACHE})

    @app.get("/contact")
    async def contact_page(request: Request):
        return await render_page(runtime, request, "Contact", platforms=await platform_dicts(request))

    @app.post("/contact")
    async def contact_action(request: Request):
        form = validate_form(ContactForm, await read_fields(request))
        if not form.valid:
            return form_failure(form)
        result = await run_in_threadpool(runtime.web.contact, get_ctx(request), form.model.model_dump())
        if isinstance(result, Err):
            return form_failure(form, result.message or "Failed to send message", 500)
        return form_success(form, "Your message has been sent successfully")

    # Catch-all platform page; registered last so fixed paths win.

    @app.get("/{slug}")
    async def platform_page(request: Request, slug: str):
        result = await run_in_threadpool(runtime.platforms.public_get_by_slug, get_ctx(request), slug)
        if isinstance(result, Err):
            return redirect("/", 302)
        platform = result.value
        user = get_user(request)
        initial = {
            "url": "",
            "type": platform.type or "any-video-downloader",
            "user_id": user.id if user else "",
            "platform_id": platform.id,
        }
        return await render_page(
            runtime,
            request,
            platform.name,
            platform=platform.to_dict(),
            platforms=await platform_dicts(request),
            form={"data": initial, "errors": {}},
        )

    @app.post("/{slug}")
    async def platform_download(request: Request, slug: str):
        form = validate_form(DownloadVideoForm, await read_fields(request))
        if not form.valid:
            return form_failure(form)
        result = await run_in_threadpool(runtime.web.process_download, get_ctx(request), form.model.model_dump())
        if isinstance(result, Err):
            return JSONResponse(
                {"success": False, "form": form.to_dict(), "message": result.message or "Failed to process download request", "data": None},
                status_code=500,
            )
        return form_success(form, result.message or "Download processed", data=result.value)
