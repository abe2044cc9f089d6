"""Admin settings pages: grouped site settings, branding uploads and text artifacts."""

from __future__ import annotations

import logging
from typing import Callable, Type

from fastapi import FastAPI, Request
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from ..core.result import Err
from ..core.site_settings import to_bulk_payload
from .artifacts import ADS_TXT, ROBOTS_TXT
from .context import get_ctx, request_origin
from .forms import is_upload, read_fields, validate_form
from .pages import load_settings, render_page
from .responses import fail, form_failure, form_success, ok
from .runtime import VidforgeRuntime
from .schemas import (
    EmailSettingsForm,
    MonetizationSettingsForm,
    SystemSettingsForm,
    TextContentForm,
    WebSettingsForm,
)

logger = logging.getLogger(__name__)

SETTINGS_PAGES = (
    ("web", "WEBSITE", "Website Setting", WebSettingsForm),
    ("email", "EMAIL", "Email Setting", EmailSettingsForm),
    ("system", "SYSTEM", "System Setting", SystemSettingsForm),
    ("monetization", "MONETIZE", "Monetization Setting", MonetizationSettingsForm),
)


def register_settings_routes(app: FastAPI, runtime: VidforgeRuntime) -> None:

    def settings_group_routes(slug: str, group: str, title: str, schema: Type[BaseModel]) -> None:
        async def load(request: Request):
            result = await run_in_threadpool(runtime.settings.all_settings, get_ctx(request))
            if isinstance(result, Err):
                logger.warning("Settings load failed: %s", result.message)
                values = (await load_settings(runtime, request)).group(group)
            else:
                values = result.value.group(group)
            initial = {k: v for k, v in values.items() if k in schema.model_fields}
            return await render_page(
                runtime, request, title, robots="noindex, nofollow", form={"data": initial, "errors": {}}
            )

        async def save(request: Request):
            form = validate_form(schema, await read_fields(request))
            if not form.valid:
                return form_failure(form)
            items = to_bulk_payload(form.model.model_dump(), group)
            result = await run_in_threadpool(runtime.settings.update_bulk, get_ctx(request), items)
            if isinstance(result, Err):
                return form_failure(form, result.message or "Failed to update settings.", 500)
            return form_success(form, "Settings updated successfully.")

        app.add_api_route(f"/settings/{slug}", load, methods=["GET"], name=f"settings_{slug}_page")
        app.add_api_route(f"/settings/{slug}", save, methods=["POST"], name=f"settings_{slug}_save")

    def upload_route(path: str, action: Callable, label: str) -> None:
        async def upload(request: Request):
            form = await request.form()
            file = form.get("file")
            if not is_upload(file):
                return fail("No file uploaded", 400)
            content = await file.read()
            result = await run_in_threadpool(
                action, get_ctx(request), file.filename or label.lower(), content, file.content_type or ""
            )
            if isinstance(result, Err):
                return fail(result.message or f"Failed to upload {label.lower()}", 500)
            return ok(f"{label} updated successfully", {"url": result.value})

        app.add_api_route(path, upload, methods=["POST"], name=f"upload_{label.lower()}")

    def text_artifact_routes(slug: str, name: str, title: str) -> None:
        async def load(request: Request):
            origin = request_origin(request, runtime.config)
            if name == ADS_TXT:
                artifact = await run_in_threadpool(runtime.artifacts.ads_txt, origin)
            else:
                settings = await load_settings(runtime, request)
                artifact = await run_in_threadpool(
                    runtime.artifacts.robots_txt, origin, settings.get("WEBSITE", "site_email")
                )
            return await render_page(
                runtime, request, title, robots="noindex, nofollow",
                form={"data": {"content": artifact.content}, "errors": {}},
            )

        async def save(request: Request):
            form = validate_form(TextContentForm, await read_fields(request))
            if not form.valid:
                return form_failure(form)
            try:
                await run_in_threadpool(runtime.artifacts.write, name, form.model.content or "")
            except OSError as exc:
                logger.error("Failed to write %s: %s", name, exc)
                return form_failure(form, str(exc) or f"Failed to update {name} settings.", 500)
            return form_success(form, f"{name} updated successfully.")

        app.add_api_route(f"/settings/{slug}", load, methods=["GET"], name=f"settings_{slug}_page")
        app.add_api_route(f"/settings/{slug}", save, methods=["POST"], name=f"settings_{slug}_save")

    for slug, group, title, schema in SETTINGS_PAGES:
        settings_group_routes(slug, group, title, schema)

    upload_route("/settings/web/logo", runtime.settings.update_logo, "Logo")
    upload_route("/settings/web/favicon", runtime.settings.update_favicon, "Favicon")

    text_artifact_routes("ads.txt", ADS_TXT, "Ads.txt Setting")
    text_artifact_routes("robot.txt", ROBOTS_TXT, "Robot.txt Setting")
