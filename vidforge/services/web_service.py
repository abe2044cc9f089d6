"""Public web-client actions: contact form, download processing, error reports."""

from __future__ import annotations

from typing import Any, Dict

from ..core.request_context import RequestContext
from ..core.result import Err, Ok, Result
from ..models.download_task import DownloadTask
from .base import BaseService

MP3_SUFFIX = "-to-mp3"


class WebService(BaseService):
    def contact(self, ctx: RequestContext, values: Dict[str, Any]) -> Result[str]:
        return self._mutate(
            ctx,
            "POST",
            "/web-client/contact",
            values,
            default_message="Your message has been sent successfully",
            public=True,
        )

    def _process(self, ctx: RequestContext, kind: str, values: Dict[str, Any]) -> Result[Dict[str, Any]]:
        body = {k: v for k, v in values.items() if v not in (None, "")}
        result = self.api.call(ctx, "POST", f"/web-client/download/process/{kind}", body, public=not ctx.access_token)
        if isinstance(result, Err):
            return result
        data = result.value.data if isinstance(result.value.data, dict) else {}
        if data.get("id"):
            try:
                data = DownloadTask.from_dict(data).to_dict()
            except ValueError:
                pass
        return Ok(data, result.message)

    def download_video(self, ctx: RequestContext, values: Dict[str, Any]) -> Result[Dict[str, Any]]:
        return self._process(ctx, "video", values)

    def download_mp3(self, ctx: RequestContext, values: Dict[str, Any]) -> Result[Dict[str, Any]]:
        return self._process(ctx, "mp3", values)

    def process_download(self, ctx: RequestContext, values: Dict[str, Any]) -> Result[Dict[str, Any]]:
        """Route to the mp3 or video processor based on the platform type"""
        if str(values.get("type") or "").endswith(MP3_SUFFIX):
            return self.download_mp3(ctx, values)
        return self.download_video(ctx, values)

    def report_error(self, ctx: RequestContext, payload: Dict[str, Any]) -> Result[str]:
        return self._mutate(ctx, "POST", "/web-client/report/errors", payload, default_message="Error reported", public=True)
