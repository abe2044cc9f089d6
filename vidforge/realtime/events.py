"""
Download events
Closed set of real-time download events and the parser that maps channel
messages onto them
"""
from __future__ import annotations

from dataclasses import dataclass
import json
import logging
from typing import Any, Dict, Optional, Union

from ..models.download_task import DownloadTask
from .channels import is_download_channel

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_MESSAGE = "Download failed"


@dataclass(frozen=True)
class Created:
    task: DownloadTask


@dataclass(frozen=True)
class ProgressUpdate:
    task_id: str
    progress: float
    downloaded_bytes: int = 0
    total_bytes: int = 0
    speed: float = 0.0
    eta: Optional[int] = None


@dataclass(frozen=True)
class Completed:
    task: DownloadTask


@dataclass(frozen=True)
class Failed:
    task_id: str
    error: str


DownloadEvent = Union[Created, ProgressUpdate, Completed, Failed]


def _decode(data: Any) -> Optional[Dict[str, Any]]:
    if isinstance(data, (bytes, bytearray)):
        data = data.decode("utf-8", errors="replace")
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except ValueError:
            return None
    return data if isinstance(data, dict) else None


def _task(payload: Dict[str, Any]) -> DownloadTask:
    raw = payload.get("task") if isinstance(payload.get("task"), dict) else payload
    return DownloadTask.from_dict(raw)


def _task_id(payload: Dict[str, Any]) -> str:
    value = payload.get("task_id") or payload.get("id")
    if value in (None, ""):
        raise ValueError("event payload has no task id")
    return str(value)


def _progress(payload: Dict[str, Any], task_id: Optional[str] = None) -> ProgressUpdate:
    eta = payload.get("eta")
    return ProgressUpdate(
        task_id=task_id or _task_id(payload),
        progress=float(payload.get("progress") or 0),
        downloaded_bytes=int(payload.get("downloaded_bytes") or 0),
        total_bytes=int(payload.get("total_bytes") or 0),
        speed=float(payload.get("speed") or 0),
        eta=int(eta) if eta is not None else None,
    )


def _failed(payload: Dict[str, Any]) -> Failed:
    error = payload.get("error_message") or payload.get("error")
    return Failed(task_id=_task_id(payload), error=str(error) if error else DEFAULT_FAILURE_MESSAGE)


def parse_message(channel: str, data: Any) -> Optional[DownloadEvent]:
    """
    Map one channel publication onto a DownloadEvent

    Args:
        channel: channel the publication arrived on
        data: publication data (dict, JSON text or bytes)

    Returns:
        The event, or None for unknown or malformed messages (logged and dropped)
    """
    message = _decode(data)
    if message is None:
        logger.warning("Dropping undecodable message on %s", channel)
        return None
    name = str(message.get("event") or message.get("type") or "").strip().lower()
    payload = message.get("payload")
    if payload is None:
        payload = message.get("data")
    payload = payload if isinstance(payload, dict) else {}
    try:
        if is_download_channel(channel) and name in {"progress", "status"}:
            task_id = channel.split(":", 1)[1]
            if name == "status" and str(payload.get("status") or "").lower() == "failed":
                return _failed({"task_id": task_id, **payload})
            return _progress(payload, task_id=str(payload.get("task_id") or task_id))
        if name == "download.created":
            return Created(_task(payload))
        if name == "download.completed":
            return Completed(_task(payload))
        if name == "download.progress":
            return _progress(payload)
        if name == "download.failed":
            return _failed(payload)
        if name == "download.status_changed":
            if str(payload.get("status") or "").lower() == "failed":
                return _failed(payload)
            return _progress(payload)
    except (TypeError, ValueError) as exc:
        logger.warning("Dropping malformed %s event on %s: %s", name or "unnamed", channel, exc)
        return None
    logger.debug("Ignoring %s event on %s", name or "unnamed", channel)
    return None
