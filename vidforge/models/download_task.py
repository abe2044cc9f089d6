"""
Download Task Model
Backend-owned download record; the client only reads it
"""
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Optional


class TaskStatus(Enum):
    """Download task status as reported by the backend"""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @classmethod
    def parse(cls, value: Any) -> "TaskStatus":
        text = str(value or "").strip().lower()
        for status in cls:
            if status.value == text:
                return status
        return cls.PENDING


@dataclass(frozen=True)
class DownloadFormat:
    """One downloadable rendition of a task"""
    url: str = ""
    format_id: str = ""
    ext: str = ""
    quality: str = ""
    filesize: int = 0
    type: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DownloadFormat":
        return cls(
            url=str(data.get("url") or ""),
            format_id=str(data.get("format_id") or ""),
            ext=str(data.get("ext") or ""),
            quality=str(data.get("quality") or ""),
            filesize=int(data.get("filesize") or 0),
            type=str(data.get("type") or ""),
        )


@dataclass(frozen=True)
class DownloadTask:
    """Download task as delivered by the API or a real-time event"""
    id: str
    user_id: Optional[str] = None
    app_id: Optional[str] = None
    platform_id: Optional[str] = None
    platform_type: str = ""
    original_url: str = ""
    title: Optional[str] = None
    thumbnail_url: Optional[str] = None
    duration: Optional[int] = None
    file_size: Optional[int] = None
    format: Optional[str] = None
    status: TaskStatus = TaskStatus.PENDING
    error_message: Optional[str] = None
    file_path: Optional[str] = None
    created_at: Optional[str] = None
    formats: List[DownloadFormat] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DownloadTask":
        if not isinstance(data, dict):
            raise ValueError("download task payload must be an object")
        task_id = data.get("id")
        if task_id in (None, ""):
            raise ValueError("download task payload has no id")
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        values["id"] = str(task_id)
        values["status"] = TaskStatus.parse(data.get("status"))
        values["formats"] = [
            DownloadFormat.from_dict(item) for item in (data.get("formats") or []) if isinstance(item, dict)
        ]
        for key in ("user_id", "app_id", "platform_id"):
            if values.get(key) is not None:
                values[key] = str(values[key])
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        payload = {f.name: getattr(self, f.name) for f in fields(self)}
        payload["status"] = self.status.value
        payload["formats"] = [dict(vars(fmt)) for fmt in self.formats]
        return payload
