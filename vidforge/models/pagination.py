"""
Pagination Models
List query parameters and paginated results shared by every admin listing
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Generic, List, Mapping, Optional, TypeVar

T = TypeVar("T")


def _int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _last_30_days(now: Optional[datetime] = None):
    now = now or datetime.now(timezone.utc)
    start = (now - timedelta(days=30)).replace(hour=0, minute=0, second=0, microsecond=0)
    end = now.replace(hour=23, minute=59, second=59, microsecond=999000)
    return start.isoformat().replace("+00:00", "Z"), end.isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class QueryParams:
    """Filters for admin list endpoints"""
    page: int = 1
    limit: int = 10
    search: str = ""
    sort_by: str = "created_at"
    order_by: str = "desc"
    date_from: str = ""
    date_to: str = ""
    status: str = ""

    @classmethod
    def from_mapping(cls, params: Mapping[str, Any], now: Optional[datetime] = None) -> "QueryParams":
        default_from, default_to = _last_30_days(now)
        order = str(params.get("order_by") or "desc").lower()
        status = str(params.get("status") or "").strip()
        return cls(
            page=max(1, _int(params.get("page"), 1)),
            limit=max(1, _int(params.get("limit"), 10)),
            search=str(params.get("search") or "").strip(),
            sort_by=str(params.get("sort_by") or "created_at"),
            order_by=order if order in {"asc", "desc"} else "desc",
            date_from=str(params.get("date_from") or default_from),
            date_to=str(params.get("date_to") or default_to),
            status="" if status.upper() == "ALL" else status,
        )

    def to_query(self) -> Dict[str, str]:
        """Only non-empty values end up on the query string"""
        raw = {
            "page": self.page,
            "limit": self.limit,
            "search": self.search,
            "sort_by": self.sort_by,
            "order_by": self.order_by,
            "date_from": self.date_from,
            "date_to": self.date_to,
            "status": self.status,
        }
        return {k: str(v) for k, v in raw.items() if v not in (None, "")}


@dataclass(frozen=True)
class Pagination:
    current_page: int = 0
    limit: int = 0
    total_items: int = 0
    total_pages: int = 0
    has_prev: bool = False
    has_next: bool = False

    @classmethod
    def empty(cls) -> "Pagination":
        return cls()

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Pagination":
        data = data or {}
        return cls(
            current_page=_int(data.get("current_page"), 0),
            limit=_int(data.get("limit"), 0),
            total_items=_int(data.get("total_items"), 0),
            total_pages=_int(data.get("total_pages"), 0),
            has_prev=bool(data.get("has_prev")),
            has_next=bool(data.get("has_next")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return dict(vars(self))


@dataclass(frozen=True)
class PaginatedResult(Generic[T]):
    data: List[T] = field(default_factory=list)
    pagination: Pagination = field(default_factory=Pagination)

    @classmethod
    def empty(cls) -> "PaginatedResult[T]":
        return cls([], Pagination.empty())

    @classmethod
    def build(cls, items: Any, pagination: Any, parse: Callable[[Dict[str, Any]], T]) -> "PaginatedResult[T]":
        rows = [parse(item) for item in (items or []) if isinstance(item, dict)]
        return cls(rows, Pagination.from_dict(pagination if isinstance(pagination, dict) else None))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data": [item.to_dict() if hasattr(item, "to_dict") else item for item in self.data],
            "pagination": self.pagination.to_dict(),
        }
