"""
Result type
Success-or-error value returned by every domain service call
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome carrying a value and an optional backend message"""
    value: T
    message: str = ""


@dataclass(frozen=True)
class Err:
    """Failed outcome: human-readable message, HTTP-ish status and error code"""
    message: str
    status: int = 500
    code: str = ""
    details: Optional[Any] = field(default=None, compare=False)


Result = Union[Ok[T], Err]
