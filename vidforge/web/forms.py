"""Form binding: validate submitted fields and build the form state echoed to the client."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Mapping, Optional, Type, TypeVar

from fastapi import Request
from pydantic import BaseModel, ValidationError

M = TypeVar("M", bound=BaseModel)

FORM_ERRORS_KEY = "_errors"
SECRET_FIELDS = {"password", "current_password", "new_password", "confirm_password", "smtp_password"}


def _error_message(error: Dict[str, Any]) -> str:
    ctx = error.get("ctx") or {}
    if isinstance(ctx.get("error"), Exception):
        return str(ctx["error"])
    if error.get("type") == "missing":
        loc = error.get("loc") or ()
        name = str(loc[-1]) if loc else "Field"
        return f"{name.replace('_', ' ').capitalize()} is required"
    return str(error.get("msg") or "Invalid value")


@dataclass
class FormState(Generic[M]):
    data: Dict[str, Any]
    model: Optional[M] = None
    errors: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def valid(self) -> bool:
        return self.model is not None and not self.errors

    @property
    def message(self) -> str:
        return ", ".join(msg for msgs in self.errors.values() for msg in msgs)

    def to_dict(self) -> Dict[str, Any]:
        echoed = {k: ("" if k in SECRET_FIELDS else v) for k, v in self.data.items()}
        return {"data": echoed, "errors": self.errors, "valid": self.valid}


def validate_form(schema: Type[M], raw: Mapping[str, Any]) -> FormState[M]:
    """Validate raw submitted fields against a pydantic model.

    Args:
        schema: pydantic model class
        raw: submitted fields (form or JSON body)

    Returns:
        FormState with either the parsed model or per-field error messages
    """
    data = {k: v for k, v in dict(raw).items() if not hasattr(v, "filename")}
    try:
        return FormState(data=data, model=schema.model_validate(data))
    except ValidationError as exc:
        errors: Dict[str, List[str]] = {}
        for error in exc.errors():
            loc = error.get("loc") or ()
            key = str(loc[0]) if loc else FORM_ERRORS_KEY
            errors.setdefault(key, []).append(_error_message(error))
        return FormState(data=data, errors=errors)


async def read_fields(request: Request) -> Dict[str, Any]:
    """Read a form or JSON request body as a flat dict"""
    content_type = request.headers.get("content-type", "")
    if "application/json" in content_type:
        try:
            body = await request.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}
    form = await request.form()
    fields: Dict[str, Any] = {}
    for key, value in form.multi_items():
        if key in fields:
            existing = fields[key]
            fields[key] = (existing if isinstance(existing, list) else [existing]) + [value]
        else:
            fields[key] = value
    return fields


def is_upload(value: Any) -> bool:
    return hasattr(value, "filename") and hasattr(value, "read")
