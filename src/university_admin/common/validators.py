from __future__ import annotations

import math
import re
from datetime import date
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

from .datetime_utils import parse_iso_date
from ..core.exceptions import ValidationError

E = TypeVar("E")


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required", fields={field_name: "required"})
    return str(value).strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(
            f"{field_name} must be at least {min_len} characters",
            fields={field_name: f"min length {min_len}"},
        )
    return value


def normalize_email(value: str) -> str:
    return (value or "").strip().lower()


class FieldErrors:
    """Collects every violated field of a payload before raising once."""

    def __init__(self) -> None:
        self._errors: Dict[str, str] = {}

    def __bool__(self) -> bool:
        return bool(self._errors)

    @property
    def errors(self) -> Mapping[str, str]:
        return dict(self._errors)

    def add(self, field_name: str, message: str) -> None:
        self._errors.setdefault(field_name, message)

    def text(self, data: Mapping[str, Any], field_name: str, *, min_len: int = 1) -> str:
        raw = data.get(field_name)
        value = str(raw).strip() if raw is not None else ""
        if not value:
            self.add(field_name, "required")
        elif len(value) < min_len:
            self.add(field_name, f"must be at least {min_len} characters")
        return value

    def matches(self, data: Mapping[str, Any], field_name: str, pattern: str, message: str) -> str:
        value = self.text(data, field_name)
        if value and not re.match(pattern, value):
            self.add(field_name, message)
        return value

    def password(self, data: Mapping[str, Any], field_name: str, *, min_len: int) -> str:
        value = data.get(field_name)
        if not isinstance(value, str) or not value:
            self.add(field_name, "required")
            return ""
        if len(value) < min_len:
            self.add(field_name, f"must be at least {min_len} characters")
        return value

    def choice(self, data: Mapping[str, Any], field_name: str, enum_cls: Type[E]) -> Optional[E]:
        value = self.text(data, field_name)
        if not value:
            return None
        try:
            return enum_cls(value)  # type: ignore[call-arg]
        except ValueError:
            allowed = ", ".join(str(m.value) for m in enum_cls)  # type: ignore[attr-defined]
            self.add(field_name, f"must be one of: {allowed}")
            return None

    def positive_number(self, data: Mapping[str, Any], field_name: str) -> float:
        raw = data.get(field_name)
        if isinstance(raw, bool):
            self.add(field_name, "must be a positive number")
            return 0.0
        try:
            value = float(raw)
        except (TypeError, ValueError):
            self.add(field_name, "must be a positive number")
            return 0.0
        if not (math.isfinite(value) and value > 0):
            self.add(field_name, "must be a positive number")
        return value

    def iso_date(self, data: Mapping[str, Any], field_name: str) -> Optional[date]:
        raw = data.get(field_name)
        if isinstance(raw, date):
            return raw
        value = self.text(data, field_name)
        if not value:
            return None
        try:
            return parse_iso_date(value)
        except ValueError:
            self.add(field_name, "must be a date (YYYY-MM-DD)")
            return None

    def raise_if_any(self, message: str = "Validation failed") -> None:
        if self._errors:
            listed = ", ".join(f"{k}: {v}" for k, v in self._errors.items())
            raise ValidationError(f"{message} ({listed})", fields=self._errors)
