"""Field validation helpers shared by the entity managers."""

from enum import Enum
from typing import Any, Dict, Iterable, Optional, Type, TypeVar

from .exceptions import ValidationError


E = TypeVar("E", bound=Enum)


def parse_enum(enum_cls: Type[E], value: Any, field: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError.for_field(field, f"must be one of: {allowed}")


def require_text(value: Any, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError.for_field(field, "is required")
    return value.strip()


def optional_text(value: Any, field: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError.for_field(field, "must be a string")
    return value.strip() or None


def optional_id(value: Any, field: str) -> Optional[str]:
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValidationError.for_field(field, "must be a string id")
    return value


def check_update_fields(updates: Dict[str, Any], allowed: Iterable[str],
                        immutable: Iterable[str] = ()) -> None:
    """Reject partial updates naming derived or unknown fields"""
    errors = {}
    for key in updates:
        if key in immutable:
            errors[key] = "cannot be changed directly"
        elif key not in allowed:
            errors[key] = "unknown field"
    if errors:
        raise ValidationError("Invalid update fields: " + ", ".join(sorted(errors)), errors)
