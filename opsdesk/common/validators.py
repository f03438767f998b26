from __future__ import annotations

import re
from typing import Any, Iterable, Optional

import bleach

from ..core.exceptions import ValidationError

MESSAGE_TAGS = ["a", "b", "br", "code", "em", "i", "li", "ol", "p", "pre", "strong", "u", "ul"]
MESSAGE_ATTRIBUTES = {"a": ["href", "title", "rel"]}
MESSAGE_PROTOCOLS = ["http", "https", "mailto"]


def require_non_empty(value: Any, field_name: str, message: Optional[str] = None) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(message or f"{field_name} is required")
    return value.strip()


def validate_string(
    value: Any,
    field_name: str,
    *,
    min_length: int = 0,
    max_length: int = 5000,
    required: bool = False,
) -> str:
    """Trim and length-check a free text field. Missing optional values become ""."""
    if value is None or value == "":
        if required:
            raise ValidationError(f"{field_name} is required")
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")

    trimmed = value.strip()
    if required and not trimmed:
        raise ValidationError(f"{field_name} is required")
    if len(trimmed) < min_length:
        raise ValidationError(f"{field_name} must be at least {min_length} characters")
    if len(trimmed) > max_length:
        raise ValidationError(f"{field_name} must be at most {max_length} characters")
    return trimmed


def validate_enum(
    value: Any,
    field_name: str,
    allowed: Iterable[str],
    *,
    required: bool = False,
    default: Optional[str] = None,
) -> Optional[str]:
    allowed = list(allowed)
    if value is None or value == "":
        if required:
            raise ValidationError(f"{field_name} is required")
        return default if default is not None else allowed[0]
    if not isinstance(value, str) or value not in allowed:
        raise ValidationError(f"{field_name} must be one of: {', '.join(allowed)}")
    return value


def validate_number(
    value: Any,
    field_name: str,
    *,
    minimum: float = 0,
    maximum: float = float(2**53 - 1),
    required: bool = False,
) -> float:
    if value is None:
        if required:
            raise ValidationError(f"{field_name} is required")
        return 0
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            raise ValidationError(f"{field_name} must be a number")
    if not isinstance(value, (int, float)) or value != value:
        raise ValidationError(f"{field_name} must be a number")
    if value < minimum or value > maximum:
        raise ValidationError(f"{field_name} must be between {minimum:g} and {maximum:g}")
    return value


def validate_password(password: Any) -> str:
    if not isinstance(password, str):
        raise ValidationError("Password is required")
    if len(password) < 8:
        raise ValidationError("Password must be at least 8 characters")
    if len(password) > 128:
        raise ValidationError("Password must be at most 128 characters")
    if not re.search(r"[A-Z]", password):
        raise ValidationError("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", password):
        raise ValidationError("Password must contain at least one lowercase letter")
    if not re.search(r"[0-9]", password):
        raise ValidationError("Password must contain at least one number")
    return password


def sanitize_html(text: str) -> str:
    """Drop tags, attributes and URL schemes outside the message allowlist."""
    return bleach.clean(
        text,
        tags=MESSAGE_TAGS,
        attributes=MESSAGE_ATTRIBUTES,
        protocols=MESSAGE_PROTOCOLS,
        strip=True,
    )
