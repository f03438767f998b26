from __future__ import annotations

from typing import Optional, Type, TypeVar

from ..core.exceptions import NotFoundError, ValidationError
from ..extensions import db

M = TypeVar("M")


def get_or_404(model: Type[M], record_id, message: str) -> M:
    obj: Optional[M] = db.session.get(model, record_id)
    if obj is None:
        raise NotFoundError(message)
    return obj


def optional_int(value, field_name: str) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")
