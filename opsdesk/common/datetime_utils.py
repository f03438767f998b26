from __future__ import annotations

from datetime import date, datetime, time
from typing import Any, Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD (or the date part of an ISO timestamp) into date."""
    return datetime.strptime(value[:10], "%Y-%m-%d").date()


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO 8601 timestamp. A trailing Z is accepted and dropped.

    Naive local datetimes are stored, so any offset is discarded after parsing.
    """
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1]
    parsed = datetime.fromisoformat(text)
    return parsed.replace(tzinfo=None)


def optional_date(value: Any, field_name: str) -> Optional[date]:
    if value in (None, ""):
        return None
    try:
        return parse_iso_date(str(value))
    except ValueError:
        raise ValidationError(f"{field_name} must be a date (YYYY-MM-DD)")


def optional_datetime(value: Any, field_name: str) -> Optional[datetime]:
    if value in (None, ""):
        return None
    try:
        return parse_iso_datetime(str(value))
    except ValueError:
        raise ValidationError(f"{field_name} must be an ISO date/time")


def parse_clock(value: str) -> time:
    """Parse HH:MM."""
    return datetime.strptime(value, "%H:%M").time()


def iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch it.
    """
    return datetime.now()


def short_date(value) -> str:
    """M/D/YYYY without zero padding."""
    return f"{value.month}/{value.day}/{value.year}"
