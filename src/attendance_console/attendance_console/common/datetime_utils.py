from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_date_field(value: Optional[str], field_name: str) -> Optional[date]:
    v = (value or "").strip() if isinstance(value, str) else value
    if not v:
        return None
    if isinstance(v, date):
        return v
    try:
        return parse_iso_date(v)
    except ValueError:
        raise ValidationError(f"{field_name} must be a date (YYYY-MM-DD)")


def parse_time_field(value: Optional[str], field_name: str) -> Optional[time]:
    """Accept HH:MM or HH:MM:SS; the form widgets send the former."""

    v = (value or "").strip() if isinstance(value, str) else value
    if not v:
        return None
    if isinstance(v, time):
        return v
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(v, fmt).time()
        except ValueError:
            continue
    raise ValidationError(f"{field_name} must be a time (HH:MM)")


def format_hhmm(value: Optional[time]) -> str:
    if value is None:
        return ""
    return value.strftime("%H:%M")


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
