from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..core.exceptions import ValidationError

_local_tz: Optional[ZoneInfo] = None


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(str(value or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError("Invalid date (YYYY-MM-DD)")


def parse_hhmm(value: str) -> str:
    """Validate a 24-hour HH:MM time and return it zero padded."""
    try:
        return datetime.strptime(str(value or "").strip(), "%H:%M").strftime("%H:%M")
    except ValueError:
        raise ValidationError("Invalid time (HH:MM)")


def week_start(day: date) -> date:
    """Monday of the week containing ``day``."""
    return day - timedelta(days=day.weekday())


def load_timezone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(str(name or "").strip())
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(f"Unknown timezone: {name}")


def set_local_timezone(name: Optional[str]) -> None:
    """Timezone that decides what "today" is; ``None`` falls back to the server clock."""
    global _local_tz
    _local_tz = load_timezone(name) if name else None


def now_local() -> datetime:
    return datetime.now(_local_tz) if _local_tz else datetime.now()


def today_local() -> date:
    """Current date in the configured timezone.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return now_local().date()
