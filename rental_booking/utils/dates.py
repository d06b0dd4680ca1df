"""Date parsing and formatting helpers for reservation instants."""
from datetime import datetime, date, timezone

import pytz

from ..exceptions import ValidationError
from .constants import DATE_FMT, DEFAULT_TIMEZONE


def utcnow() -> datetime:
    """Wrapper for easier testing/mocking."""
    return datetime.now(timezone.utc)


def _zone(tz_name=None):
    return pytz.timezone(tz_name or DEFAULT_TIMEZONE)


def parse_instant(value, tz_name: str | None = None, field: str = "date") -> datetime:
    """
    Coerce a date-like input into a timezone-aware UTC datetime.
    Supports:
      - datetime objects (naive ones are taken as local time in `tz_name`)
      - date objects (midnight local time)
      - 'YYYY-MM-DD'
      - 'YYYY-MM-DD HH:MM[:SS]' / 'YYYY-MM-DDTHH:MM[:SS]'
      - Above with 'Z' or offsets like '+00:00'
    Raises ValidationError on anything else.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        s = value.strip()
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            if len(s) == 10:
                dt = datetime.strptime(s, DATE_FMT)
            else:
                dt = datetime.fromisoformat(s.replace(" ", "T", 1))
        except ValueError:
            raise ValidationError(f"Invalid {field}: {value!r}") from None
    else:
        raise ValidationError(f"Invalid {field}: {value!r}")

    if dt.tzinfo is None:
        dt = _zone(tz_name).localize(dt)
    return dt.astimezone(pytz.utc)


def fmt_iso_local(value, tz_name: str | None = None, use_12h: bool = False) -> str:
    """
    Format an instant in the rental office's local time.
    On parse error, returns the original value (so a listing never goes blank).
    """
    if value is None:
        return ""
    try:
        dt = parse_instant(value, tz_name)
    except ValidationError:
        return str(value)

    local = dt.astimezone(_zone(tz_name))
    if use_12h:
        # Avoid %-I (not portable on Windows). Strip any leading zero manually.
        hh = local.strftime("%I").lstrip("0") or "0"
        return f"{local.strftime('%d %b %Y')}, {hh}:{local.strftime('%M %p')}"
    return local.strftime("%d/%m/%Y %H:%M")


def to_iso(value) -> str | None:
    """Serialize an instant for JSON responses."""
    if value is None:
        return None
    return value.isoformat().replace("+00:00", "Z")
