"""Pure time resolution logic - no I/O dependencies.

All instants handled here are timezone-aware. Stored due times are UTC; the
configured timezone is only used to compute local days and for display.
"""

from datetime import datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo


def get_zone(tz: str | ZoneInfo) -> ZoneInfo:
    """Accept a zone name or a ZoneInfo."""
    if isinstance(tz, ZoneInfo):
        return tz
    return ZoneInfo(tz)


def to_utc(instant: datetime) -> datetime:
    """Normalize an aware datetime to UTC."""
    if instant.tzinfo is None:
        raise ValueError("naive datetime; attach a timezone first")
    return instant.astimezone(timezone.utc)


def to_local(instant: datetime, tz: str | ZoneInfo) -> datetime:
    """Project an absolute instant onto the wall clock of `tz`."""
    return instant.astimezone(get_zone(tz))


def local_day_bounds(instant: datetime, tz: str | ZoneInfo) -> tuple[datetime, datetime]:
    """
    Inclusive start and end of the local calendar day containing `instant`.

    Start is 00:00:00.000000 and end is 23:59:59.999999 local time.
    """
    zone = get_zone(tz)
    local_date = instant.astimezone(zone).date()
    start = datetime.combine(local_date, time.min, tzinfo=zone)
    end = datetime.combine(local_date, time.max, tzinfo=zone)
    return start, end


def is_within_local_day(due_at: datetime | None, now: datetime, tz: str | ZoneInfo) -> bool:
    """True if `due_at` falls on the same local day as `now`."""
    if due_at is None:
        return False
    start, end = local_day_bounds(now, tz)
    return start <= due_at <= end


def within_window(due_at: datetime, now: datetime, lo_seconds: float, hi_seconds: float) -> bool:
    """True iff lo <= (due_at - now) < hi, in seconds."""
    delta = (due_at - now).total_seconds()
    return lo_seconds <= delta < hi_seconds


def resolve_due_at(value: datetime | str | None, tz: str | ZoneInfo) -> datetime | None:
    """
    Convert a candidate due time into an absolute UTC instant.

    Accepts an aware or naive datetime, or an ISO 8601 string. Naive values
    are read as wall-clock time in `tz`. Returns None for empty or
    unparsable input.
    """
    if value is None:
        return None

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        # Python < 3.11 rejects the Z suffix
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(text)
        except ValueError:
            return None

    if value.tzinfo is None:
        value = value.replace(tzinfo=get_zone(tz))
    return to_utc(value)


def add_hours(instant: datetime, hours: float) -> datetime:
    """Shift an absolute instant by a number of hours."""
    return instant + timedelta(hours=hours)


def format_local(instant: datetime, tz: str | ZoneInfo) -> str:
    """Format as e.g. 'Nov 06, 7:00 PM' in the given timezone."""
    local = to_local(instant, tz)
    hour = local.hour % 12 or 12
    return f"{local.strftime('%b %d')}, {hour}:{local.strftime('%M %p')}"
