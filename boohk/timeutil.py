"""Time helpers shared by models, services and PDF rendering."""
import os
import time
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

# Operating timezone for display and calendar math
APP_TIMEZONE = os.getenv("APP_TIMEZONE", "Asia/Manila")


def get_app_tz() -> ZoneInfo:
    """Get the application timezone."""
    return ZoneInfo(APP_TIMEZONE)


def utc_now() -> datetime:
    """Return the current UTC time as a naive datetime (database convention)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def epoch_ms() -> int:
    """Milliseconds since the epoch, used in document numbers."""
    return int(time.time() * 1000)


def to_local(dt: datetime) -> datetime:
    """Convert a datetime to the app's local timezone for display.

    Handles both naive and aware datetimes:
    - Naive datetimes are assumed to be UTC
    - Aware datetimes are converted to local timezone
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(get_app_tz())


def localdate(dt: datetime, fmt: str = None) -> str:
    """Format a UTC datetime as a local date string, e.g. "Jan 15, 2025"."""
    if dt is None:
        return ""

    local_dt = to_local(dt)

    if fmt:
        return local_dt.strftime(fmt)

    return local_dt.strftime("%b %d, %Y")


def isoformat(dt) -> str:
    """Serialize a date/datetime for JSON, passing None through."""
    if dt is None:
        return None
    return dt.isoformat()


def parse_datetime(value):
    """Parse an ISO date or datetime string. Returns None for empty input.

    Raises:
        ValueError: If the string is not ISO formatted
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed
