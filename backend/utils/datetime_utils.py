from datetime import datetime, date, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


DATE_KEY_FORMAT = "%Y-%m-%d"
_DAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


def today_for_tz(tz_name: str | None) -> date:
    """Return today's date in the given timezone, falling back to UTC."""
    if tz_name:
        try:
            return datetime.now(ZoneInfo(tz_name)).date()
        except (ZoneInfoNotFoundError, ValueError):
            pass
    return today_utc()


def _as_date(d: date | datetime) -> date:
    if isinstance(d, datetime):
        return d.date()
    return d


def date_key(d: date | datetime) -> str:
    """Canonical, lexicographically sortable day key (YYYY-MM-DD, no time of day)."""
    return _as_date(d).isoformat()


def parse_date_key(key: str) -> date:
    if not isinstance(key, str):
        raise ValueError("date key must be a YYYY-MM-DD string")
    try:
        return datetime.strptime(key.strip(), DATE_KEY_FORMAT).date()
    except ValueError:
        raise ValueError(f"Invalid date key '{key}', expected YYYY-MM-DD")


def is_weekend(d: date | datetime) -> bool:
    return _as_date(d).weekday() >= 5


def day_name(d: date | datetime) -> str:
    return _DAY_NAMES[_as_date(d).weekday()]


def date_window(anchor: date | datetime, days_before: int, days_after: int) -> list[date]:
    """Inclusive ascending window of days around anchor."""
    start = _as_date(anchor) - timedelta(days=max(days_before, 0))
    total = max(days_before, 0) + max(days_after, 0) + 1
    return [start + timedelta(days=offset) for offset in range(total)]


def start_of_week(d: date) -> date:
    """Return Monday of the week containing d."""
    return d - timedelta(days=d.weekday())
