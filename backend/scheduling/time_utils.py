import re
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from backend.scheduling.enums import WEEKDAYS, Weekday
from backend.scheduling.errors import FormatError

TIME_PATTERN = re.compile(r'[0-9]{2}:[0-9]{2}')
DATE_PATTERN = re.compile(r'[0-9]{4}-[0-9]{2}-[0-9]{2}')
MINUTES_PER_DAY = 24 * 60


def parse_time(value: str) -> tuple[int, int]:
    if not isinstance(value, str) or not TIME_PATTERN.fullmatch(value):
        raise FormatError(f'Invalid time {value!r}. Use HH:MM.')

    hour, minute = int(value[:2]), int(value[3:])
    if hour > 23 or minute > 59:
        raise FormatError(f'Invalid time {value!r}. Hours must be 00-23 and minutes 00-59.')

    return hour, minute


def time_to_minutes(value: str) -> int:
    hour, minute = parse_time(value)
    return hour * 60 + minute


def minutes_to_time(minutes: int) -> str:
    if minutes < 0 or minutes >= MINUTES_PER_DAY:
        raise FormatError(f'{minutes} minutes is outside a single day.')
    return f'{minutes // 60:02d}:{minutes % 60:02d}'


def parse_interval(start_time: str, end_time: str) -> tuple[int, int]:
    """Return the half-open interval ``[start, end)`` in minutes since midnight."""
    start, end = time_to_minutes(start_time), time_to_minutes(end_time)
    if start >= end:
        raise FormatError(f'Start time {start_time} must be before end time {end_time}.')
    return start, end


def intervals_overlap(a_start, a_end, b_start, b_end) -> bool:
    # Half-open: touching endpoints are not an overlap.
    return a_start < b_end and b_start < a_end


def get_timezone(name: str | None) -> ZoneInfo:
    if not name:
        raise FormatError('Timezone is required.')
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise FormatError(f'Unknown timezone {name!r}.') from exc


def parse_date(value) -> date | datetime:
    """Accept a date, a datetime, ``YYYY-MM-DD`` or an ISO timestamp."""
    if isinstance(value, (date, datetime)):
        return value

    if not isinstance(value, str) or not value.strip():
        raise FormatError(f'Invalid date {value!r}. Use YYYY-MM-DD.')

    normalized = value.strip()
    try:
        if DATE_PATTERN.fullmatch(normalized):
            return date.fromisoformat(normalized)
        return datetime.fromisoformat(normalized.replace('Z', '+00:00'))
    except ValueError as exc:
        raise FormatError(f'Invalid date {value!r}. Use YYYY-MM-DD.') from exc


def local_date(value, timezone_name: str) -> date:
    """Calendar date of ``value`` as seen in ``timezone_name``.

    Plain dates are already calendar dates. Timestamps are converted into the
    zone first; naive timestamps are taken as wall-clock time in that zone.
    """
    zone = get_timezone(timezone_name)
    parsed = parse_date(value)

    if isinstance(parsed, datetime):
        if parsed.tzinfo is None:
            return parsed.date()
        return parsed.astimezone(zone).date()

    return parsed


def weekday_of(value, timezone_name: str) -> Weekday:
    return WEEKDAYS[local_date(value, timezone_name).weekday()]


def calendar_date(value) -> date:
    """The date part of ``value`` without any timezone conversion."""
    parsed = parse_date(value)
    return parsed.date() if isinstance(parsed, datetime) else parsed


def utcnow() -> datetime:
    """Naive UTC timestamp, the form the database columns store."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
