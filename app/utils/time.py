"""Wall-clock and calendar helpers.

Times travel as ``HH:MM`` strings in payloads and are stored as integer
minutes since midnight. Dates are plain ``YYYY-MM-DD`` calendar days.
"""
import re
from datetime import date as date_type

from app.errors import BookingTooShort, InvalidDate, InvalidTimeFormat, InvalidTimeRange

MINUTES_PER_DAY = 24 * 60
MIN_BOOKING_MINUTES = 30

_TIME_RE = re.compile(r"([01][0-9]|2[0-3]):([0-5][0-9])")
_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


def parse_time(value: str) -> int:
    """Convert a strict 24-hour ``HH:MM`` string to minutes since midnight."""
    match = _TIME_RE.fullmatch(value) if isinstance(value, str) else None
    if not match:
        raise InvalidTimeFormat(details={"value": value})
    return int(match.group(1)) * 60 + int(match.group(2))


def format_time(minutes: int) -> str:
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValueError(f"minutes out of range: {minutes}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def is_ordered(start_minutes: int, end_minutes: int) -> bool:
    return start_minutes < end_minutes


def validate_date(value: str) -> str:
    if not isinstance(value, str) or not _DATE_RE.fullmatch(value):
        raise InvalidDate(details={"value": value})
    try:
        date_type.fromisoformat(value)
    except ValueError:
        raise InvalidDate(details={"value": value})
    return value


def validate_window(start_minutes: int, end_minutes: int) -> None:
    if not is_ordered(start_minutes, end_minutes):
        raise InvalidTimeRange(details={"field": "end_time"})
    if end_minutes - start_minutes < MIN_BOOKING_MINUTES:
        raise BookingTooShort(details={"field": "end_time", "minimum_minutes": MIN_BOOKING_MINUTES})


def intervals_overlap(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    # half-open: touching edges do not overlap
    return start_a < end_b and start_b < end_a


def today() -> str:
    return date_type.today().isoformat()
