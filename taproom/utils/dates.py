"""Calendar helpers for the Monday-start week model.

Dates travel as ``YYYY-MM-DD`` strings and are always rebuilt from their
year/month/day parts, so nothing here depends on the host time zone.
"""

from __future__ import annotations

import re
from datetime import date, timedelta

DAY_CODES: tuple[str, ...] = ("MON", "TUE", "WED", "THU", "FRI", "SAT", "SUN")
DAY_NAMES: tuple[str, ...] = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

_CODE_BY_NAME = dict(zip(DAY_NAMES, DAY_CODES))
_NAME_BY_CODE = dict(zip(DAY_CODES, DAY_NAMES))

# Sunday=0 .. Saturday=6, the ordering events were historically bucketed with.
_SUNDAY_FIRST_CODES: tuple[str, ...] = ("SUN", "MON", "TUE", "WED", "THU", "FRI", "SAT")

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_HHMM_RE = re.compile(r"^(?:[01]\d|2[0-3]):[0-5]\d$")
_LOOSE_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def day_code_for_name(day_name: str) -> str:
    return _CODE_BY_NAME.get(day_name, day_name)


def day_name_for_code(day_code: str) -> str:
    return _NAME_BY_CODE.get(day_code, day_code)


def parse_yyyy_mm_dd(value: str) -> date:
    """Build a date from a ``YYYY-MM-DD`` string by its components."""
    if not isinstance(value, str) or _DATE_RE.match(value) is None:
        raise ValueError("Invalid date format, expected YYYY-MM-DD")
    year, month, day = (int(part) for part in value.split("-"))
    try:
        return date(year, month, day)
    except ValueError as e:
        raise ValueError("Invalid date") from e


def as_date(value: date | str) -> date:
    if isinstance(value, date):
        return value
    return parse_yyyy_mm_dd(value)


def format_date_for_db(d: date) -> str:
    return d.isoformat()


def format_date_short(d: date) -> str:
    """M/D, used in week headers."""
    return f"{d.month}/{d.day}"


def format_date_display(value: date | str | None) -> str:
    """M/D/YYYY, e.g. "2024-07-04" -> "7/4/2024"."""
    if not value:
        return ""
    d = as_date(value)
    return f"{d.month}/{d.day}/{d.year}"


def format_friendly_date(value: date | str) -> str:
    d = as_date(value)
    return f"{d.strftime('%B')} {d.day}, {d.year}"


def format_time_12h(value: str | None) -> str:
    """Convert "HH:MM" (24h) to "h:MM AM/PM".

    Anything that is not an hour:minute pair is returned unchanged, since
    older events carry free text such as "5:00 PM" or "TBD".
    """
    if not value:
        return ""
    m = _LOOSE_TIME_RE.match(value.strip())
    if m is None:
        return value
    hours, minutes = int(m.group(1)), m.group(2)
    if hours > 23 or int(minutes) > 59:
        return value
    period = "AM" if hours < 12 else "PM"
    hours12 = hours % 12 or 12
    return f"{hours12}:{minutes} {period}"


def is_valid_hhmm(value: str | None) -> bool:
    """Return True if value is None or a valid HH:MM time in 00:00-23:59."""
    if value is None:
        return True
    return _HHMM_RE.match(value) is not None


def parse_hhmm_or_none(value: str | None) -> str | None:
    """Normalize empty strings to None; validate HH:MM."""
    if value is None:
        return None
    if value.strip() == "":
        return None
    if not is_valid_hhmm(value):
        raise ValueError("Invalid time format, expected HH:MM in 00:00-23:59")
    return value


def get_monday(d: date) -> date:
    return d - timedelta(days=d.weekday())


def current_week_start(today: date | None = None) -> date:
    return get_monday(today or date.today())


def previous_week(week_start: date) -> date:
    return week_start - timedelta(days=7)


def next_week(week_start: date) -> date:
    return week_start + timedelta(days=7)


def week_range(week_start: date) -> tuple[date, date]:
    """Inclusive [start, start + 6]."""
    return week_start, week_start + timedelta(days=6)


def day_of_week_index(d: date) -> int:
    """Monday=0 .. Sunday=6."""
    return d.weekday()


def date_for_day(week_start: date, day_code: str) -> date | None:
    try:
        offset = DAY_CODES.index(day_code)
    except ValueError:
        return None
    return week_start + timedelta(days=offset)


def is_date_in_range(value: date | str, start: date | str, end: date | str) -> bool:
    return as_date(start) <= as_date(value) <= as_date(end)


def sunday_first_day_code(value: date | str) -> str:
    d = as_date(value)
    return _SUNDAY_FIRST_CODES[d.isoweekday() % 7]
