"""
Natural-language date and time parsing for scheduling requests.

Understands ISO dates, relative words (today, tomorrow, this/next week),
"16th July" / "July 16" with an optional year, and times like "2pm",
"2:30 pm" or "14:00". A day-month without a year resolves to the current
year, or next year when that date has already passed.
"""

import re
from datetime import date, datetime, time, timedelta
from typing import Any, Callable, Dict, Optional, Pattern, Tuple

DEFAULT_HOUR = 12

MONTHS: Dict[str, int] = {
    "january": 1, "jan": 1,
    "february": 2, "feb": 2,
    "march": 3, "mar": 3,
    "april": 4, "apr": 4,
    "may": 5,
    "june": 6, "jun": 6,
    "july": 7, "jul": 7,
    "august": 8, "aug": 8,
    "september": 9, "sep": 9, "sept": 9,
    "october": 10, "oct": 10,
    "november": 11, "nov": 11,
    "december": 12, "dec": 12,
}

RELATIVE_DAYS: Dict[str, int] = {
    "today": 0,
    "tomorrow": 1,
    "this week": 0,
    "next week": 7,
}

_ISO_DATE = re.compile(r"\b(\d{4})-(\d{2})-(\d{2})\b")
_DAY_MONTH = re.compile(r"\b(\d{1,2})(?:st|nd|rd|th)?\s+(?:of\s+)?([a-z]+)\.?(?:,?\s+(\d{4}))?\b")
_MONTH_DAY = re.compile(r"\b([a-z]+)\.?\s+(\d{1,2})(?:st|nd|rd|th)?(?:,?\s+(\d{4}))?\b")
_RELATIVE = re.compile(r"\b(today|tomorrow|this week|next week)\b")

# Embedded in free text a time needs am/pm or a colon so day numbers are not mistaken for hours
_TIME_IN_TEXT = re.compile(r"\b(\d{1,2})(?::(\d{2}))?\s*(am|pm)\b|\b(\d{1,2}):(\d{2})\b")
_TIME_ONLY = re.compile(r"^\s*(\d{1,2})(?::(\d{2}))?\s*(am|pm)?\s*$")


def _roll_forward(candidate: date, today: date, explicit_year: bool) -> date:
    if explicit_year or candidate >= today:
        return candidate
    return candidate.replace(year=candidate.year + 1)


def _from_iso(match: re.Match, today: date) -> Optional[date]:
    return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))


def _from_relative(match: re.Match, today: date) -> Optional[date]:
    return today + timedelta(days=RELATIVE_DAYS[match.group(1)])


def _from_day_month(match: re.Match, today: date) -> Optional[date]:
    month = MONTHS.get(match.group(2))
    if month is None:
        return None
    year = int(match.group(3)) if match.group(3) else today.year
    return _roll_forward(date(year, month, int(match.group(1))), today, bool(match.group(3)))


def _from_month_day(match: re.Match, today: date) -> Optional[date]:
    month = MONTHS.get(match.group(1))
    if month is None:
        return None
    year = int(match.group(3)) if match.group(3) else today.year
    return _roll_forward(date(year, month, int(match.group(2))), today, bool(match.group(3)))


# Tried in order; the first pattern that yields a valid date wins
DATE_RULES: Tuple[Tuple[str, Pattern, Callable[[re.Match, date], Optional[date]]], ...] = (
    ("iso", _ISO_DATE, _from_iso),
    ("relative", _RELATIVE, _from_relative),
    ("day_month", _DAY_MONTH, _from_day_month),
    ("month_day", _MONTH_DAY, _from_month_day),
)


def parse_date(text: str, today: Optional[date] = None) -> Optional[date]:
    """Find the first recognisable date in text"""
    if not text:
        return None
    today = today or date.today()
    lowered = text.lower()

    for _name, pattern, builder in DATE_RULES:
        for match in pattern.finditer(lowered):
            try:
                resolved = builder(match, today)
            except ValueError:
                # e.g. 31st February
                continue
            if resolved is not None:
                return resolved
    return None


def _to_time(hour: int, minute: int, meridiem: Optional[str]) -> Optional[time]:
    if meridiem == "pm" and hour < 12:
        hour += 12
    elif meridiem == "am" and hour == 12:
        hour = 0
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        return None
    return time(hour, minute)


def parse_time(text: Optional[str]) -> Optional[time]:
    """
    Parse a time expression.

    A bare value such as "14" or "2pm" is accepted when it is the whole
    string; inside longer text only am/pm or HH:MM forms are recognised.
    """
    if not text:
        return None
    lowered = text.lower().strip()

    only = _TIME_ONLY.match(lowered)
    if only:
        return _to_time(int(only.group(1)), int(only.group(2) or 0), only.group(3))

    match = _TIME_IN_TEXT.search(lowered)
    if not match:
        return None
    if match.group(1):
        return _to_time(int(match.group(1)), int(match.group(2) or 0), match.group(3))
    return _to_time(int(match.group(4)), int(match.group(5)), None)


def parse_iso_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string (a trailing Z is accepted); None when invalid"""
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None


def parse_natural_date(
    date_text: Optional[str],
    time_text: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Optional[datetime]:
    """
    Resolve a date (and optional time) description to a datetime.

    Args:
        date_text: "2026-07-16", "tomorrow", "16th July at 2pm", ...
        time_text: Separate time such as "2pm" or "14:00"
        now: Reference point (defaults to now)

    Returns:
        Naive datetime, hour 12 when no time is given; None if no date is found
    """
    now = now or datetime.now()

    iso = parse_iso_datetime(date_text) if date_text and "T" in date_text else None
    if iso is not None and not time_text:
        return iso.replace(tzinfo=None)

    resolved_date = parse_date(date_text or "", today=now.date())
    if resolved_date is None:
        return None

    resolved_time = parse_time(time_text) if time_text else None
    if resolved_time is None:
        resolved_time = _time_in_date_text(date_text or "") or time(DEFAULT_HOUR, 0)

    return datetime.combine(resolved_date, resolved_time)


def _time_in_date_text(text: str) -> Optional[time]:
    match = _TIME_IN_TEXT.search(text.lower())
    if not match:
        return None
    if match.group(1):
        return _to_time(int(match.group(1)), int(match.group(2) or 0), match.group(3))
    return _to_time(int(match.group(4)), int(match.group(5)), None)


def event_time_value(value: Any) -> Any:
    """Unwrap a calendar {"dateTime": ...} or {"date": ...} object; other values are returned as is"""
    if isinstance(value, dict):
        return value.get("dateTime") or value.get("date")
    return value


def is_parseable_date(value: Any) -> bool:
    """True when value is an ISO datetime, a calendar time object or a recognisable natural date"""
    value = event_time_value(value)
    if parse_iso_datetime(value) is not None:
        return True
    return isinstance(value, str) and parse_date(value) is not None
