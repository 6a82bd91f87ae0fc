import re
from datetime import date, datetime, timedelta
from enum import Enum

from dateutil import parser as dateutil_parser
from dateutil.parser import ParserError

from . import clock

__all__ = ["DueLevel", "due_level", "format_timer", "note_title", "parse_due_date"]

SOON_DAYS = 3

_WEEKDAYS = {"mon": 0, "tue": 1, "wed": 2, "thu": 3, "fri": 4, "sat": 5, "sun": 6}
_FULL_WEEKDAYS = {
    name: i
    for i, name in enumerate(
        ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
    )
}


class DueLevel(Enum):
    NONE = "none"
    FAR = "far"
    SOON = "soon"
    TODAY = "today"
    OVERDUE = "overdue"


def due_level(due: date | None, today: date | None = None) -> DueLevel:
    if due is None:
        return DueLevel.NONE
    today = today or clock.today()
    days = (due - today).days
    if days < 0:
        return DueLevel.OVERDUE
    if days == 0:
        return DueLevel.TODAY
    if days <= SOON_DAYS:
        return DueLevel.SOON
    return DueLevel.FAR


def parse_due_date(due_str: str) -> date | None:
    """Parses 'today', 'tomorrow', a weekday name or an explicit date like 2025-06-01."""
    s = due_str.strip().lower()
    today = clock.today()
    if not s:
        return None
    if s == "today":
        return today
    if s == "tomorrow":
        return today + timedelta(days=1)
    weekday = _WEEKDAYS.get(s) if len(s) == 3 else _FULL_WEEKDAYS.get(s)
    if weekday is not None:
        days_ahead = (weekday - today.weekday() + 7) % 7
        return today + timedelta(days=days_ahead or 7)
    if re.match(r"^\d{1,2}:\d{2}$", s):
        return None
    try:
        return dateutil_parser.parse(
            due_str, default=datetime(today.year, today.month, today.day)
        ).date()
    except (ParserError, ValueError, OverflowError):
        return None


def note_title(day: date, today: date | None = None) -> str:
    today = today or clock.today()
    if day == today:
        return "Today"
    if day == today - timedelta(days=1):
        return "Yesterday"
    if day.year == today.year:
        return day.strftime("%a, %b %d")
    return day.strftime("%a, %b %d %Y")


def format_timer(remaining: timedelta) -> str:
    total = max(int(remaining.total_seconds()), 0)
    minutes, seconds = divmod(total, 60)
    return f"{minutes:02d}:{seconds:02d}"
