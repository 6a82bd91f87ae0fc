import re
from datetime import timedelta

__all__ = ["format_duration", "parse_duration"]

_TOKEN = re.compile(r"(\d+(?:\.\d+)?)(h|m|s)")
_UNIT_SECONDS = {"h": 3600, "m": 60, "s": 1}


def parse_duration(text: str) -> timedelta:
    """Parse a compact duration such as '1h30m', '45m', '1.5h' or '90s'.

    Raises ValueError if empty, malformed or negative.
    """
    s = text.strip().replace(" ", "").lower()
    if not s:
        raise ValueError("duration required")
    if s.startswith("-"):
        raise ValueError("duration must be positive")
    pos = 0
    seconds = 0.0
    for m in _TOKEN.finditer(s):
        if m.start() != pos:
            break
        seconds += float(m.group(1)) * _UNIT_SECONDS[m.group(2)]
        pos = m.end()
    if pos != len(s) or pos == 0:
        raise ValueError(f"invalid duration: {text!r} (use e.g. 1h30m, 45m)")
    return timedelta(seconds=round(seconds))


def format_duration(d: timedelta) -> str:
    total_minutes = int(d.total_seconds()) // 60
    hours, minutes = divmod(total_minutes, 60)
    if hours and minutes:
        return f"{hours}h {minutes}m"
    if hours:
        return f"{hours}h"
    return f"{minutes}m"
