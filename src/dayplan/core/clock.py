"""Wall-clock time and duration literals - parsing and rendering."""

import re
from dataclasses import dataclass
from enum import Enum

_CLOCK_RE = re.compile(r"^(\d{1,2})(?::(\d{2}))?(am|pm)?$", re.IGNORECASE)
_DURATION_RE = re.compile(r"^(?:(\d+)h)?(?:(\d+)m)?$")

_WORDS = {"noon": (12, 0), "midnight": (0, 0)}


class TimeStyle(Enum):
    """The textual style a time literal was written in."""

    BARE_HOUR = "bare_hour"  # 9, 14
    HOUR_MINUTE = "hour_minute"  # 9:30
    CLOCK24 = "clock24"  # 09:30, 21:00
    MERIDIEM = "meridiem"  # 9am, 9:30pm
    WORD = "word"  # noon, midnight


@dataclass(frozen=True)
class ClockTime:
    """A parsed time literal, 24-hour internally."""

    hours: int
    minutes: int
    style: TimeStyle
    upper: bool = False

    @property
    def is_ambiguous(self) -> bool:
        """A bare 1-12 hour could mean morning or afternoon."""
        return self.style == TimeStyle.BARE_HOUR and 1 <= self.hours <= 12


def parse_clock(text: str) -> ClockTime:
    """Parse a time literal such as 9am, 9:30, 21:00 or noon.

    Raises ValueError when the literal is out of range.
    """
    lower = text.lower()
    if lower in _WORDS:
        hours, minutes = _WORDS[lower]
        return ClockTime(hours, minutes, TimeStyle.WORD)

    match = _CLOCK_RE.match(text)
    if not match:
        raise ValueError(f"Invalid time format: {text}")

    hour_text, minute_text, meridiem = match.groups()
    hours = int(hour_text)
    minutes = int(minute_text or "0")
    if minutes > 59:
        raise ValueError(f"Invalid minutes in time: {text}")

    if meridiem:
        if not 1 <= hours <= 12:
            raise ValueError(f"Hour must be 1-12 with am/pm: {text}")
        if meridiem.lower() == "pm" and hours != 12:
            hours += 12
        elif meridiem.lower() == "am" and hours == 12:
            hours = 0
        return ClockTime(hours, minutes, TimeStyle.MERIDIEM, upper=meridiem.isupper())

    if hours > 23:
        raise ValueError(f"Hour must be 0-23: {text}")
    if minute_text is None:
        return ClockTime(hours, minutes, TimeStyle.BARE_HOUR)
    if len(hour_text) == 2:
        return ClockTime(hours, minutes, TimeStyle.CLOCK24)
    return ClockTime(hours, minutes, TimeStyle.HOUR_MINUTE)


def parse_duration(text: str) -> int:
    """Parse 30m / 1h / 1h30m into minutes. Zero is not a duration."""
    match = _DURATION_RE.match(text)
    if not text or not match:
        raise ValueError(f"Invalid duration format: {text}")
    hours = int(match.group(1) or "0")
    minutes = int(match.group(2) or "0")
    total = hours * 60 + minutes
    if total == 0:
        raise ValueError(f"Duration must be greater than zero: {text}")
    return total


def _meridiem(hours: int, minutes: int, upper: bool = False) -> str:
    suffix = "pm" if hours >= 12 else "am"
    if upper:
        suffix = suffix.upper()
    display = hours % 12 or 12
    if minutes == 0:
        return f"{display}{suffix}"
    return f"{display}:{minutes:02d}{suffix}"


def render_clock(hours: int, minutes: int, style: TimeStyle, upper: bool = False) -> str:
    """Render a wall-clock time in the given style."""
    match style:
        case TimeStyle.WORD:
            if (hours, minutes) == (12, 0):
                return "noon"
            if (hours, minutes) == (0, 0):
                return "midnight"
            return _meridiem(hours, minutes)
        case TimeStyle.CLOCK24:
            return f"{hours:02d}:{minutes:02d}"
        case TimeStyle.HOUR_MINUTE:
            return f"{hours}:{minutes:02d}"
        case TimeStyle.BARE_HOUR:
            if minutes == 0:
                return f"{hours}"
            return f"{hours}:{minutes:02d}"
        case _:
            return _meridiem(hours, minutes, upper)


def render_default(hours: int, minutes: int) -> str:
    """Render a time token for insertion: noon/midnight, else 12-hour."""
    return render_clock(hours, minutes, TimeStyle.WORD)


def format_duration(minutes: int) -> str:
    hours, rest = divmod(minutes, 60)
    if not hours:
        return f"{rest}m"
    if not rest:
        return f"{hours}h"
    return f"{hours}h{rest}m"
