"""Time-shift engine - move one task line's start time in place.

The edit is text surgery on the untouched original line: the time token
is located again by re-tokenizing the raw text, independently of the
semantic model, and only that token is replaced. Everything else on the
line stays byte-identical.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import timedelta

from .clock import parse_clock, render_clock, render_default
from .grammar import LineShape, PartKind, classify_part, recognize
from .model import LineRecord, TaskNode
from .tokens import tokenize_line

logger = logging.getLogger(__name__)

MAX_OFFSET_MINUTES = 12 * 60

_OFFSET_RE = re.compile(r"^([+-])(?:(\d+)h)?(?:(\d+)m)?$")
_MARKER_PREFIX_RE = re.compile(r"^(\s*-\s*)(.*)$", re.DOTALL)


class OffsetError(ValueError):
    """The offset text is not a usable time offset."""


class ShiftError(ValueError):
    """A line cannot be shifted."""


@dataclass(frozen=True)
class TimeOffset:
    hours: int
    minutes: int
    sign: int

    @property
    def total_minutes(self) -> int:
        return self.sign * (self.hours * 60 + self.minutes)


@dataclass(frozen=True)
class TimeTokenSpan:
    """Where the time literal sits in the original line."""

    text: str
    start: int
    end: int


@dataclass
class ShiftResult:
    success: bool
    new_line_text: str | None = None
    error: str | None = None
    affected_line_ids: list[str] = field(default_factory=list)


def parse_offset(text: str) -> TimeOffset:
    """Parse +10m, -1h30m, +2h.

    Raises OffsetError with a distinct message for empty, malformed,
    zero and too-large offsets.
    """
    if not text or not text.strip():
        raise OffsetError("Offset cannot be empty")
    match = _OFFSET_RE.match(text.strip())
    if not match or not (match.group(2) or match.group(3)):
        raise OffsetError("Invalid offset format. Use +/-[Nh][Nm] (e.g., +10m, -1h30m, +2h)")
    sign, hours, minutes = match.groups()
    offset = TimeOffset(
        hours=int(hours or "0"),
        minutes=int(minutes or "0"),
        sign=1 if sign == "+" else -1,
    )
    if offset.total_minutes == 0:
        raise OffsetError("Offset must not be zero")
    if abs(offset.total_minutes) > MAX_OFFSET_MINUTES:
        raise OffsetError("Offset too large (max 12 hours)")
    return offset


def shift_clock(hours: int, minutes: int, offset: TimeOffset) -> tuple[int, int]:
    """Shift a wall-clock time, carrying and borrowing across the hour
    and wrapping around midnight in both directions."""
    minutes += offset.sign * offset.minutes
    hours += offset.sign * offset.hours
    carry, minutes = divmod(minutes, 60)
    hours = (hours + carry) % 24
    return hours, minutes


def locate_time_token(raw: str) -> TimeTokenSpan:
    """Find the task's time literal in the original line.

    Uses the same tokenizer and part classifier as the analyzer, so the
    first TIME part is the one the analyzer resolved the start from.
    Raises ShiftError when there is none.
    """
    tokenized = tokenize_line(raw)
    parsed = recognize(tokenized)
    if parsed.shape != LineShape.TASK:
        raise ShiftError("Invalid task line format - missing dash or malformed syntax")
    for part in parsed.parts:
        if classify_part(part) == PartKind.TIME:
            start = tokenized.line.to_original(part.start)
            end = tokenized.line.to_original(part.end)
            return TimeTokenSpan(text=raw[start:end], start=start, end=end)
    raise ShiftError("Could not locate time in line to modify")


def _shift_explicit(raw: str, offset: TimeOffset) -> str:
    token = locate_time_token(raw)
    try:
        clock = parse_clock(token.text)
    except ValueError as e:
        raise ShiftError(f"Invalid time format: {token.text}") from e
    hours, minutes = shift_clock(clock.hours, clock.minutes, offset)
    new_text = render_clock(hours, minutes, clock.style, clock.upper)
    return raw[: token.start] + new_text + raw[token.end :]


def _shift_inherited(raw: str, task: TaskNode, offset: TimeOffset) -> str:
    if task.start is None:
        raise ShiftError("Task has no time information to shift")
    match = _MARKER_PREFIX_RE.match(raw)
    if not match:
        raise ShiftError("Invalid task line format")
    shifted = task.start + timedelta(minutes=offset.total_minutes)
    prefix, content = match.groups()
    return f"{prefix}{render_default(shifted.hour, shifted.minute)}, {content}"


def find_affected_lines(line: LineRecord, all_lines: list[LineRecord]) -> list[LineRecord]:
    """Tasks after ``line`` whose start is inherited, up to the next explicit start.

    Advisory only: their instants are stale until the document is
    analyzed again.
    """
    index = next((i for i, other in enumerate(all_lines) if other.id == line.id), None)
    if index is None:
        return []
    affected = []
    for other in all_lines[index + 1 :]:
        task = other.task
        if task is None:
            continue
        if task.explicit_start:
            break
        affected.append(other)
    return affected


def shift_line(
    line: LineRecord,
    offset_text: str,
    all_lines: list[LineRecord] | None = None,
) -> ShiftResult:
    """Shift one analyzed task line by a signed offset.

    Never raises: failures come back as ``success=False`` with a message
    and no text is changed.
    """
    try:
        offset = parse_offset(offset_text)
        task = line.task
        if task is None:
            raise ShiftError("Time shift can only be applied to task lines")
        if task.explicit_start:
            new_text = _shift_explicit(line.raw, offset)
        else:
            new_text = _shift_inherited(line.raw, task, offset)
    except (OffsetError, ShiftError) as e:
        logger.debug(f"Line {line.line_no}: shift {offset_text!r} failed: {e}")
        return ShiftResult(success=False, error=str(e))

    affected = find_affected_lines(line, all_lines or [])
    return ShiftResult(
        success=True,
        new_line_text=new_text,
        affected_line_ids=[other.id for other in affected],
    )
