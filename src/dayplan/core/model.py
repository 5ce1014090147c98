"""Semantic model of an analyzed day plan - pure data, no I/O."""

import hashlib
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum

from .clock import format_duration
from .diagnostics import Diagnostic, LineStatus, status_for

DEFAULT_DURATION_MIN = 30
DEFAULT_TIMEZONE = "UTC"


class OverlapPolicy(str, Enum):
    WARNING = "warning"
    ERROR = "error"
    IGNORE = "ignore"


class SectionMode(str, Enum):
    PLANNER = "planner"
    SCRATCHPAD = "scratchpad"


@dataclass(frozen=True)
class CategoryPath:
    """Hierarchical tag such as :work::planning."""

    segments: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.segments or not all(self.segments):
            raise ValueError(f"Category path needs non-empty segments: {self.segments!r}")

    def format(self) -> str:
        return ":" + "::".join(self.segments)


@dataclass(frozen=True)
class TaskNode:
    """A scheduled (or attempted) task.

    ``end`` is derived from ``start`` and ``duration_min`` and is never
    stored on its own.
    """

    title: str
    start: datetime | None
    duration_min: int
    categories: tuple[CategoryPath, ...] = ()
    explicit_start: bool = False
    explicit_duration: bool = False

    kind = "task"

    @property
    def end(self) -> datetime | None:
        if self.start is None:
            return None
        return self.start + timedelta(minutes=self.duration_min)

    def format_time(self) -> str:
        """Format the task window for display."""
        if self.start is None:
            return "--:--"
        return f"{self.start.strftime('%H:%M')}-{self.end.strftime('%H:%M')} ({format_duration(self.duration_min)})"

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "title": self.title,
            "start": self.start.isoformat() if self.start else None,
            "duration_min": self.duration_min,
            "end": self.end.isoformat() if self.end else None,
            "categories": [list(c.segments) for c in self.categories],
            "explicit_start": self.explicit_start,
            "explicit_duration": self.explicit_duration,
        }


@dataclass(frozen=True)
class DirectiveNode:
    """A configuration line: !day, !tz, !default, !policy, !scratchpad, !planner."""

    name: str
    args: dict[str, str] = field(default_factory=dict)

    kind = "directive"

    def to_dict(self) -> dict:
        return {"kind": self.kind, "name": self.name, "args": dict(self.args)}


@dataclass(frozen=True)
class AnalysisContext:
    """Document-wide settings in effect at a point of the document."""

    day: date
    timezone: str = DEFAULT_TIMEZONE
    default_duration_min: int = DEFAULT_DURATION_MIN
    overlap_policy: OverlapPolicy = OverlapPolicy.WARNING
    section: SectionMode = SectionMode.PLANNER

    def to_dict(self) -> dict:
        return {
            "day": self.day.isoformat(),
            "timezone": self.timezone,
            "default_duration_min": self.default_duration_min,
            "overlap_policy": self.overlap_policy.value,
            "section": self.section.value,
        }


def line_id(raw: str, index: int) -> str:
    """Stable identifier: same raw text at the same position, same id."""
    digest = hashlib.sha1(raw.encode("utf-8")).hexdigest()[:8]
    return f"line_{index}_{digest}"


@dataclass
class LineRecord:
    """One analyzed line of the source."""

    id: str
    raw: str
    line_no: int
    diagnostics: list[Diagnostic] = field(default_factory=list)
    node: TaskNode | DirectiveNode | None = None

    @property
    def status(self) -> LineStatus:
        return status_for(self.diagnostics)

    @property
    def task(self) -> TaskNode | None:
        return self.node if isinstance(self.node, TaskNode) else None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "raw": self.raw,
            "line_no": self.line_no,
            "status": self.status.value,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
            "node": self.node.to_dict() if self.node else None,
        }


@dataclass
class Program:
    """Result of analyzing a whole document."""

    context: AnalysisContext
    lines: list[LineRecord]

    def line(self, line_no: int) -> LineRecord | None:
        if 1 <= line_no <= len(self.lines):
            return self.lines[line_no - 1]
        return None

    def tasks(self) -> list[TaskNode]:
        return [line.task for line in self.lines if line.task]

    def to_dict(self) -> dict:
        return {
            "context": self.context.to_dict(),
            "lines": [line.to_dict() for line in self.lines],
        }
