"""Diagnostic codes and line status - no I/O dependencies."""

from dataclasses import dataclass
from enum import Enum


class DiagnosticCode(str, Enum):
    """Closed set of diagnostic codes.

    Consumers branch on the literal string, so codes are append-only:
    never renumber or reuse one.
    """

    BAD_TIME = "E001-bad-time"
    BAD_DURATION = "E010-bad-duration"
    MISSING_START_FIRST_LINE = "E020-missing-start-first-line"
    OVERLAP_ERROR = "E030-overlap"
    UNKNOWN_DIRECTIVE = "E040-unknown-directive"
    BAD_CATEGORY = "E050-bad-category"
    BAD_DAY = "E060-bad-day"
    BAD_POLICY = "E061-bad-policy"
    BAD_DEFAULT_DURATION = "E062-bad-default-duration"
    BAD_TIMEZONE = "E063-bad-timezone"
    MALFORMED_ARGUMENT = "E070-malformed-argument"
    BARE_DIRECTIVE = "E071-bare-directive"
    UNEXPECTED_CHARACTER = "E080-unexpected-character"

    MISSING_SPACE_AFTER_DASH = "W001-missing-space-after-dash"
    TRAILING_COMMA = "W005-trailing-comma"
    OVERLAP_WARNING = "W010-overlap"
    AMBIGUOUS_TIME = "W020-ambiguous-time"
    UNKNOWN_PART = "W030-unknown-part"
    NOT_A_TASK_LINE = "W050-not-a-task-line"

    @property
    def is_error(self) -> bool:
        return self.value.startswith("E")


class LineStatus(str, Enum):
    VALID = "valid"
    VALID_WITH_WARNINGS = "valid-with-warnings"
    INVALID = "invalid"


@dataclass(frozen=True)
class Span:
    """Half-open column range [start, end) on one line of the original text."""

    line: int
    start: int
    end: int

    @classmethod
    def whole_line(cls, line_no: int, raw: str) -> "Span":
        return cls(line=line_no, start=0, end=len(raw))


@dataclass(frozen=True)
class Diagnostic:
    """A coded message attached to one line."""

    code: DiagnosticCode
    message: str
    span: Span | None = None

    @property
    def is_error(self) -> bool:
        return self.code.is_error

    def to_dict(self) -> dict:
        return {
            "code": self.code.value,
            "message": self.message,
            "span": (
                {"line": self.span.line, "start": self.span.start, "end": self.span.end}
                if self.span
                else None
            ),
        }


def has_errors(diagnostics: list[Diagnostic]) -> bool:
    """True if any diagnostic is error-class."""
    return any(d.is_error for d in diagnostics)


def status_for(diagnostics: list[Diagnostic]) -> LineStatus:
    """Derive a line's status from its diagnostic codes.

    Pure function - same codes always give the same status.
    """
    if has_errors(diagnostics):
        return LineStatus.INVALID
    if diagnostics:
        return LineStatus.VALID_WITH_WARNINGS
    return LineStatus.VALID
