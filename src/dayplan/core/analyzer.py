"""Semantic analyzer - resolves times, chains tasks and checks overlaps.

Two passes over the recognized lines:

1. ``prescan_directives`` applies every directive in document order and
   yields the document context.
2. A left-to-right fold (``step``) threads an immutable ``FoldState``
   through the lines, so a directive only ever affects the lines at or
   after it and nothing is revisited.

Pure functions - no I/O.
"""

import logging
import re
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .clock import ClockTime, parse_clock, parse_duration
from .diagnostics import Diagnostic, DiagnosticCode, LineStatus, Span, has_errors
from .grammar import DirectiveParts, LineShape, ParsedLine, PartKind, classify_part, recognize
from .model import (
    AnalysisContext,
    CategoryPath,
    DirectiveNode,
    LineRecord,
    OverlapPolicy,
    Program,
    SectionMode,
    TaskNode,
    line_id,
)
from .tokens import tokenize

logger = logging.getLogger(__name__)

_DAY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_SEGMENT_RE = re.compile(r"^[A-Za-z0-9_-]+$")

# Accepted argument keys per directive. A single positional value is
# stored under the directive's own name by the grammar.
DIRECTIVE_ARGS: dict[str, tuple[str, ...]] = {
    "day": ("day", "date"),
    "tz": ("tz", "timezone"),
    "default": ("duration", "default"),
    "policy": ("overlaps", "policy"),
    "scratchpad": (),
    "planner": (),
}


class DirectiveError(ValueError):
    """A directive that cannot be applied to the context."""

    def __init__(self, code: DiagnosticCode, message: str):
        super().__init__(message)
        self.code = code


@dataclass
class AnalyzeOptions:
    """Caller options that seed the analysis context."""

    day: date | str | None = None
    timezone: str | None = None
    default_duration_min: int | None = None
    overlap_policy: OverlapPolicy | str | None = None


@dataclass(frozen=True)
class ScheduledTask:
    line_no: int
    start: datetime
    end: datetime


@dataclass(frozen=True)
class FoldState:
    """Everything carried from one line to the next."""

    context: AnalysisContext
    cursor: datetime | None = None
    scheduled: tuple[ScheduledTask, ...] = field(default_factory=tuple)


def seed_context(options: AnalyzeOptions | None = None) -> AnalysisContext:
    """Build the starting context from caller options.

    Raises ValueError for an invalid day, timezone or policy.
    """
    options = options or AnalyzeOptions()
    day = options.day or date.today()
    if isinstance(day, str):
        day = date.fromisoformat(day)
    context = AnalysisContext(day=day)
    if options.timezone:
        try:
            ZoneInfo(options.timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {options.timezone}") from e
        context = replace(context, timezone=options.timezone)
    if options.default_duration_min is not None:
        if options.default_duration_min <= 0:
            raise ValueError("Default duration must be greater than zero")
        context = replace(context, default_duration_min=options.default_duration_min)
    if options.overlap_policy is not None:
        context = replace(context, overlap_policy=OverlapPolicy(options.overlap_policy))
    return context


def _argument(directive: DirectiveParts) -> str | None:
    for key in DIRECTIVE_ARGS.get(directive.name, ()):
        if key in directive.args:
            return directive.args[key]
    return None


def apply_directive(context: AnalysisContext, directive: DirectiveParts) -> AnalysisContext:
    """Return the context with one directive applied.

    Applying the same directive twice gives the same context.
    Raises DirectiveError when the directive is unknown or its value invalid.
    """
    value = _argument(directive)
    match directive.name:
        case "scratchpad":
            return replace(context, section=SectionMode.SCRATCHPAD)
        case "planner":
            return replace(context, section=SectionMode.PLANNER)
        case "default":
            try:
                minutes = parse_duration(value or "")
            except ValueError as e:
                raise DirectiveError(
                    DiagnosticCode.BAD_DEFAULT_DURATION,
                    f"Invalid default duration: {value!r}, expected e.g. duration=25m",
                ) from e
            return replace(context, default_duration_min=minutes)
        case "policy":
            try:
                policy = OverlapPolicy(value)
            except ValueError as e:
                raise DirectiveError(
                    DiagnosticCode.BAD_POLICY,
                    f"Invalid overlap policy: {value!r}, expected warning, error or ignore",
                ) from e
            return replace(context, overlap_policy=policy)
        case "day":
            try:
                if not value or not _DAY_RE.match(value):
                    raise ValueError(value)
                day = date.fromisoformat(value)
            except ValueError as e:
                raise DirectiveError(
                    DiagnosticCode.BAD_DAY, f"Invalid day format: {value!r}, expected YYYY-MM-DD"
                ) from e
            return replace(context, day=day)
        case "tz":
            try:
                ZoneInfo(value or "")
            except (ZoneInfoNotFoundError, ValueError) as e:
                raise DirectiveError(DiagnosticCode.BAD_TIMEZONE, f"Unknown timezone: {value!r}") from e
            return replace(context, timezone=value)
        case "":
            raise DirectiveError(DiagnosticCode.UNKNOWN_DIRECTIVE, "Missing directive name")
        case _:
            raise DirectiveError(DiagnosticCode.UNKNOWN_DIRECTIVE, f"Unknown directive: {directive.name}")


def _is_active_directive(parsed: ParsedLine, context: AnalysisContext) -> bool:
    """Directives count unless the line is broken or parked in a scratchpad."""
    if parsed.shape != LineShape.DIRECTIVE or parsed.directive is None:
        return False
    if context.section == SectionMode.SCRATCHPAD and not parsed.directive.is_section:
        return False
    return True


def prescan_directives(lines: list[ParsedLine], seed: AnalysisContext) -> AnalysisContext:
    """Pass 1: apply every directive in document order."""
    context = seed
    for parsed in lines:
        if not _is_active_directive(parsed, context) or has_errors(parsed.diagnostics):
            continue
        try:
            context = apply_directive(context, parsed.directive)
        except DirectiveError as e:
            logger.debug(f"Line {parsed.line_no}: directive not applied: {e}")
    return context


def parse_category(text: str) -> CategoryPath:
    """Parse :root::sub::leaf. Raises ValueError on any empty or invalid segment."""
    if not text.startswith(":") or text.startswith("::"):
        raise ValueError(f"Category must start with a single ':': {text}")
    segments = text[1:].split("::")
    for segment in segments:
        if not segment:
            raise ValueError(f"Empty category segment in {text}")
        if not _SEGMENT_RE.match(segment):
            raise ValueError(f"Invalid category segment '{segment}' in {text}")
    return CategoryPath(tuple(segments))


def _whole_line(parsed: ParsedLine) -> Span:
    return Span.whole_line(parsed.line_no, parsed.raw)


def _analyze_directive(state: FoldState, parsed: ParsedLine, record: LineRecord) -> FoldState:
    directive = parsed.directive
    record.diagnostics = list(parsed.diagnostics)
    record.node = DirectiveNode(name=directive.name, args=dict(directive.args))
    if has_errors(record.diagnostics):
        return state

    try:
        context = apply_directive(state.context, directive)
    except DirectiveError as e:
        record.diagnostics.append(Diagnostic(e.code, str(e), _whole_line(parsed)))
        return state

    allowed = DIRECTIVE_ARGS.get(directive.name, ())
    for key in directive.args:
        if key not in allowed:
            record.diagnostics.append(
                Diagnostic(
                    DiagnosticCode.UNKNOWN_PART,
                    f"Unknown argument '{key}' for !{directive.name}",
                    _whole_line(parsed),
                )
            )
    return replace(state, context=context)


def _analyze_task(state: FoldState, parsed: ParsedLine, record: LineRecord) -> FoldState:
    context = state.context
    tokenized = parsed.tokenized
    diagnostics = list(parsed.diagnostics)
    clock: ClockTime | None = None
    duration: int | None = None
    seen_time = seen_duration = False
    categories: list[CategoryPath] = []
    title_parts: list[str] = []

    def report(code: DiagnosticCode, message: str, span: Span) -> None:
        diagnostics.append(Diagnostic(code, message, span))

    for part in parsed.parts:
        text = part.text
        span = tokenized.original_span(part.start, part.end)
        match classify_part(part):
            case PartKind.TIME if not seen_time:
                seen_time = True
                try:
                    clock = parse_clock(text)
                except ValueError as e:
                    report(DiagnosticCode.BAD_TIME, str(e), span)
                    title_parts.append(text)
                    continue
                if clock.is_ambiguous:
                    report(
                        DiagnosticCode.AMBIGUOUS_TIME,
                        f"Ambiguous time '{text}', read as {clock.hours:02d}:00; add am/pm",
                        span,
                    )
            case PartKind.DURATION if not seen_duration:
                seen_duration = True
                try:
                    duration = parse_duration(text)
                except ValueError as e:
                    report(DiagnosticCode.BAD_DURATION, str(e), span)
                    title_parts.append(text)
            case PartKind.TIME | PartKind.DURATION:
                report(DiagnosticCode.UNKNOWN_PART, f"Multiple time or duration values, '{text}' kept in title", span)
                title_parts.append(text)
            case PartKind.CATEGORY:
                try:
                    categories.append(parse_category(text))
                except ValueError as e:
                    report(DiagnosticCode.BAD_CATEGORY, str(e), span)
                    title_parts.append(text)
            case PartKind.BAD_DURATION:
                report(DiagnosticCode.BAD_DURATION, f"Invalid duration format: {text}", span)
                title_parts.append(text)
            case PartKind.NUMERIC_FRAGMENT:
                report(DiagnosticCode.UNKNOWN_PART, f"Unrecognized part '{text}' kept in title", span)
                title_parts.append(text)
            case _:
                title_parts.append(text)

    start: datetime | None = None
    if clock is not None:
        start = datetime.combine(
            context.day, time(clock.hours, clock.minutes), tzinfo=ZoneInfo(context.timezone)
        )
    elif state.cursor is not None:
        start = state.cursor
    else:
        report(
            DiagnosticCode.MISSING_START_FIRST_LINE,
            "First task must have an explicit start time",
            _whole_line(parsed),
        )

    task = TaskNode(
        title=" ".join(title_parts) or "Untitled",
        start=start,
        duration_min=duration if duration is not None else context.default_duration_min,
        categories=tuple(categories),
        explicit_start=clock is not None,
        explicit_duration=duration is not None,
    )

    if task.start is not None and context.overlap_policy != OverlapPolicy.IGNORE:
        for other in state.scheduled:
            if task.start < other.end and task.end > other.start:
                code = (
                    DiagnosticCode.OVERLAP_ERROR
                    if context.overlap_policy == OverlapPolicy.ERROR
                    else DiagnosticCode.OVERLAP_WARNING
                )
                report(code, f"Task overlaps with line {other.line_no}", _whole_line(parsed))
                break

    record.diagnostics = diagnostics
    record.node = task

    # Only clean lines move the cursor; a broken line must not cascade.
    if has_errors(diagnostics) or task.start is None:
        return state
    scheduled = ScheduledTask(parsed.line_no, task.start, task.end)
    return replace(state, cursor=task.end, scheduled=state.scheduled + (scheduled,))


def step(state: FoldState, parsed: ParsedLine, index: int) -> tuple[FoldState, LineRecord]:
    """Pass 2: analyze one line and return the state for the next one."""
    record = LineRecord(id=line_id(parsed.raw, index), raw=parsed.raw, line_no=parsed.line_no)

    if _is_active_directive(parsed, state.context):
        return _analyze_directive(state, parsed, record), record

    # Scratchpad lines are inert, whatever they look like.
    if state.context.section == SectionMode.SCRATCHPAD:
        return state, record

    match parsed.shape:
        case LineShape.TASK:
            return _analyze_task(state, parsed, record), record
        case LineShape.TEXT:
            record.diagnostics = list(parsed.diagnostics)
            record.diagnostics.append(
                Diagnostic(
                    DiagnosticCode.NOT_A_TASK_LINE,
                    "Line does not start with '-' and is ignored",
                    _whole_line(parsed),
                )
            )
        case _:
            record.diagnostics = list(parsed.diagnostics)
    return state, record


class DayPlanAnalyzer:
    """Analyzes documents against a fixed seed context.

    Holds no per-run state, so one instance can serve any number of
    analyses.
    """

    def __init__(self, options: AnalyzeOptions | None = None):
        self.seed = seed_context(options)

    def parse(self, source: str) -> list[ParsedLine]:
        return [recognize(tokenized) for tokenized in tokenize(source)]

    def analyze(self, source: str) -> Program:
        parsed_lines = self.parse(source)
        context = prescan_directives(parsed_lines, self.seed)

        state = FoldState(context=self.seed)
        records: list[LineRecord] = []
        for index, parsed in enumerate(parsed_lines):
            state, record = step(state, parsed, index)
            records.append(record)

        logger.debug(
            f"Analyzed {len(records)} lines, {len(state.scheduled)} tasks scheduled, "
            f"{sum(1 for r in records if r.status == LineStatus.INVALID)} invalid"
        )
        return Program(context=context, lines=records)


def analyze(source: str, options: AnalyzeOptions | None = None) -> Program:
    """Analyze a day plan. Never raises for malformed input."""
    return DayPlanAnalyzer(options).analyze(source)
