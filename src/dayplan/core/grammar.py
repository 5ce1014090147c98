"""Grammar recognizer - checks a token stream against the legal line shapes.

Purely syntactic: it never resolves a time, a duration or a directive
value. The legal shapes are:

    marker-led line   "-" (directive | task parts) [comment]
    bare directive    "!scratchpad" / "!planner"   [comment]
    comment line      "# ..." / "// ..."
    blank line

Anything else is a free TEXT line; whether that matters depends on the
section the analyzer is in.
"""

import re
from dataclasses import dataclass, field
from enum import Enum

from .diagnostics import Diagnostic, DiagnosticCode
from .tokens import Token, TokenizedLine, TokenType

SECTION_DIRECTIVES = ("scratchpad", "planner")

_TIME_TOKENS = (TokenType.TIME_CLOCK, TokenType.TIME_WORD)
_CATEGORY_TOKENS = (TokenType.CATEGORY_COLON, TokenType.CATEGORY_DOUBLE)
_BAD_DURATION_RE = re.compile(r"^\d+[A-Za-z]$")


class LineShape(Enum):
    BLANK = "blank"
    COMMENT = "comment"
    DIRECTIVE = "directive"
    TASK = "task"
    TEXT = "text"


class PartKind(Enum):
    """What a task part is, in classification precedence order."""

    TIME = "time"
    DURATION = "duration"
    CATEGORY = "category"
    BAD_DURATION = "bad_duration"
    NUMERIC_FRAGMENT = "numeric_fragment"
    TITLE = "title"


@dataclass(frozen=True)
class Part:
    """A run of adjacent tokens with no whitespace or comma between them."""

    tokens: tuple[Token, ...]

    @property
    def text(self) -> str:
        return "".join(t.text for t in self.tokens)

    @property
    def start(self) -> int:
        return self.tokens[0].start

    @property
    def end(self) -> int:
        return self.tokens[-1].end


@dataclass
class DirectiveParts:
    name: str
    args: dict[str, str] = field(default_factory=dict)
    bare: bool = False

    @property
    def is_section(self) -> bool:
        return self.name in SECTION_DIRECTIVES


@dataclass
class ParsedLine:
    """A recognized line: its shape, syntactic diagnostics and raw parts."""

    tokenized: TokenizedLine
    shape: LineShape
    diagnostics: list[Diagnostic] = field(default_factory=list)
    parts: list[Part] = field(default_factory=list)
    directive: DirectiveParts | None = None
    comment: Token | None = None

    @property
    def line_no(self) -> int:
        return self.tokenized.line_no

    @property
    def raw(self) -> str:
        return self.tokenized.raw


def classify_part(part: Part) -> PartKind:
    """Classify a task part by explicit precedence.

    TITLE is the exhaustive fallback, so a new recognizable kind has to
    be added to this list rather than silently swallowing title text.
    """
    tokens = part.tokens
    if len(tokens) == 1 and tokens[0].type in _TIME_TOKENS:
        return PartKind.TIME
    if len(tokens) == 1 and tokens[0].type == TokenType.DURATION:
        return PartKind.DURATION
    if tokens[0].type in _CATEGORY_TOKENS:
        return PartKind.CATEGORY
    text = part.text
    if _BAD_DURATION_RE.match(text):
        return PartKind.BAD_DURATION
    if text[0].isdigit():
        return PartKind.NUMERIC_FRAGMENT
    return PartKind.TITLE


def group_parts(tokens: list[Token]) -> list[Part]:
    """Group tokens into parts, splitting on whitespace gaps and commas."""
    parts: list[Part] = []
    current: list[Token] = []
    for token in tokens:
        if token.type == TokenType.COMMA:
            if current:
                parts.append(Part(tuple(current)))
            current = []
            continue
        if current and token.start != current[-1].end:
            parts.append(Part(tuple(current)))
            current = []
        current.append(token)
    if current:
        parts.append(Part(tuple(current)))
    return parts


def _split_comment(tokens: list[Token]) -> tuple[list[Token], Token | None]:
    for index, token in enumerate(tokens):
        if token.type == TokenType.COMMENT:
            return tokens[:index], token
    return tokens, None


def _parse_directive(
    tokenized: TokenizedLine, tokens: list[Token], bare: bool
) -> tuple[DirectiveParts, list[Diagnostic]]:
    diagnostics: list[Diagnostic] = []
    parts = group_parts(tokens)
    name = parts[0].text[1:] if parts else ""
    directive = DirectiveParts(name=name, bare=bare)

    positional: list[Part] = []
    for part in parts[1:]:
        equals = [t for t in part.tokens if t.type == TokenType.EQUALS]
        if not equals:
            positional.append(part)
            continue
        key, _, value = part.text.partition("=")
        if len(equals) > 1 or not key or not value:
            diagnostics.append(
                Diagnostic(
                    code=DiagnosticCode.MALFORMED_ARGUMENT,
                    message=f"Malformed argument '{part.text}', expected key=value",
                    span=tokenized.original_span(part.start, part.end),
                )
            )
            continue
        directive.args[key] = value

    if len(positional) == 1 and not directive.args:
        directive.args[name] = positional[0].text
    elif positional:
        for part in positional:
            diagnostics.append(
                Diagnostic(
                    code=DiagnosticCode.MALFORMED_ARGUMENT,
                    message=f"Unexpected argument '{part.text}', expected key=value",
                    span=tokenized.original_span(part.start, part.end),
                )
            )

    if bare and not directive.is_section:
        diagnostics.append(
            Diagnostic(
                code=DiagnosticCode.BARE_DIRECTIVE,
                message=f"Directive '!{name}' needs a leading dash; only !scratchpad and !planner may stand alone",
                span=tokenized.original_span(tokens[0].start, parts[0].end if parts else tokens[0].end),
            )
        )
    return directive, diagnostics


def _trailing_comma(tokenized: TokenizedLine, tokens: list[Token]) -> list[Diagnostic]:
    if not tokens or tokens[-1].type != TokenType.COMMA:
        return []
    comma = tokens[-1]
    return [
        Diagnostic(
            code=DiagnosticCode.TRAILING_COMMA,
            message="Trailing comma found",
            span=tokenized.original_span(comma.start, comma.end),
        )
    ]


def recognize(tokenized: TokenizedLine) -> ParsedLine:
    """Match a tokenized line against the closed set of line shapes."""
    tokens, comment = _split_comment(
        [t for t in tokenized.tokens if t.type != TokenType.EOL]
    )
    parsed = ParsedLine(
        tokenized=tokenized,
        shape=LineShape.TEXT,
        diagnostics=list(tokenized.diagnostics),
        comment=comment,
    )

    if not tokens:
        parsed.shape = LineShape.COMMENT if comment else LineShape.BLANK
        return parsed

    first = tokens[0]
    if first.type == TokenType.MARKER:
        body = tokens[1:]
        if body and body[0].type == TokenType.BANG:
            parsed.shape = LineShape.DIRECTIVE
            parsed.directive, diagnostics = _parse_directive(tokenized, body, bare=False)
            parsed.diagnostics.extend(diagnostics)
        else:
            parsed.shape = LineShape.TASK
            parsed.parts = group_parts(body)
            parsed.diagnostics.extend(_trailing_comma(tokenized, body))
    elif first.type == TokenType.BANG:
        parsed.shape = LineShape.DIRECTIVE
        parsed.directive, diagnostics = _parse_directive(tokenized, tokens, bare=True)
        parsed.diagnostics.extend(diagnostics)
    else:
        parsed.parts = group_parts(tokens)

    return parsed
