"""Line tokenizer for the day-planning language.

One line in, typed tokens with exact offsets out. The only formatting
defect tolerated is a marker glued to its content (``-Task``): the line
is corrected by a virtual space, every later stage works on the
corrected text, and offsets are mapped back to the original whenever a
span has to point into the user's text.
"""

import re
from dataclasses import dataclass, field
from enum import Enum

from .diagnostics import Diagnostic, DiagnosticCode, Span

LINE_SPLIT_RE = re.compile(r"\r?\n")


class TokenType(Enum):
    """Token vocabulary of the language."""

    MARKER = "marker"
    BANG = "bang"
    COMMA = "comma"
    EQUALS = "equals"
    CATEGORY_DOUBLE = "category_double"
    CATEGORY_COLON = "category_colon"
    COMMENT = "comment"
    DURATION = "duration"
    TIME_CLOCK = "time_clock"
    TIME_WORD = "time_word"
    WORD = "word"
    TEXT = "text"
    EOL = "eol"


# Literals must end on a word boundary: "30min" is a word, not "30m" + "in".
_BOUNDARY = r"(?![A-Za-z0-9_])"

# Tried in order at every position; first match wins.
# Durations come before clock times so "30m" is never read as a time.
TOKEN_PRECEDENCE: list[tuple[TokenType, str]] = [
    (TokenType.EOL, r"\r?\n"),
    (TokenType.COMMENT, r"(?:#|//)[^\r\n]*"),
    (TokenType.BANG, r"!"),
    (TokenType.COMMA, r","),
    (TokenType.EQUALS, r"="),
    (TokenType.CATEGORY_DOUBLE, r"::"),
    (TokenType.CATEGORY_COLON, r":"),
    (TokenType.TIME_WORD, rf"(?i:noon|midnight){_BOUNDARY}"),
    (TokenType.DURATION, rf"(?:\d+h(?:\d{{1,2}}m)?|\d+m){_BOUNDARY}"),
    (TokenType.TIME_CLOCK, rf"(?i:\d{{1,2}}(?::\d{{2}})?(?:am|pm)?){_BOUNDARY}"),
    (TokenType.WORD, r"[A-Za-z0-9_-]+"),
    (TokenType.TEXT, r"[^\s,:#=!\x00-\x1f\x7f]+"),
]

_COMPILED = [(token_type, re.compile(pattern)) for token_type, pattern in TOKEN_PRECEDENCE]
_SPACE_RE = re.compile(r"[^\S\r\n]+")
_MARKER_RE = re.compile(r"[^\S\r\n]*-")


@dataclass(frozen=True)
class Token:
    """A typed slice of a (corrected) line."""

    type: TokenType
    text: str
    start: int
    end: int
    line_no: int


@dataclass(frozen=True)
class CorrectedLine:
    """Canonical text of a line plus the mapping back to the original."""

    original: str
    text: str
    inserted_at: int | None = None

    @property
    def was_corrected(self) -> bool:
        return self.inserted_at is not None

    def to_original(self, offset: int) -> int:
        """Map an offset in the corrected text onto the original text."""
        if self.inserted_at is None or offset <= self.inserted_at:
            return offset
        return offset - 1


@dataclass
class TokenizedLine:
    """Tokens and line-local diagnostics for one line."""

    line_no: int
    line: CorrectedLine
    tokens: list[Token] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def raw(self) -> str:
        return self.line.original

    @property
    def text(self) -> str:
        return self.line.text

    def original_span(self, start: int, end: int) -> Span:
        """Span on the original line for a corrected [start, end) range."""
        return Span(self.line_no, self.line.to_original(start), self.line.to_original(end))


def preprocess_line(line: str, line_no: int) -> tuple[CorrectedLine, list[Diagnostic]]:
    """Detect a marker with no following whitespace and correct it.

    Returns the corrected line and at most one W001 diagnostic whose span
    is the offending column in the original text.
    """
    match = _MARKER_RE.match(line)
    if not match:
        return CorrectedLine(original=line, text=line), []

    marker_end = match.end()
    if marker_end >= len(line) or line[marker_end].isspace():
        return CorrectedLine(original=line, text=line), []

    corrected = CorrectedLine(
        original=line,
        text=line[:marker_end] + " " + line[marker_end:],
        inserted_at=marker_end,
    )
    diagnostic = Diagnostic(
        code=DiagnosticCode.MISSING_SPACE_AFTER_DASH,
        message="Missing space after dash",
        span=Span(line_no, marker_end, marker_end + 1),
    )
    return corrected, [diagnostic]


def tokenize_line(line: str, line_no: int = 1) -> TokenizedLine:
    """Tokenize one line.

    Unrecognized characters become E080 diagnostics and scanning carries
    on past them; a line never fails as a whole.
    """
    corrected, diagnostics = preprocess_line(line, line_no)
    result = TokenizedLine(line_no=line_no, line=corrected, diagnostics=diagnostics)
    text = corrected.text
    pos = 0

    marker = _MARKER_RE.match(text)
    if marker:
        result.tokens.append(Token(TokenType.MARKER, "-", marker.end() - 1, marker.end(), line_no))
        pos = marker.end()

    while pos < len(text):
        space = _SPACE_RE.match(text, pos)
        if space:
            pos = space.end()
            continue

        for token_type, pattern in _COMPILED:
            match = pattern.match(text, pos)
            if match and match.end() > pos:
                result.tokens.append(Token(token_type, match.group(), pos, match.end(), line_no))
                pos = match.end()
                break
        else:
            result.diagnostics.append(
                Diagnostic(
                    code=DiagnosticCode.UNEXPECTED_CHARACTER,
                    message=f"Unexpected character {text[pos]!r}",
                    span=result.original_span(pos, pos + 1),
                )
            )
            pos += 1

    return result


def split_lines(text: str) -> list[str]:
    """Split source text into lines on LF or CRLF."""
    return LINE_SPLIT_RE.split(text)


def tokenize(text: str) -> list[TokenizedLine]:
    """Tokenize every line of a document."""
    return [tokenize_line(line, index + 1) for index, line in enumerate(split_lines(text))]
