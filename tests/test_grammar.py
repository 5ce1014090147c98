"""Tests for the grammar recognizer."""

import pytest

from dayplan.core.diagnostics import DiagnosticCode, Span
from dayplan.core.grammar import LineShape, PartKind, classify_part, recognize
from dayplan.core.tokens import tokenize_line


def parse(line: str, line_no: int = 1):
    return recognize(tokenize_line(line, line_no))


def codes(parsed) -> list[DiagnosticCode]:
    return [d.code for d in parsed.diagnostics]


class TestLineShapes:
    @pytest.mark.parametrize(
        "line,shape",
        [
            ("", LineShape.BLANK),
            ("   ", LineShape.BLANK),
            ("# header", LineShape.COMMENT),
            ("// note", LineShape.COMMENT),
            ("- 9am Task", LineShape.TASK),
            ("- Task # note", LineShape.TASK),
            ("- !day 2025-01-15", LineShape.DIRECTIVE),
            ("!scratchpad", LineShape.DIRECTIVE),
            ("Plan for today", LineShape.TEXT),
        ],
    )
    def test_shape(self, line, shape):
        assert parse(line).shape == shape

    def test_comment_is_split_off_a_task(self):
        parsed = parse("- 9am Task # why")
        assert parsed.comment.text == "# why"
        assert [p.text for p in parsed.parts] == ["9am", "Task"]


class TestParts:
    def test_grouping_on_whitespace_and_commas(self):
        parsed = parse("- 9am, Call Bob's mom,30m :home::family")
        assert [p.text for p in parsed.parts] == ["9am", "Call", "Bob's", "mom", "30m", ":home::family"]

    @pytest.mark.parametrize(
        "text,kind",
        [
            ("9am", PartKind.TIME),
            ("noon", PartKind.TIME),
            ("25:00", PartKind.TIME),
            ("45m", PartKind.DURATION),
            ("1h30m", PartKind.DURATION),
            (":work", PartKind.CATEGORY),
            (":a::", PartKind.CATEGORY),
            ("30x", PartKind.BAD_DURATION),
            ("5x", PartKind.BAD_DURATION),
            ("45min", PartKind.NUMERIC_FRAGMENT),
            ("2hrs", PartKind.NUMERIC_FRAGMENT),
            ("1h30", PartKind.NUMERIC_FRAGMENT),
            ("2nd", PartKind.NUMERIC_FRAGMENT),
            ("9:00:00", PartKind.NUMERIC_FRAGMENT),
            ("Lunch", PartKind.TITLE),
        ],
    )
    def test_classify(self, text, kind):
        parsed = parse(f"- {text}")
        assert len(parsed.parts) == 1
        assert classify_part(parsed.parts[0]) == kind


class TestDirectives:
    def test_keyed_argument(self):
        directive = parse("- !default duration=25m").directive
        assert directive.name == "default"
        assert directive.args == {"duration": "25m"}
        assert not directive.bare

    def test_single_positional_value_is_stored_under_the_name(self):
        directive = parse("- !tz America/Toronto").directive
        assert directive.args == {"tz": "America/Toronto"}

    def test_bare_section_directive(self):
        parsed = parse("!planner")
        assert parsed.directive.name == "planner"
        assert parsed.directive.bare
        assert parsed.diagnostics == []

    def test_bare_non_section_directive_is_an_error(self):
        parsed = parse("!default duration=25m")
        assert codes(parsed) == [DiagnosticCode.BARE_DIRECTIVE]

    @pytest.mark.parametrize("line", ["- !policy overlaps=", "- !policy =error", "- !day one two"])
    def test_malformed_arguments(self, line):
        assert DiagnosticCode.MALFORMED_ARGUMENT in codes(parse(line))

    def test_missing_name(self):
        directive = parse("- !").directive
        assert directive.name == ""


class TestSyntacticDiagnostics:
    def test_trailing_comma(self):
        parsed = parse("- 9am, Email, 30m,")
        assert codes(parsed) == [DiagnosticCode.TRAILING_COMMA]
        assert parsed.diagnostics[0].span == Span(1, 17, 18)

    def test_trailing_comma_before_comment(self):
        assert codes(parse("- 9am, Email, # note")) == [DiagnosticCode.TRAILING_COMMA]

    def test_tokenizer_diagnostics_are_carried(self):
        parsed = parse("-9am Task", line_no=3)
        assert codes(parsed) == [DiagnosticCode.MISSING_SPACE_AFTER_DASH]
        assert parsed.line_no == 3
        assert parsed.raw == "-9am Task"
