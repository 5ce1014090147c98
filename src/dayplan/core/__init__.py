"""Functional core - pure language pipeline with no I/O."""

from .tokens import Token, TokenType, TokenizedLine, tokenize, tokenize_line
from .grammar import LineShape, ParsedLine, PartKind, classify_part, recognize
from .diagnostics import Diagnostic, DiagnosticCode, LineStatus, Span
from .model import (
    AnalysisContext,
    CategoryPath,
    DirectiveNode,
    LineRecord,
    OverlapPolicy,
    Program,
    SectionMode,
    TaskNode,
)
from .analyzer import AnalyzeOptions, DayPlanAnalyzer, analyze
from .timeshift import OffsetError, ShiftResult, parse_offset, shift_line

__all__ = [
    # Tokenizer
    "Token",
    "TokenType",
    "TokenizedLine",
    "tokenize",
    "tokenize_line",
    # Grammar
    "LineShape",
    "ParsedLine",
    "PartKind",
    "classify_part",
    "recognize",
    # Diagnostics
    "Diagnostic",
    "DiagnosticCode",
    "LineStatus",
    "Span",
    # Model
    "AnalysisContext",
    "CategoryPath",
    "DirectiveNode",
    "LineRecord",
    "OverlapPolicy",
    "Program",
    "SectionMode",
    "TaskNode",
    # Analyzer
    "AnalyzeOptions",
    "DayPlanAnalyzer",
    "analyze",
    # Time shift
    "OffsetError",
    "ShiftResult",
    "parse_offset",
    "shift_line",
]
