"""Document layer between the core and the CLI.

Analyzes a whole document once, shifts one or several lines against that
snapshot and merges the edited lines back by line number.
"""

import logging
import re
from dataclasses import dataclass, field

from .core.analyzer import AnalyzeOptions, analyze
from .core.model import Program
from .core.timeshift import ShiftResult, shift_line
from .ports.document_store import DocumentStore

logger = logging.getLogger(__name__)

_NEWLINE_SPLIT_RE = re.compile(r"(\r?\n)")


@dataclass
class DocumentShift:
    """Outcome of shifting one line of a document."""

    success: bool
    new_source: str | None = None
    error: str | None = None
    affected_line_numbers: list[int] = field(default_factory=list)


@dataclass
class BatchShift:
    """Outcome of shifting several lines of a document."""

    new_source: str
    results: dict[int, ShiftResult]
    affected: dict[int, list[int]] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return all(r.success for r in self.results.values())

    @property
    def failures(self) -> dict[int, str]:
        return {n: r.error or "" for n, r in self.results.items() if not r.success}


def split_keep_newlines(text: str) -> list[str]:
    """Split into alternating line contents and their own line endings."""
    return _NEWLINE_SPLIT_RE.split(text)


def affected_line_numbers(program: Program, result: ShiftResult) -> list[int]:
    """Translate a shift result's affected line ids into line numbers."""
    by_id = {line.id: line.line_no for line in program.lines}
    return [by_id[line_id] for line_id in result.affected_line_ids if line_id in by_id]


def shift_lines(program: Program, line_numbers: list[int], offset: str) -> dict[int, ShiftResult]:
    """Shift each line independently against the same analyzed snapshot.

    One line failing does not stop the others.
    """
    results: dict[int, ShiftResult] = {}
    for line_no in line_numbers:
        line = program.line(line_no)
        if line is None:
            results[line_no] = ShiftResult(success=False, error=f"Line {line_no} not found")
            continue
        results[line_no] = shift_line(line, offset, program.lines)
    return results


def apply_shifts(source: str, results: dict[int, ShiftResult]) -> str:
    """Merge successful shifts into the source; failed lines stay as they were.

    Only line contents are replaced, every line ending is kept as written.
    """
    pieces = split_keep_newlines(source)
    for line_no, result in sorted(results.items()):
        index = 2 * (line_no - 1)
        if result.success and result.new_line_text is not None and 0 <= index < len(pieces):
            pieces[index] = result.new_line_text
    return "".join(pieces)


def shift_document(
    source: str,
    line_no: int,
    offset: str,
    options: AnalyzeOptions | None = None,
) -> DocumentShift:
    """Shift a single line of a document and return the new document."""
    program = analyze(source, options)
    result = shift_lines(program, [line_no], offset)[line_no]
    if not result.success:
        return DocumentShift(success=False, error=result.error)
    return DocumentShift(
        success=True,
        new_source=apply_shifts(source, {line_no: result}),
        affected_line_numbers=affected_line_numbers(program, result),
    )


def shift_many(
    source: str,
    line_numbers: list[int],
    offset: str,
    options: AnalyzeOptions | None = None,
) -> BatchShift:
    """Shift several lines by the same offset; no cross-line atomicity."""
    program = analyze(source, options)
    results = shift_lines(program, line_numbers, offset)
    failed = [n for n, r in results.items() if not r.success]
    if failed:
        logger.info(f"Shift {offset} failed on lines {failed}")
    return BatchShift(
        new_source=apply_shifts(source, results),
        results=results,
        affected={n: affected_line_numbers(program, r) for n, r in results.items() if r.success},
    )


def shift_stored(
    store: DocumentStore,
    path: str,
    line_numbers: list[int],
    offset: str,
    options: AnalyzeOptions | None = None,
    write: bool = False,
) -> BatchShift:
    """Shift lines of a stored document, optionally saving the result.

    Nothing is written when every line failed.
    """
    batch = shift_many(store.read(path), line_numbers, offset, options)
    if write and any(r.success for r in batch.results.values()):
        store.write(path, batch.new_source)
    return batch
