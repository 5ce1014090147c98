"""dayplan CLI - check and edit day plans."""

import json
import logging
import sys

import click

from .adapters.file_document import FileDocumentStore
from .config import load_config
from .core.analyzer import analyze
from .core.diagnostics import LineStatus
from .core.model import Program, TaskNode
from .core.tokens import tokenize
from .document import shift_stored

_STATUS_LABELS = {
    LineStatus.VALID: "ok",
    LineStatus.VALID_WITH_WARNINGS: "warn",
    LineStatus.INVALID: "FAIL",
}


@click.group()
@click.version_option()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """dayplan - line-oriented day planning."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )


def _read(path: str) -> str:
    try:
        return FileDocumentStore().read(path)
    except (OSError, UnicodeDecodeError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _analyze(source: str, day: str | None, tz: str | None) -> Program:
    config = load_config()
    try:
        return analyze(source, config.to_options(day=day, timezone=tz))
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _show_program(program: Program) -> None:
    """Shared plan display logic."""
    ctx = program.context
    click.echo(f"### {ctx.day.strftime('%A, %B %d')} ({ctx.timezone})")

    for line in program.lines:
        if not line.raw.strip() and not line.diagnostics:
            continue
        label = _STATUS_LABELS[line.status]
        node = line.node
        if isinstance(node, TaskNode):
            cats = " ".join(c.format() for c in node.categories)
            inferred = "" if node.explicit_start else " (inferred)"
            click.echo(f"{line.line_no:4} [{label:4}] {node.format_time()}{inferred} {node.title} {cats}".rstrip())
        else:
            click.echo(f"{line.line_no:4} [{label:4}] {line.raw.strip()}")
        for diag in line.diagnostics:
            click.echo(f"{'':12}{diag.code.value}: {diag.message}")


@main.command()
@click.argument("path", type=click.Path(dir_okay=False))
@click.option("--day", help="Day to plan (YYYY-MM-DD), defaults to today")
@click.option("--tz", help="IANA timezone, defaults to the configured one")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def check(path: str, day: str | None, tz: str | None, as_json: bool):
    """Analyze a plan and report every line."""
    program = _analyze(_read(path), day, tz)

    if as_json:
        click.echo(json.dumps(program.to_dict(), indent=2))
    else:
        _show_program(program)

    if any(line.status == LineStatus.INVALID for line in program.lines):
        sys.exit(1)


@main.command()
@click.argument("path", type=click.Path(dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def tokens(path: str, as_json: bool):
    """Dump the token stream of a plan for debugging."""
    lines = tokenize(_read(path))

    if as_json:
        click.echo(
            json.dumps(
                [
                    {
                        "line_no": line.line_no,
                        "corrected": line.line.was_corrected,
                        "tokens": [
                            {"type": t.type.value, "text": t.text, "start": t.start, "end": t.end}
                            for t in line.tokens
                        ],
                        "diagnostics": [d.to_dict() for d in line.diagnostics],
                    }
                    for line in lines
                ],
                indent=2,
            )
        )
        return

    for line in lines:
        rendered = " ".join(f"{t.type.value}({t.text!r})" for t in line.tokens)
        click.echo(f"{line.line_no:4} {rendered}")
        for diag in line.diagnostics:
            click.echo(f"{'':5}{diag.code.value}: {diag.message}")


@main.command()
@click.argument("path", type=click.Path(dir_okay=False))
@click.option("--by", "offset", required=True, help="Signed offset, e.g. +15m, -1h30m")
@click.option("-l", "--line", "line_numbers", type=int, multiple=True, required=True, help="Line to shift (repeatable)")
@click.option("--day", help="Day to plan (YYYY-MM-DD), defaults to today")
@click.option("--tz", help="IANA timezone, defaults to the configured one")
@click.option("--write", is_flag=True, help="Write the result back to the file")
def shift(path: str, offset: str, line_numbers: tuple[int, ...], day: str | None, tz: str | None, write: bool):
    """Shift the start time of one or more task lines."""
    config = load_config()
    try:
        batch = shift_stored(
            FileDocumentStore(),
            path,
            list(line_numbers),
            offset,
            config.to_options(day=day, timezone=tz),
            write=write,
        )
    except (OSError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    for line_no, error in batch.failures.items():
        click.echo(f"Line {line_no}: {error}", err=True)
    for line_no, affected in batch.affected.items():
        if affected:
            listed = ", ".join(str(n) for n in affected)
            click.echo(f"Line {line_no}: lines {listed} inherit their start and need re-checking", err=True)

    if write:
        if len(batch.failures) < len(batch.results):
            click.echo(f"Updated {path}")
    else:
        click.echo(batch.new_source, nl=False)

    if not batch.success:
        sys.exit(1)
