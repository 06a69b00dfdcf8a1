"""Command-line interface for mathextract."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from mathextract import __version__


@click.group()
@click.version_option(version=__version__, prog_name="mathextract")
def main() -> None:
    """mathextract -- find and evaluate arithmetic expressions in text."""


# ---------------------------------------------------------------------------
# helpers
# ---------------------------------------------------------------------------


def _load_config(config_path: str | None) -> dict:
    from mathextract.config import ConfigError, load_config

    try:
        return load_config(Path(config_path) if config_path else None)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc


def _format_record(record) -> str:
    prefix = f"[{record.span.start}:{record.span.end}] {record.source}"
    if record.ok:
        return f"{prefix} = {record.value!r}"
    err = record.error
    return f"{prefix} -> {err.code}: {err}"


# ---------------------------------------------------------------------------
# Extract
# ---------------------------------------------------------------------------


@main.command()
@click.argument("source", required=False, default="-", type=click.File("r"))
@click.option("--json", "as_json", is_flag=True, help="Output records as JSON.")
@click.option("--workers", type=int, default=None, help="Evaluate spans on N threads.")
@click.option("--config", "config_path", default=None, type=click.Path(exists=True), help="Config file or directory.")
@click.option("--log-dir", "log_dir", default=None, type=click.Path(), help="Write NDJSON events here.")
def extract(source, as_json: bool, workers: int | None, config_path: str | None, log_dir: str | None) -> None:
    """Find and evaluate every expression in SOURCE (default: stdin)."""
    from mathextract.extract import extract_and_evaluate
    from mathextract.logging import configure_logging

    cfg = _load_config(config_path)
    configure_logging(
        log_dir or cfg["logging_dir"],
        fsync=cfg["logging_fsync"],
        tail_bytes=cfg["logging_tail_bytes"],
    )

    records = extract_and_evaluate(
        source.read(),
        max_workers=workers if workers is not None else cfg["max_workers"],
    )

    if as_json:
        click.echo(json.dumps([r.to_dict() for r in records], indent=2))
        return
    if not records:
        click.echo("No expressions found.")
        return
    for record in records:
        click.echo(_format_record(record))


# ---------------------------------------------------------------------------
# Eval
# ---------------------------------------------------------------------------


@main.command("eval")
@click.argument("expression")
@click.option("--tree", is_flag=True, help="Print the parenthesised parse tree.")
def eval_cmd(expression: str, tree: bool) -> None:
    """Parse and evaluate a single EXPRESSION."""
    from mathextract.expressions import (
        MathExtractError,
        evaluate,
        parse_expression,
        to_source,
    )

    try:
        parsed = parse_expression(expression)
        if tree:
            click.echo(to_source(parsed.root))
        click.echo(repr(evaluate(parsed.root)))
    except MathExtractError as exc:
        click.echo(f"Error ({exc.code}): {exc}", err=True)
        sys.exit(1)


# ---------------------------------------------------------------------------
# Functions
# ---------------------------------------------------------------------------


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
def functions(as_json: bool) -> None:
    """List supported functions."""
    from mathextract.expressions import supported_functions

    specs = supported_functions()
    if as_json:
        click.echo(json.dumps(
            [{"name": s.name, "arity": s.arity, "summary": s.summary} for s in specs],
            indent=2,
        ))
        return
    for s in specs:
        params = ", ".join(["x"] if s.arity == 1 else ["a", "b"][: s.arity])
        click.echo(f"  {s.name}({params}){'':<4}{s.summary}")


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@main.command()
@click.argument("log_dir", type=click.Path(exists=True))
@click.option("--level", default=None, type=click.Choice(["info", "warning", "error"]))
@click.option("--extraction", "extraction_id", default=None, help="Only events of one extraction.")
@click.option("--limit", default=50, show_default=True, help="Maximum events to show.")
def events(log_dir: str, level: str | None, extraction_id: str | None, limit: int) -> None:
    """Show recent events from LOG_DIR, newest first."""
    from mathextract.logging import EventSink

    sink = EventSink(Path(log_dir))
    if extraction_id:
        found = sink.read_extraction_log(extraction_id)[::-1]
        if level:
            found = [e for e in found if e.get("level") == level]
        found = found[:limit]
    else:
        found = sink.read_global(level=level, limit=limit)
    for evt in found:
        click.echo(f"{evt.get('ts')} {str(evt.get('level')):<7} {evt.get('event_type')}: {evt.get('message')}")
