"""CLI entrypoints for snapfold."""

from __future__ import annotations

import sys
from pathlib import Path

import typer
from pydantic import ValidationError

from snapfold.config import Settings, load_settings
from snapfold.core.outline import OutlineGenerator
from snapfold.core.tree import build_page_structure
from snapfold.logging import configure_logging, get_logger
from snapfold.models.outline import OutlineOptions
from snapfold.models.search import SearchOptions
from snapfold.recording.snapshot_store import SnapshotStore
from snapfold.tools.diff import diff_since
from snapfold.tools.report import format_snapshot_report
from snapfold.tools.search import format_search_response, search_snapshot

app = typer.Typer(add_completion=False, help="Fold accessibility snapshots into compact outlines")
logger = get_logger(__name__)


def _setup() -> Settings:
    settings = load_settings()
    configure_logging(settings.log_level)
    return settings


def _read_snapshot(path: Path) -> str:
    if str(path) == "-":
        return sys.stdin.read()
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise typer.BadParameter(f"Cannot read snapshot file {path}: {e}") from e


def _build_options(settings: Settings, **overrides: object) -> OutlineOptions:
    values = settings.outline_options().model_dump()
    values.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return OutlineOptions(**values)
    except ValidationError as e:
        raise typer.BadParameter(str(e)) from e


@app.command()
def compress(
    snapshot_file: Path = typer.Argument(..., help="Snapshot text file, or '-' to read stdin"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write the outline to a file"),
    max_lines: int | None = typer.Option(None, "--max-lines", help="Hard cap on emitted lines"),
    mode: str | None = typer.Option(None, "--mode", help="smart (fold runs) or simple"),
    preserve_structure: bool | None = typer.Option(
        None,
        "--preserve-structure/--no-preserve-structure",
        help="Keep original indentation verbatim",
    ),
    fold_threshold: int | None = typer.Option(None, "--fold-threshold", help="Max fingerprint bit distance"),
    url: str | None = typer.Option(None, "--url", help="Page URL for the report header"),
    title: str | None = typer.Option(None, "--title", help="Page title for the report header"),
    record: bool = typer.Option(True, "--record/--no-record", help="Record the raw snapshot for search/diff"),
) -> None:
    """Compress a snapshot into a token-efficient outline."""

    settings = _setup()
    raw = _read_snapshot(snapshot_file)
    options = _build_options(
        settings,
        max_lines=max_lines,
        mode=mode,
        preserve_structure=preserve_structure,
        fold_threshold=fold_threshold,
    )

    if record:
        SnapshotStore(settings.history_dir).append(raw, source=str(snapshot_file))

    result = OutlineGenerator(options).compress(raw)
    text = result.text
    if url is not None or title is not None:
        text = format_snapshot_report(text, url=url, title=title)

    logger.info(
        "Outline ratio %.2f (%d -> %d lines)",
        result.compression_ratio,
        result.original_lines,
        result.output_lines,
    )
    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text + "\n", encoding="utf-8")
        typer.echo(str(output))
    else:
        typer.echo(text)


@app.command()
def search(
    pattern: str = typer.Argument(..., help="Regex pattern"),
    snapshot_file: Path | None = typer.Argument(
        None,
        help="Snapshot to search. If omitted, the last recorded snapshot is used.",
        show_default=False,
    ),
    ignore_case: bool = typer.Option(False, "--ignore-case", "-i", help="Case-insensitive matching"),
    line_limit: int | None = typer.Option(None, "--line-limit", help="Maximum lines to return (1-100)"),
) -> None:
    """Search a snapshot with a regular expression."""

    settings = _setup()
    if snapshot_file is not None:
        snapshot = _read_snapshot(snapshot_file)
    else:
        last = SnapshotStore(settings.history_dir).last()
        if last is None:
            typer.echo("No snapshot available. Run the compress command first to record one.")
            raise typer.Exit(code=1)
        snapshot = last.text

    limit = line_limit if line_limit is not None else settings.search_line_limit
    response = search_snapshot(
        snapshot, SearchOptions(pattern=pattern, ignore_case=ignore_case, line_limit=limit)
    )
    typer.echo(format_search_response(pattern, response, limit))
    if response.error:
        raise typer.Exit(code=2)


@app.command()
def diff(
    snapshot_file: Path = typer.Argument(..., help="New snapshot, or '-' to read stdin"),
    record: bool = typer.Option(True, "--record/--no-record", help="Record this snapshot afterwards"),
) -> None:
    """Show what changed since the last recorded snapshot."""

    settings = _setup()
    raw = _read_snapshot(snapshot_file)
    store = SnapshotStore(settings.history_dir)
    previous = store.last()

    if record:
        current = store.append(raw, source=str(snapshot_file))
    else:
        current = store.preview(raw, source=str(snapshot_file))

    result = diff_since(previous, current)
    if result.message:
        typer.echo(result.message)
    if result.diff:
        typer.echo(result.diff)
    if result.added_refs:
        typer.echo(f"Added refs: {', '.join(result.added_refs)}")
    if result.removed_refs:
        typer.echo(f"Removed refs: {', '.join(result.removed_refs)}")


@app.command()
def refs(
    snapshot_file: Path = typer.Argument(..., help="Snapshot text file, or '-' to read stdin"),
) -> None:
    """List every ref in a snapshot with its line number."""

    _setup()
    structure = build_page_structure(_read_snapshot(snapshot_file))
    for ref, node in structure.nodes_by_ref.items():
        typer.echo(f"{ref}\t{node.line_number}\t{node.type}")
    logger.info("%d refs in %d lines", len(structure.nodes_by_ref), structure.total_lines)


if __name__ == "__main__":
    app()
