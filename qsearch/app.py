"""Typer CLI entrypoint for qsearch."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Mapping, NoReturn, Optional

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from .config import ConfigRepository, DocumentDialect, QSearchConfig
from .engine import QSearchError, Query
from .engine.query import UNSET_MAGNITUDE, UNSET_PHASE_COUNT
from .formatting import (
    ARRIVAL_FIELDS,
    EVENT_FIELDS,
    PICK_FIELDS,
    arrival_rows,
    event_row,
    invalid_fields,
    pick_rows,
    select,
    vocabulary_string,
)
from .logging_conf import component_logger, configure_logging
from .orchestrator import Orchestrator

app = typer.Typer(
    help="Search the GeoNet quake catalog and print selected fields as CSV.",
    no_args_is_help=True,
    rich_markup_mode=None,
)

console = Console(stderr=True)

_EVENT_ID_PATTERN = re.compile(r"[a-z0-9]+")
GAP_URL = "http://info.geonet.org.nz/display/appdata/The+Gap"


@dataclass
class AppState:
    config: QSearchConfig
    orchestrator: Orchestrator


def build_state(verbose: bool, config_path: Path | None = None) -> AppState:
    repository = ConfigRepository()
    config = repository.load(config_path)
    configure_logging(verbose=verbose, log_dir=repository.locator.logs_dir)
    return AppState(config=config, orchestrator=Orchestrator(config))


def _fail(message: str) -> NoReturn:
    console.print(message, style="red")
    raise typer.Exit(code=1)


def _parse_datetime_option(value: str, option_name: str) -> datetime:
    text = value.strip()
    normalized = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        candidate = datetime.fromisoformat(normalized)
    except ValueError:
        _fail(f"{option_name} must be ISO8601 to second precision, e.g. 2014-02-22T04:06:25Z")
    if candidate.tzinfo is None:
        _fail(f"{option_name} needs a zone designator, e.g. 2014-02-22T04:06:25Z")
    return candidate


def _check_output(enabled: bool, selection: str, flag: str, vocabulary: Mapping[str, str]) -> list[str]:
    if not enabled:
        return []
    if not selection:
        _fail(f"--{flag} selected but no --{flag}-format provided.")
    unknown = invalid_fields(selection, vocabulary)
    if unknown:
        _fail("Invalid format key: " + unknown[0])
    return selection.split(",")


def _resolve_query(
    event_id: str,
    start: str,
    end: str,
    min_used_phase_count: int,
    min_magnitude: float,
    bbox: str,
) -> Query:
    if start and end:
        start_dt = _parse_datetime_option(start, "--start")
        end_dt = _parse_datetime_option(end, "--end")
        if start_dt > end_dt:
            _fail("start time is after end time.")
        return Query(
            start=start_dt,
            end=end_dt,
            min_used_phase_count=min_used_phase_count,
            min_magnitude=min_magnitude,
            bbox=bbox,
        )
    if event_id:
        if not _EVENT_ID_PATTERN.fullmatch(event_id):
            _fail("invalid eventid.")
        return Query(event_id=event_id)
    _fail("provide --eventid or both --start and --end.")


def _emit(fields: list[str], rows, header: bool) -> None:
    if header:
        typer.echo(",".join(fields))
    for row in rows:
        typer.echo(select(row, fields))


@app.command("search", help="Search for quakes and print event, pick or arrival information.")
def search(
    eventid: str = typer.Option("", "--eventid", help="A GeoNet public id, e.g. 2012p070732. Replaces --start/--end."),
    start: str = typer.Option("", "--start", help="Search start in ISO8601 to second precision, e.g. 2014-02-22T04:06:25Z."),
    end: str = typer.Option("", "--end", help="Search end in ISO8601 to second precision, e.g. 2014-02-22T05:06:25Z."),
    min_used_phase_count: int = typer.Option(UNSET_PHASE_COUNT, "--min-used-phase-count", help="Minimum used phase count (>=)."),
    min_magnitude: float = typer.Option(UNSET_MAGNITUDE, "--min-magnitude", help="Minimum magnitude (>=)."),
    bbox: str = typer.Option("", "--bbox", help="Upper left and lower right corners, e.g. 174,-41,175,-42."),
    event: bool = typer.Option(False, "--event", help="Output event information. Requires --event-format."),
    event_format: str = typer.Option("", "--event-format", help="Comma separated fields: " + vocabulary_string(EVENT_FIELDS)),
    picks: bool = typer.Option(False, "--picks", help="Output Pick information. Requires --picks-format."),
    picks_format: str = typer.Option("", "--picks-format", help="Comma separated fields: " + vocabulary_string(PICK_FIELDS)),
    arrivals: bool = typer.Option(
        False, "--preferred-origin-arrivals", help="Output Arrivals of the preferred origin. Requires --arrivals-format."
    ),
    arrivals_format: str = typer.Option("", "--arrivals-format", help="Comma separated fields: " + vocabulary_string(ARRIVAL_FIELDS)),
    header: bool = typer.Option(False, "--header", help="Print a header line before each output block."),
    catalog: Optional[DocumentDialect] = typer.Option(
        None, "--catalog", help="Event document dialect to fetch. Defaults to catalog.document_dialect from the config."
    ),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Read configuration from this file."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
) -> None:
    event_fields = _check_output(event, event_format, "event", EVENT_FIELDS)
    pick_fields = _check_output(picks, picks_format, "picks", PICK_FIELDS)
    arrival_fields = _check_output(arrivals, arrivals_format, "arrivals", ARRIVAL_FIELDS)
    query = _resolve_query(eventid, start, end, min_used_phase_count, min_magnitude, bbox)

    state = build_state(verbose, config_path)
    logger = component_logger("cli")
    logger.info("searching_wfs")
    try:
        quakes = state.orchestrator.search(query)
    except QSearchError as exc:
        logger.error("search_failed", error=str(exc))
        _fail(f"Error searching WFS: {exc}")
    logger.info("wfs_results", count=len(quakes))

    documents = {}
    if picks or arrivals:
        dialect = catalog or state.config.catalog.document_dialect
        logger.info("fetching_documents", dialect=dialect.value, from_config=catalog is None, count=len(quakes))
        try:
            documents = state.orchestrator.fetch_documents(list(quakes), dialect)
        except ValueError as exc:
            _fail(str(exc))
        logger.info("documents_found", count=len(documents))
        missing = len(quakes) - len(documents)
        if missing > 0:
            logger.warning("documents_missing", count=missing, hint=f"These might be in The Gap, see {GAP_URL}")

    if event:
        _emit(event_fields, (event_row(feature, event_id) for event_id, feature in quakes.items()), header)
    if picks:
        # EventID is the requested public id rather than the one inside the document
        _emit(
            pick_fields,
            (row for event_id, doc in documents.items() for row in pick_rows(doc, event_id)),
            header,
        )
    if arrivals:
        _emit(
            arrival_fields,
            (row for event_id, doc in documents.items() for row in arrival_rows(doc.preferred_origin, event_id)),
            header,
        )


def _render_fields_table(title: str, vocabulary: Mapping[str, str]) -> Table:
    table = Table(title=title, box=box.SIMPLE_HEAD)
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Description", style="green", overflow="fold")
    for name in sorted(vocabulary):
        table.add_row(name, vocabulary[name])
    return table


@app.command("fields", help="List the field names accepted by the *-format options.")
def fields() -> None:
    out = Console()
    out.print(_render_fields_table("Event fields", EVENT_FIELDS))
    out.print(_render_fields_table("Pick fields", PICK_FIELDS))
    out.print(_render_fields_table("Arrival fields", ARRIVAL_FIELDS))


def cli() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    cli()
