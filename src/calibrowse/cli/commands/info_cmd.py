# ABOUTME: The `calibrowse info` command for displaying one document in detail.
# ABOUTME: Shows every visible field of a document by ID, plus its book files.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from calibrowse.cli.options import library_option, sql_trace_option
from calibrowse.db.entities import Entity
from calibrowse.db.errors import CatalogNotFoundError
from calibrowse.db.library import open_library

console = Console()


def _names(entities: tuple[Entity, ...]) -> str:
    return ", ".join(entity.name for entity in entities)


@click.command("info")
@click.argument("doc_id", type=int)
@library_option
@sql_trace_option
def info(doc_id: int, library_path: Path | None, sql_trace: bool) -> None:
    """Show detailed metadata for a document by ID."""
    try:
        with open_library(library_path, sql_trace=sql_trace) as library:
            doc = library.catalog.query_document(doc_id)
            files = doc.filenames(library.path) if doc is not None else {}
            cover = doc.cover_path(library.path) if doc is not None else ""
    except CatalogNotFoundError as exc:
        console.print(f"[red]{exc}[/red]")
        raise SystemExit(1) from exc

    if doc is None:
        console.print(f"[red]Document {doc_id} not found.[/red]")
        raise SystemExit(1)

    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Field", style="bold", width=14)
    table.add_column("Value")

    table.add_row("ID", str(doc.id))
    if doc.title:
        table.add_row("Title", doc.title)
    if doc.authors:
        table.add_row("Authors", doc.author_names)
    if doc.author_sort:
        table.add_row("Author Sort", doc.author_sort)
    if doc.series:
        table.add_row("Series", f"{doc.series.name} #{doc.series_index:g}")
    if doc.publisher:
        table.add_row("Publisher", doc.publisher.name)
    if doc.pubdate:
        table.add_row("Published", doc.pubdate.date().isoformat())
    if doc.timestamp:
        table.add_row("Added", doc.timestamp.date().isoformat())
    if doc.languages:
        table.add_row("Languages", _names(doc.languages))
    if doc.tags:
        table.add_row("Tags", _names(doc.tags))
    if doc.rating:
        table.add_row("Rating", f"{doc.rating / 2:g}/5")
    if doc.isbn:
        table.add_row("ISBN", doc.isbn)
    for identifier in doc.identifiers:
        table.add_row(identifier.name, identifier.url)
    if doc.pages:
        table.add_row("Pages", str(doc.pages))
    if doc.size:
        table.add_row("Size", f"{doc.size:,} bytes")
    if doc.uuid:
        table.add_row("UUID", doc.uuid)
    if doc.comments:
        table.add_row("Comments", doc.comments)
    if cover:
        table.add_row("Cover", cover)
    for fmt, path in files.items():
        table.add_row(fmt, path)

    console.print(table)
