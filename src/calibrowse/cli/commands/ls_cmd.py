# ABOUTME: The `calibrowse ls` command for paging through the catalog.
# ABOUTME: Lists all documents, or those of one author/tag/series/... or virtual library.

from pathlib import Path

import click
from rich.console import Console

from calibrowse.cli.listing import build_options, print_documents
from calibrowse.cli.options import library_option, paging_options, sql_trace_option
from calibrowse.db.errors import CatalogNotFoundError, NoDocumentsFoundError
from calibrowse.db.library import open_library
from calibrowse.query.options import ENTITIES, QueryOptions

console = Console()


@click.command("ls")
@library_option
@sql_trace_option
@click.option(
    "--entity",
    type=click.Choice(ENTITIES),
    default=None,
    help="Restrict the listing to one author, format, lang, publisher, series or tag.",
)
@click.option("--id", "entity_id", type=int, default=0, help="Id of the --entity to list.")
@click.option("--virtlib", default=None, help="Name of a virtual library to list.")
@paging_options
def ls(
    library_path: Path | None,
    sql_trace: bool,
    entity: str | None,
    entity_id: int,
    virtlib: str | None,
    sort_name: str,
    order: str,
    limit: int | None,
    page_token: str | None,
) -> None:
    """List documents of the library, newest acquisitions first."""
    params = {"sortby": sort_name, "order": order}
    if page_token and not entity and not virtlib:
        # continue the filter the token was printed for
        previous = QueryOptions.deserialize(page_token)
        if previous.entity:
            entity, entity_id = previous.entity, previous.id
        virtlib = previous.virt_lib or None
    if entity:
        params.update(entity=entity, id=str(entity_id))
    if virtlib:
        params["virtlib"] = virtlib

    try:
        with open_library(library_path, sql_trace=sql_trace) as library:
            if virtlib and library.virtual_libraries.resolve(virtlib) is None:
                console.print(f"[red]Virtual library '{virtlib}' not found.[/red]")
                raise SystemExit(1)
            options = build_options(library, params, limit=limit, page_token=page_token)
            # a virtual library turns the listing into a search
            count, documents = library.catalog.query(options)
    except CatalogNotFoundError as exc:
        console.print(f"[red]{exc}[/red]")
        raise SystemExit(1) from exc
    except NoDocumentsFoundError:
        count, documents = 0, []

    if count == 0:
        console.print("[yellow]No documents in this listing.[/yellow]")
        return

    print_documents(console, options, count, documents)
