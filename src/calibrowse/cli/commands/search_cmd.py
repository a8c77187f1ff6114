# ABOUTME: The `calibrowse search` command for searching the catalog.
# ABOUTME: Accepts Calibre-style expressions such as `author:"=Umberto Eco" or tag:history`.

from pathlib import Path

import click
from rich.console import Console

from calibrowse.cli.listing import build_options, print_documents
from calibrowse.cli.options import library_option, paging_options, sql_trace_option
from calibrowse.db.errors import CatalogNotFoundError, NoDocumentsFoundError
from calibrowse.db.library import open_library

console = Console()


@click.command("search")
@click.argument("expression")
@library_option
@sql_trace_option
@paging_options
def search(
    expression: str,
    library_path: Path | None,
    sql_trace: bool,
    sort_name: str,
    order: str,
    limit: int | None,
    page_token: str | None,
) -> None:
    """Search title, authors, tags, series, publisher and comments."""
    if not expression.strip():
        console.print("[red]Search expression is empty.[/red]")
        raise SystemExit(1)

    params = {"matching": expression, "sortby": sort_name, "order": order}
    try:
        with open_library(library_path, sql_trace=sql_trace) as library:
            options = build_options(library, params, limit=limit, page_token=page_token)
            count, documents = library.catalog.query_search(options)
    except CatalogNotFoundError as exc:
        console.print(f"[red]{exc}[/red]")
        raise SystemExit(1) from exc
    except NoDocumentsFoundError as exc:
        console.print(f"[yellow]{exc}.[/yellow]")
        raise SystemExit(1) from exc

    options.query_count = count
    print_documents(console, options, count, documents)
