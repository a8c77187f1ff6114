# ABOUTME: The `calibrowse columns` command listing user-defined custom columns.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from calibrowse.cli.options import library_option
from calibrowse.db.errors import CatalogNotFoundError
from calibrowse.db.library import open_library

console = Console()


@click.command("columns")
@library_option
def columns(library_path: Path | None) -> None:
    """List the library's custom columns."""
    try:
        with open_library(library_path) as library:
            custom = library.catalog.query_custom_columns()
    except CatalogNotFoundError as exc:
        console.print(f"[red]{exc}[/red]")
        raise SystemExit(1) from exc

    if not custom:
        console.print("[yellow]No custom columns defined.[/yellow]")
        return

    table = Table()
    table.add_column("ID", style="dim", width=4)
    table.add_column("Label")
    table.add_column("Name", style="bold")
    table.add_column("Type")
    for column in custom:
        table.add_row(str(column.id), f"#{column.label}", column.name, column.datatype)

    console.print(table)
