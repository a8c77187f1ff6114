# ABOUTME: The `calibrowse vlibs` command listing the library's virtual libraries.
# ABOUTME: Shows each virtual library's name and its search definition.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from calibrowse.cli.options import library_option
from calibrowse.db.errors import CatalogNotFoundError
from calibrowse.db.library import open_library

console = Console()


@click.command("vlibs")
@library_option
def vlibs(library_path: Path | None) -> None:
    """List virtual libraries and their search expressions."""
    try:
        with open_library(library_path) as library:
            entries = library.virtual_libraries.items()
    except CatalogNotFoundError as exc:
        console.print(f"[red]{exc}[/red]")
        raise SystemExit(1) from exc

    if not entries:
        console.print("[yellow]No virtual libraries defined.[/yellow]")
        return

    table = Table()
    table.add_column("Name", style="bold")
    table.add_column("Definition")
    for name, definition in entries:
        table.add_row(name, definition)

    console.print(table)
