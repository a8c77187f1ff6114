# ABOUTME: The `calibrowse options` command for inspecting a page token.
# ABOUTME: Decodes a token printed by ls/search and shows the query state it carries.

from dataclasses import fields

import click
from rich.console import Console
from rich.table import Table

from calibrowse.query.options import QueryOptions, SortBy

console = Console()


@click.command("options")
@click.argument("token")
def options(token: str) -> None:
    """Decode a page token and show its fields."""
    decoded = QueryOptions.deserialize(token)

    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Field", style="bold", width=14)
    table.add_column("Value")
    for field in fields(decoded):
        value = getattr(decoded, field.name)
        if isinstance(value, SortBy):
            value = value.name.lower()
        table.add_row(field.name, str(value))

    console.print(table)
