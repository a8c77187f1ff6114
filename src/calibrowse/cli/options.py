# ABOUTME: Shared Click options for calibrowse CLI commands.
# ABOUTME: Library location, SQL tracing, and the sort/paging options of listings.

from pathlib import Path

import click

from calibrowse.db.connection import DEFAULT_LIBRARY_PATH
from calibrowse.query.options import SORT_NAMES

library_option = click.option(
    "--library",
    "library_path",
    type=click.Path(path_type=Path),
    default=None,
    envvar="CALIBROWSE_LIBRARY",
    help=f"Path to the Calibre library (default: {DEFAULT_LIBRARY_PATH})",
)

sql_trace_option = click.option(
    "--sql-trace",
    is_flag=True,
    default=False,
    envvar="CALIBROWSE_SQL_TRACE",
    help="Log every SQL statement (shown with -vv).",
)


def paging_options(func):
    """Sort, order, page size and page token options shared by listings."""
    func = click.option(
        "--page",
        "page_token",
        default=None,
        help="Page token printed by a previous listing.",
    )(func)
    func = click.option(
        "--limit",
        "limit",
        type=click.IntRange(min=1),
        default=None,
        envvar="CALIBROWSE_BOOKS_PER_PAGE",
        help="Documents per page (default: 24).",
    )(func)
    func = click.option(
        "--order",
        type=click.Choice(["ascending", "descending"]),
        default="descending",
        show_default=True,
    )(func)
    func = click.option(
        "--sort",
        "sort_name",
        type=click.Choice(sorted(SORT_NAMES)),
        default="acquisition",
        show_default=True,
    )(func)
    return func
