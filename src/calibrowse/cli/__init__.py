# ABOUTME: CLI package for calibrowse, built on Click.
# ABOUTME: Defines the root command group, logging setup, and registers subcommands.

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from calibrowse.cli.commands import (
    columns_cmd,
    info_cmd,
    ls_cmd,
    options_cmd,
    search_cmd,
    vlibs_cmd,
)


def _configure_logging(verbosity: int) -> None:
    if verbosity <= 0:
        return
    level = logging.DEBUG if verbosity > 1 else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(name)s: %(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(package_name="calibrowse")
@click.option("-v", "--verbose", count=True, help="Log progress; repeat for debug output.")
def cli(verbose: int) -> None:
    """calibrowse - browse a Calibre library from the command line."""
    _configure_logging(verbose)


cli.add_command(ls_cmd.ls)
cli.add_command(search_cmd.search)
cli.add_command(info_cmd.info)
cli.add_command(vlibs_cmd.vlibs)
cli.add_command(columns_cmd.columns)
cli.add_command(options_cmd.options)
