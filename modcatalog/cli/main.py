"""
Main CLI entry point for the mod catalog.

This module defines the Click command group and registers all subcommands.
"""

import click

from modcatalog.cli.build_catalog import build_catalog
from modcatalog.cli.scan import scan
from modcatalog.utils.app_info import AppInfo
from modcatalog.utils.log import setup_logger


@click.group()
@click.version_option(version=AppInfo().app_version, prog_name="modcatalog")
@click.option("--debug", is_flag=True, help="Write DEBUG level messages to the log file.")
def cli(debug: bool) -> None:
    """Project Zomboid mod catalog CLI

    Scans mod.info files and writes the honus_miqol_db.lua catalog consumed in game.
    """
    setup_logger(debug=debug)


# Register subcommands
cli.add_command(scan)
cli.add_command(build_catalog)


if __name__ == "__main__":
    cli()
