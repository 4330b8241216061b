"""
build-catalog subcommand for writing the Lua mod catalog.

Runs a full aggregation pass over a mods folder, attaches workshop metadata and
user flags, and writes honus_miqol_db.lua into the output folder.
"""

import sys
import traceback
from pathlib import Path
from typing import Optional

import click
from loguru import logger

from modcatalog.models.metadata.metadata_mediator import CatalogMediator
from modcatalog.models.settings import Settings
from modcatalog.utils.app_info import AppInfo
from modcatalog.utils.exception import MalformedDataException, ModCatalogError
from modcatalog.utils.workshop import read_workshop_db


@click.command("build-catalog")
@click.option(
    "--mods-path",
    envvar="MODCATALOG_MODS_PATH",
    type=click.Path(path_type=Path),
    help="Folder to scan for mod.info files. Can also be set via MODCATALOG_MODS_PATH.",
)
@click.option(
    "--output-dir",
    envvar="MODCATALOG_OUTPUT_DIR",
    type=click.Path(file_okay=False, path_type=Path),
    help="Folder to write honus_miqol_db.lua into. Can also be set via MODCATALOG_OUTPUT_DIR.",
)
@click.option(
    "--workshop-db",
    envvar="MODCATALOG_WORKSHOP_DB",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Workshop metadata JSON used to enrich entries. Can also be set via MODCATALOG_WORKSHOP_DB.",
)
@click.option(
    "--hidden",
    multiple=True,
    help="Mod id to flag as hidden. May be repeated.",
)
@click.option(
    "--favorite",
    multiple=True,
    help="Mod id to flag as favorite. May be repeated.",
)
@click.option(
    "--workers",
    type=int,
    default=None,
    help="Parser threads (0 = automatic).",
)
@click.option(
    "--quiet",
    is_flag=True,
    help="Suppress progress output (errors still shown).",
)
def build_catalog(
    mods_path: Optional[Path],
    output_dir: Optional[Path],
    workshop_db: Optional[Path],
    hidden: tuple[str, ...],
    favorite: tuple[str, ...],
    workers: Optional[int],
    quiet: bool,
) -> None:
    """Build the Lua mod catalog.

    Options not given on the command line fall back to settings.json in the
    application storage folder. Without a configured workshop database,
    dbs/workshop.json in the storage folder is used when present.

    Examples:

    \b
      # Scan the workshop folder and write into the Zomboid Lua folder
      modcatalog build-catalog \\
        --mods-path ~/.steam/steam/steamapps/workshop/content/108600 \\
        --output-dir ~/Zomboid/Lua

    \b
      # Enrich entries with previously fetched workshop details
      modcatalog build-catalog --workshop-db workshop.json --favorite Brita
    """
    settings = Settings.load()

    mods_path = mods_path or (Path(settings.mods_path) if settings.mods_path else None)
    output_dir = output_dir or (
        Path(settings.output_dir) if settings.output_dir else None
    )
    if workshop_db is None and settings.workshop_db_path:
        workshop_db = Path(settings.workshop_db_path)
    if workshop_db is None and AppInfo().workshop_db_file.is_file():
        workshop_db = AppInfo().workshop_db_file
    if workers is None:
        workers = settings.max_workers

    if mods_path is None:
        click.secho(
            "Error: A mods path is required. Use --mods-path or MODCATALOG_MODS_PATH.",
            fg="red",
            err=True,
        )
        sys.exit(1)
    if not mods_path.is_dir():
        click.secho(
            f"Error: Mods path does not exist or is not a directory: {mods_path}",
            fg="red",
            err=True,
        )
        sys.exit(1)
    if output_dir is None:
        click.secho(
            "Error: An output directory is required. Use --output-dir or MODCATALOG_OUTPUT_DIR.",
            fg="red",
            err=True,
        )
        sys.exit(1)

    def progress(msg: str) -> None:
        if not quiet:
            click.echo(msg, err=True)

    try:
        mediator = CatalogMediator(mods_path, max_workers=workers)
        progress(f"Scanning {mods_path} for mod.info files...")
        result = mediator.refresh_catalog()
        progress(
            f"Found {len(result.files)} mod.info files, {len(result.summaries)} mods."
        )

        if workshop_db is not None:
            database = read_workshop_db(workshop_db)
            if database is None:
                progress(f"Workshop metadata not found at {workshop_db}, skipping.")
            else:
                attached = mediator.attach_workshop_metadata(database)
                progress(f"Attached workshop metadata to {attached} mods.")

        mediator.apply_flags(
            hidden=list(settings.hidden_mods) + list(hidden),
            favorite=list(settings.favorite_mods) + list(favorite),
        )

        written = mediator.write_catalog(output_dir)
    except (ModCatalogError, MalformedDataException) as e:
        logger.error(e.message)
        click.secho(f"✗ Error: {e.message}", fg="red", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\n\nInterrupted by user.", err=True)
        sys.exit(2)
    except Exception as e:
        logger.error(f"Catalog build failed: {traceback.format_exc()}")
        click.secho(f"✗ Error: {e}", fg="red", err=True)
        sys.exit(1)

    click.secho(
        f"✓ Catalog {'created' if written.created else 'updated'}: {written.path}",
        fg="green",
        err=True,
    )
