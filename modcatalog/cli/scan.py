"""
scan subcommand, prints the aggregated mod.info data as JSON.
"""

import sys
from pathlib import Path
from typing import Optional

import click
import msgspec

from modcatalog.models.metadata.metadata_mediator import CatalogMediator
from modcatalog.utils.exception import ModCatalogError


@click.command("scan")
@click.argument(
    "mods_path",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.option(
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the JSON to this file instead of stdout.",
)
@click.option(
    "--workers",
    type=int,
    default=0,
    show_default=True,
    help="Parser threads (0 = automatic).",
)
def scan(mods_path: Path, output: Optional[Path], workers: int) -> None:
    """Scan MODS_PATH for mod.info files and print the merged catalog as JSON.

    The JSON holds the discovered files and one summary per mod, including the
    computed required_by lists.
    """
    mediator = CatalogMediator(mods_path, max_workers=workers)
    try:
        result = mediator.refresh_catalog()
    except ModCatalogError as e:
        click.secho(f"✗ Error: {e.message}", fg="red", err=True)
        sys.exit(1)

    payload = msgspec.json.format(msgspec.json.encode(result), indent=2)
    if output is None:
        click.echo(payload.decode("utf-8"))
        return

    try:
        output.write_bytes(payload)
    except OSError as e:
        click.secho(f"✗ Error: Unable to write {output}: {e}", fg="red", err=True)
        sys.exit(1)
    click.secho(
        f"✓ Scan of {len(result.summaries)} mods written to {output}",
        fg="green",
        err=True,
    )
