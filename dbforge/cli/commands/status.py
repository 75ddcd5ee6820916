"""``dbforge status`` — show the staging phase of every artifact.

A pure read-only projection: probes the resource directory, never
downloads, hashes or renames anything.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from dbforge.cli._options import CATALOG_OPTION, RESOURCE_DIR_OPTION, load_catalog
from dbforge.monitor.projection import StatusProjection
from dbforge.monitor.renderer import StatusRenderer

console = Console()


def status_cmd(
    resource_dir: Path = RESOURCE_DIR_OPTION,
    catalog_path: Path = CATALOG_OPTION,
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the snapshot as JSON instead of a table.",
    ),
) -> None:
    """Show whether each resource is committed, staged or absent."""
    _, catalog = load_catalog(console, resource_dir, catalog_path)
    snapshot = StatusProjection(catalog).snapshot()

    if as_json:
        console.print_json(snapshot.model_dump_json())
    else:
        StatusRenderer(console=console).print_snapshot(snapshot)
