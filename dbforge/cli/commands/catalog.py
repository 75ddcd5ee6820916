"""``dbforge catalog`` — print the active resource catalog."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console
from rich.table import Table

from dbforge.cli._options import CATALOG_OPTION, RESOURCE_DIR_OPTION, load_catalog

console = Console()


def _short(digest: str) -> str:
    return f"{digest[:12]}…" if digest else "[dim]unverified[/dim]"


def catalog_cmd(
    resource_dir: Path = RESOURCE_DIR_OPTION,
    catalog_path: Path = CATALOG_OPTION,
) -> None:
    """Print every resource with its source URL, paths and digests."""
    _, catalog = load_catalog(console, resource_dir, catalog_path)

    table = Table(title=f"Resource Catalog ({len(catalog)})", header_style="bold cyan")
    table.add_column("Resource", style="cyan")
    table.add_column("Source URL")
    table.add_column("Final File")
    table.add_column("Compressed SHA-256")
    table.add_column("Final SHA-256")

    for descriptor in catalog:
        final_digest = (
            _short(descriptor.decompressed_digest)
            if descriptor.requires_decompression
            else "[dim]-[/dim]"
        )
        table.add_row(
            descriptor.name,
            descriptor.source_url,
            descriptor.final_path.name,
            _short(descriptor.compressed_digest),
            final_digest,
        )
    console.print(table)
