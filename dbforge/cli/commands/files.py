"""``dbforge files`` — list the files in the resource directory."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from dbforge.cli._options import RESOURCE_DIR_OPTION, resolve_config
from dbforge.core.catalog import list_resource_files
from dbforge.core.errors import PathResolutionError

console = Console()


def files_cmd(resource_dir: Path = RESOURCE_DIR_OPTION) -> None:
    """List the file names present in the resource directory."""
    settings = resolve_config(resource_dir=resource_dir)
    try:
        names = list_resource_files(settings.resource_dir)
    except PathResolutionError as exc:
        console.print(f"[bold red]{escape(str(exc))}[/bold red]")
        raise typer.Exit(code=1)

    if not names:
        console.print(f"[dim]No files in {settings.resource_dir}[/dim]")
        return
    for name in names:
        console.print(name, highlight=False)
