"""Shared option handling: CLI overrides on top of ``StagerConfig``."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape

from dbforge.config import StagerConfig, config as default_config
from dbforge.core.catalog import ResourceCatalog
from dbforge.core.errors import StagingError

RESOURCE_DIR_OPTION = typer.Option(
    None,
    "--resource-dir",
    "-d",
    help="Directory holding downloaded resources (overrides DBFORGE_RESOURCE_DIR).",
)
CATALOG_OPTION = typer.Option(
    None,
    "--catalog",
    "-c",
    help="TOML catalog file (overrides DBFORGE_CATALOG_PATH; default: built-in catalog).",
)


def resolve_config(**overrides: Any) -> StagerConfig:
    """Return the module config with every non-None override applied."""
    update = {key: value for key, value in overrides.items() if value is not None}
    if not update:
        return default_config
    return default_config.model_copy(update=update)


def load_catalog(
    console: Console,
    resource_dir: Path | None,
    catalog_path: Path | None,
    *,
    create: bool = False,
    **overrides: Any,
) -> tuple[StagerConfig, ResourceCatalog]:
    """Resolve config and catalog, exiting with code 1 on a startup error.

    Only commands that write (``fetch``) pass ``create=True``.
    """
    settings = resolve_config(
        resource_dir=resource_dir, catalog_path=catalog_path, **overrides
    )
    try:
        catalog = ResourceCatalog.from_config(settings, create=create)
    except StagingError as exc:
        console.print(f"[bold red]{type(exc).__name__}:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)
    return settings, catalog
