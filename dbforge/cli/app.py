"""Main Typer application — imports and registers all CLI commands.

Entry point: ``dbforge`` (configured via pyproject.toml project.scripts).
"""

from __future__ import annotations

import typer

from dbforge.cli._logging import configure_logging
from dbforge.cli.commands.catalog import catalog_cmd
from dbforge.cli.commands.fetch import fetch_cmd
from dbforge.cli.commands.files import files_cmd
from dbforge.cli.commands.status import status_cmd
from dbforge.cli.commands.verify import verify_cmd
from dbforge.config import config

app = typer.Typer(
    name="dbforge",
    help="dbforge: verified download, staging and decompression of reference databases.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Logging level (overrides DBFORGE_LOG_LEVEL).",
    ),
) -> None:
    """Configure logging before any subcommand runs."""
    level = log_level or ("DEBUG" if config.debug else config.log_level)
    configure_logging(level)


# Register subcommands
app.command(name="fetch", help="Download, verify and decompress all resources.")(fetch_cmd)
app.command(name="status", help="Show the staging phase of every artifact.")(status_cmd)
app.command(name="verify", help="Re-hash committed artifacts against the catalog.")(verify_cmd)
app.command(name="files", help="List files in the resource directory.")(files_cmd)
app.command(name="catalog", help="Print the active resource catalog.")(catalog_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
