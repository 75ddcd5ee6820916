"""``dbforge fetch`` — download, verify and decompress every resource.

Runs the orchestrator once.  Everything already committed is skipped,
staged leftovers from an interrupted run are verified and promoted, and
the rest is downloaded.  Exit code 1 if any resource failed.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console

from dbforge.cli._options import CATALOG_OPTION, RESOURCE_DIR_OPTION, load_catalog
from dbforge.core.orchestrator import Orchestrator
from dbforge.monitor.live import RichProgressSink
from dbforge.monitor.renderer import StatusRenderer
from dbforge.routing.dispatcher import ProgressDispatcher
from dbforge.routing.sinks.local_file import JsonLinesProgressSink
from dbforge.routing.sinks.logging_sink import LoggingProgressSink

console = Console()


def fetch_cmd(
    resource_dir: Path = RESOURCE_DIR_OPTION,
    catalog_path: Path = CATALOG_OPTION,
    max_concurrent: int = typer.Option(
        None,
        "--max-concurrent",
        "-j",
        min=0,
        help="Resources staged at once (0 = all).",
    ),
    progress_log: Path = typer.Option(
        None,
        "--progress-log",
        help="Append progress events as JSON lines to this file.",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Log progress instead of drawing live progress bars.",
    ),
) -> None:
    """Fetch, verify and decompress every catalog resource."""
    settings, catalog = load_catalog(
        console,
        resource_dir,
        catalog_path,
        create=True,
        max_concurrent_resources=max_concurrent,
        progress_log_path=progress_log,
    )

    dispatcher = ProgressDispatcher()
    if settings.progress_log_path is not None:
        dispatcher.register_sink(
            JsonLinesProgressSink(
                settings.progress_log_path,
                min_interval_bytes=settings.progress_log_interval_bytes,
            )
        )

    orchestrator = Orchestrator(catalog, config=settings, sink=dispatcher)
    console.print(
        f"[bold cyan]Staging {len(catalog)} resources into[/bold cyan] {catalog.resource_dir}"
    )

    if quiet:
        dispatcher.register_sink(LoggingProgressSink())
        report = asyncio.run(orchestrator.run())
    else:
        with RichProgressSink(console) as live:
            dispatcher.register_sink(live)
            report = asyncio.run(orchestrator.run())

    StatusRenderer(console=console).print_report(report)
    if not report.succeeded:
        raise typer.Exit(code=1)
