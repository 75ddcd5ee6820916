"""``dbforge verify`` — re-hash committed artifacts against the catalog.

The fetch pipeline trusts committed files.  This command is the
explicit deep check: it reads every committed artifact in full and
reports mismatches without touching them.  Exit code 1 on any mismatch.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from dbforge.cli._options import CATALOG_OPTION, RESOURCE_DIR_OPTION, load_catalog
from dbforge.core.audit import audit_committed
from dbforge.core.errors import StagingError
from dbforge.core.hasher import StreamingDigest
from dbforge.monitor.renderer import StatusRenderer

console = Console()


def verify_cmd(
    resource_dir: Path = RESOURCE_DIR_OPTION,
    catalog_path: Path = CATALOG_OPTION,
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Also fail when a committed artifact is missing.",
    ),
) -> None:
    """Verify committed artifacts against their expected digests."""
    settings, catalog = load_catalog(console, resource_dir, catalog_path)

    console.print("[bold cyan]Verifying committed artifacts...[/bold cyan]")
    try:
        findings = audit_committed(
            catalog, digest=StreamingDigest(chunk_size=settings.chunk_size)
        )
    except StagingError as exc:
        console.print(f"[bold red]Audit failed:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    console.print(StatusRenderer(console=console).render_audit(findings))

    failing = {"mismatch", "missing"} if strict else {"mismatch"}
    bad = [f for f in findings if f.verdict in failing]
    if bad:
        console.print(f"[bold red]{len(bad)} artifact(s) failed verification.[/bold red]")
        raise typer.Exit(code=1)
    console.print("[bold green]Committed artifacts verified.[/bold green]")
