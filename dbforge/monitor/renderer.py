"""Rich terminal renderer for resource status, run reports and audits.

Color scheme
------------
- green     : COMMITTED / ok
- yellow    : STAGED (written, not yet verified)
- dim       : ABSENT
- bold red  : failures and digest mismatches
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from dbforge.models.phases import PipelinePhase, StageOutcome
from dbforge.models.reports import (
    ArtifactStatus,
    AuditFinding,
    CatalogSnapshot,
    RunReport,
)
from dbforge.routing.sinks._formatting import format_bytes

_PHASE_ICONS: dict[PipelinePhase, str] = {
    PipelinePhase.COMMITTED: "[green]COMMITTED[/green]",
    PipelinePhase.STAGED: "[yellow]STAGED[/yellow]",
    PipelinePhase.ABSENT: "[dim]ABSENT[/dim]",
}

_OUTCOME_ICONS: dict[StageOutcome, str] = {
    StageOutcome.ALREADY_COMMITTED: "[dim]up to date[/dim]",
    StageOutcome.RESUMED: "[cyan]resumed[/cyan]",
    StageOutcome.WRITTEN: "[green]written[/green]",
}

_VERDICT_ICONS: dict[str, str] = {
    "ok": "[green]OK[/green]",
    "mismatch": "[bold red]MISMATCH[/bold red]",
    "missing": "[yellow]MISSING[/yellow]",
    "unverifiable": "[dim]NO DIGEST[/dim]",
}


def _artifact_cell(status: ArtifactStatus | None) -> str:
    if status is None:
        return "[dim]-[/dim]"
    cell = _PHASE_ICONS[status.phase]
    size = status.committed_size if status.phase is PipelinePhase.COMMITTED else status.staged_size
    if size is not None:
        cell += f" [dim]{format_bytes(size)}[/dim]"
    return cell


class StatusRenderer:
    """Renders snapshots, run reports and audit findings.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    # ------------------------------------------------------------------
    # Status snapshot
    # ------------------------------------------------------------------

    def render_snapshot(self, snapshot: CatalogSnapshot) -> Panel:
        table = Table(show_header=True, header_style="bold cyan", expand=True)
        table.add_column("Resource", min_width=20)
        table.add_column("Compressed", min_width=18)
        table.add_column("Decompressed", min_width=18)
        table.add_column("Ready", justify="center", width=7)

        for resource in snapshot.resources:
            ready = "[green]yes[/green]" if resource.ready else "[red]no[/red]"
            table.add_row(
                resource.name,
                _artifact_cell(resource.compressed),
                _artifact_cell(resource.decompressed),
                ready,
            )

        ready_count = sum(1 for r in snapshot.resources if r.ready)
        return Panel(
            table,
            title="[bold]Resource Status[/bold]",
            subtitle=f"{snapshot.resource_dir}  |  {ready_count}/{len(snapshot.resources)} ready",
            border_style="blue",
        )

    def print_snapshot(self, snapshot: CatalogSnapshot) -> None:
        self.console.print(self.render_snapshot(snapshot))

    # ------------------------------------------------------------------
    # Run report
    # ------------------------------------------------------------------

    def render_report(self, report: RunReport) -> Table:
        table = Table(title="Staging Results", show_header=True, header_style="bold cyan")
        table.add_column("Resource", style="cyan")
        table.add_column("Compressed")
        table.add_column("Decompressed")
        table.add_column("Error")

        for result in report.results:
            compressed = _OUTCOME_ICONS.get(result.compressed, "[dim]-[/dim]")
            decompressed = _OUTCOME_ICONS.get(result.decompressed, "[dim]-[/dim]")
            error = (
                f"[bold red]{result.error_type}[/bold red]: {escape(result.error_message)}"
                if result.error_type
                else ""
            )
            table.add_row(result.name, compressed, decompressed, error)
        return table

    def print_report(self, report: RunReport) -> None:
        self.console.print(self.render_report(report))
        if report.succeeded:
            self.console.print("[bold green]All resources are committed.[/bold green]")
        else:
            self.console.print(
                f"[bold red]{len(report.failures)} resource(s) failed.[/bold red] "
                "[dim]Committed artifacts are kept; re-run to resume.[/dim]"
            )

    # ------------------------------------------------------------------
    # Audit
    # ------------------------------------------------------------------

    def render_audit(self, findings: list[AuditFinding]) -> Table:
        table = Table(title="Committed Artifact Audit", show_header=True, header_style="bold cyan")
        table.add_column("Resource", style="cyan")
        table.add_column("Artifact")
        table.add_column("Verdict", justify="center")
        table.add_column("Digest", style="dim")

        for finding in findings:
            table.add_row(
                finding.name,
                finding.kind.value,
                _VERDICT_ICONS.get(finding.verdict, finding.verdict),
                finding.actual[:16] if finding.actual else "",
            )
        return table
