"""Rich table builders for each command."""

from __future__ import annotations

from rich.panel import Panel
from rich.table import Table

from helm_sync.models.reference import IndexRecord, PullResult
from helm_sync.models.repo import Registry


def pull_result_panel(result: PullResult) -> Panel:
    record = result.record
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Key", style="bold cyan", no_wrap=True)
    table.add_column("Value")

    table.add_row("Chart", f"{record.chart.name}-{record.version}")
    table.add_row("App Version", record.chart.app_version or "-")
    table.add_row("Repository", record.repo_name)
    table.add_row("URL", record.download_url)
    table.add_row("Digest", record.chart.digest or "-")
    table.add_row("Saved To", str(result.path))
    if record.chart.deprecated:
        table.add_row("Deprecated", "[yellow]yes[/yellow]")

    return Panel(table, title="[bold]Pulled Chart[/bold]", border_style="green")


def repo_list_table(registry: Registry) -> Table:
    table = Table(title="Helm Repositories", expand=True)
    table.add_column("Name", style="bold white", no_wrap=True)
    table.add_column("URL", style="cyan")
    table.add_column("Auth", style="dim", no_wrap=True)

    for entry in registry.repositories:
        auth = "basic" if entry.credentials.username else "-"
        table.add_row(entry.name, entry.url, auth)
    return table


def search_table(chart_name: str, records: list[IndexRecord], selected: IndexRecord | None) -> Table:
    table = Table(title=f"Versions of {chart_name}", expand=True)
    table.add_column("Repository", style="blue", no_wrap=True)
    table.add_column("Chart Ver", style="magenta")
    table.add_column("App Ver", style="cyan")
    table.add_column("Description", max_width=40)
    table.add_column("", no_wrap=True)

    for r in records:
        marker = "[green]latest[/green]" if r is selected else ""
        table.add_row(r.repo_name, r.version, r.chart.app_version, r.chart.description, marker)
    return table
