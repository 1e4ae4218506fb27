"""hsync search <chart> - Show every cached version of a chart."""

from __future__ import annotations

import typer

from helm_sync.cli.options import OutputOption
from helm_sync.config.settings import settings
from helm_sync.core.resolver import resolve
from helm_sync.core.sync import ChartSync
from helm_sync.errors import HelmSyncError
from helm_sync.output.formatters import output_search

app = typer.Typer(context_settings={"allow_interspersed_args": True})


@app.callback(invoke_without_command=True)
def search(
    chart: str = typer.Argument(help="Chart name"),
    output: str = OutputOption,
) -> None:
    """Search the locally cached indexes; no network access."""
    sync = ChartSync.from_settings(settings)
    try:
        index = sync.unified_index()
        selected = resolve(index, chart)
    except HelmSyncError as err:
        typer.secho(f"Error: {err}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    output_search(chart, index.get(chart), selected, output)
