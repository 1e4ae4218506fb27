"""hsync pull <source> <target> - Add the repository, resolve and pull a chart."""

from __future__ import annotations

from typing import Optional

import typer

from helm_sync.cli.options import OutputOption
from helm_sync.config.settings import settings
from helm_sync.core.sync import ChartSync
from helm_sync.errors import HelmSyncError
from helm_sync.models import OverwritePolicy
from helm_sync.output.formatters import output_pull_result

app = typer.Typer(context_settings={"allow_interspersed_args": True})


@app.callback(invoke_without_command=True)
def pull(
    source: str = typer.Argument(help="Source URI, e.g. helm://charts.example.com/nginx?version=1.2.0"),
    target: str = typer.Argument(help="Target URI, e.g. file://./charts"),
    version: Optional[str] = typer.Option(None, "--version", help="Exact chart version (default: latest)"),
    no_overwrite: bool = typer.Option(False, "--no-overwrite", help="Fail if the target file exists"),
    output: str = OutputOption,
) -> None:
    """Pull a helm chart."""
    policy = OverwritePolicy.FAIL_IF_EXISTS if no_overwrite else OverwritePolicy.OVERWRITE
    sync = ChartSync.from_settings(settings)
    try:
        result = sync.pull(source, target, version=version, overwrite=policy)
    except HelmSyncError as err:
        typer.secho(f"Error: {err}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    output_pull_result(result, output)
