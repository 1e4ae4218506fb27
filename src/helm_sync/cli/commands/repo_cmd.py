"""hsync repo add|list - Manage the local repository registry."""

from __future__ import annotations

from typing import Optional

import typer

from helm_sync.cli.options import OutputOption
from helm_sync.config.settings import settings
from helm_sync.core.sync import ChartSync
from helm_sync.errors import HelmSyncError
from helm_sync.models.repo import Credentials
from helm_sync.output.formatters import output_repositories

app = typer.Typer(no_args_is_help=True)


@app.command("add")
def add(
    name: str = typer.Argument(help="Repository name"),
    url: str = typer.Argument(help="Repository URL"),
    username: Optional[str] = typer.Option(None, "--username", help="Repository username"),
    password: Optional[str] = typer.Option(None, "--password", help="Repository password"),
    pass_credentials: bool = typer.Option(
        False, "--pass-credentials", help="Send credentials to chart URLs on other hosts"
    ),
    insecure_skip_tls_verify: bool = typer.Option(
        False, "--insecure-skip-tls-verify", help="Skip TLS certificate checks"
    ),
) -> None:
    """Add or update a chart repository after checking its index is reachable."""
    credentials = Credentials(
        username=username or "",
        password=password or "",
        pass_credentials_all=pass_credentials,
        insecure_skip_tls_verify=insecure_skip_tls_verify,
    )
    sync = ChartSync.from_settings(settings)
    try:
        result = sync.add_repo(name, url, credentials)
    except HelmSyncError as err:
        typer.secho(f"Error: {err}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    action = "updated in" if result.updated else "added to"
    typer.echo(f"{result.entry.name!r} has been {action} your repositories")


@app.command("list")
def list_repos(output: str = OutputOption) -> None:
    """List registered chart repositories."""
    sync = ChartSync.from_settings(settings)
    try:
        registry = sync.store.read_registry()
    except HelmSyncError as err:
        typer.secho(f"Error: {err}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    if not registry.repositories:
        typer.echo("no repositories to show", err=True)
        raise typer.Exit(code=1)
    output_repositories(registry, output)
