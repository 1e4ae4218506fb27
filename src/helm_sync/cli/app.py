"""Root Typer application, mounts sub-commands."""

from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

app = typer.Typer(
    name="hsync",
    help="helm-sync - Synchronize Helm repositories and pull charts.",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False, markup=False)],
        force=True,
    )


def _register_commands() -> None:
    from helm_sync.cli.commands.pull_cmd import app as pull_app
    from helm_sync.cli.commands.repo_cmd import app as repo_app
    from helm_sync.cli.commands.search_cmd import app as search_app

    app.add_typer(pull_app, name="pull", help="Pull a helm chart")
    app.add_typer(repo_app, name="repo", help="Add and list chart repositories")
    app.add_typer(search_app, name="search", help="Search cached repository indexes")


_register_commands()


def main() -> None:
    app()
