"""Shared CLI options."""

from __future__ import annotations

import typer

OutputOption = typer.Option("table", "--output", "-o", help="Output format: table, json, yaml")
