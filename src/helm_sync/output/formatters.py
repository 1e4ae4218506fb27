"""Table / JSON / YAML output dispatch."""

from __future__ import annotations

import json
from typing import Any

import yaml
from rich.console import Console

from helm_sync.models.reference import IndexRecord, PullResult
from helm_sync.models.repo import Registry

console = Console()


def _record_to_dict(r: IndexRecord) -> dict[str, Any]:
    return {
        "repository": r.repo_name,
        "chart": r.chart.name,
        "chart_version": r.version,
        "app_version": r.chart.app_version,
        "url": r.download_url,
        "digest": r.chart.digest,
    }


def _emit(data: Any, fmt: str) -> bool:
    if fmt == "json":
        console.print_json(json.dumps(data, indent=2))
        return True
    if fmt == "yaml":
        console.print(yaml.dump(data, default_flow_style=False, sort_keys=False))
        return True
    return False


def output_pull_result(result: PullResult, fmt: str) -> None:
    data = _record_to_dict(result.record)
    data["source"] = result.reference.raw
    data["path"] = str(result.path)
    if not _emit(data, fmt):
        from helm_sync.output.tables import pull_result_panel
        console.print(pull_result_panel(result))


def output_repositories(registry: Registry, fmt: str) -> None:
    # Credentials are never echoed.
    data = [{"name": r.name, "url": r.url} for r in registry.repositories]
    if not _emit(data, fmt):
        from helm_sync.output.tables import repo_list_table
        console.print(repo_list_table(registry))


def output_search(
    chart_name: str,
    records: list[IndexRecord],
    selected: IndexRecord | None,
    fmt: str,
) -> None:
    data = [dict(_record_to_dict(r), latest=r is selected) for r in records]
    if not _emit(data, fmt):
        from helm_sync.output.tables import search_table
        console.print(search_table(chart_name, records, selected))
