"""Merge every cached repository index into one searchable view."""

from __future__ import annotations

import logging
from collections import defaultdict

from helm_sync.core.metadata_store import MetadataStore
from helm_sync.models.chart import RepositoryIndex
from helm_sync.models.reference import IndexRecord
from helm_sync.models.repo import Registry, RepositoryEntry

logger = logging.getLogger(__name__)


class UnifiedIndex:
    """chart name -> records, in the order repositories were added."""

    def __init__(self) -> None:
        self._charts: dict[str, list[IndexRecord]] = defaultdict(list)
        self._repo_order: list[str] = []

    def add_repo(self, entry: RepositoryEntry, index: RepositoryIndex) -> None:
        self._repo_order.append(entry.name)
        for chart in index.versions():
            self._charts[chart.name].append(IndexRecord(entry.name, entry.url, chart))

    def get(self, chart_name: str) -> list[IndexRecord]:
        return list(self._charts.get(chart_name, []))

    def __contains__(self, chart_name: str) -> bool:
        return chart_name in self._charts

    @property
    def repo_names(self) -> list[str]:
        return list(self._repo_order)

    @property
    def chart_names(self) -> list[str]:
        return sorted(self._charts)

    def all(self) -> list[IndexRecord]:
        return [record for records in self._charts.values() for record in records]


def build_unified_index(store: MetadataStore, registry: Registry) -> UnifiedIndex:
    """Load the cached index of every registered repository.

    Reads the cache only; a repository whose cache is missing or corrupt
    contributes nothing.
    """
    unified = UnifiedIndex()
    for entry in registry.repositories:
        index = store.read_cached_index(entry.name)
        if index is None:
            logger.debug("No usable cached index for %s, skipping", entry.name)
            continue
        unified.add_repo(entry, index)
    return unified
