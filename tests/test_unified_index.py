"""Tests for merging cached indexes."""

import yaml

from helm_sync.core.metadata_store import MetadataStore
from helm_sync.core.unified_index import build_unified_index
from helm_sync.models.chart import RepositoryIndex
from helm_sync.models.repo import Registry, RepositoryEntry
from tests.fakes import make_index


def _cache(store: MetadataStore, name: str, charts: dict[str, list[str]]) -> None:
    raw = make_index(charts)
    store.write_cached_index(name, raw, RepositoryIndex.from_dict(yaml.safe_load(raw)))


def _registry(*names: str) -> Registry:
    registry = Registry()
    for name in names:
        registry.update(RepositoryEntry(name=name, url=f"https://{name}.example.com"))
    return registry


def test_records_keep_registration_order_and_provenance(store: MetadataStore) -> None:
    _cache(store, "second", {"nginx": ["2.0.0"]})
    _cache(store, "first", {"nginx": ["1.0.0"], "redis": ["7.0.0"]})

    index = build_unified_index(store, _registry("first", "second"))

    assert [(r.repo_name, r.version) for r in index.get("nginx")] == [
        ("first", "1.0.0"),
        ("second", "2.0.0"),
    ]
    assert index.get("redis")[0].repo_url == "https://first.example.com"
    assert index.chart_names == ["nginx", "redis"]


def test_missing_and_corrupt_caches_contribute_nothing(store: MetadataStore) -> None:
    _cache(store, "good", {"nginx": ["1.0.0"]})
    store.index_path("corrupt").write_text("{{{", encoding="utf-8")

    index = build_unified_index(store, _registry("missing", "corrupt", "good"))

    assert index.repo_names == ["good"]
    assert [r.repo_name for r in index.all()] == ["good"]


def test_unregistered_caches_are_ignored(store: MetadataStore) -> None:
    _cache(store, "orphan", {"nginx": ["9.0.0"]})

    index = build_unified_index(store, _registry())

    assert "nginx" not in index
    assert index.get("nginx") == []


def test_structurally_invalid_cache_does_not_hide_healthy_repo(store: MetadataStore) -> None:
    _cache(store, "healthy", {"nginx": ["1.0.0"]})
    store.index_path("mangled").write_text(
        "apiVersion: v1\nentries:\n  nginx: 5\n  redis:\n  - {version: 1.0.0, urls: 7}\n",
        encoding="utf-8",
    )
    store.index_path("listy").write_text("apiVersion: v1\nentries: [nginx]\n", encoding="utf-8")

    index = build_unified_index(store, _registry("mangled", "listy", "healthy"))

    assert [(r.repo_name, r.version) for r in index.all()] == [("healthy", "1.0.0")]
