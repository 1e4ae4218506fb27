"""Tests for downloading and caching repository indexes."""

import pytest

from helm_sync.core.index_fetcher import IndexFetcher, index_url
from helm_sync.core.metadata_store import MetadataStore
from helm_sync.errors import FetchFailed
from helm_sync.models.repo import RepositoryEntry
from tests.fakes import FakeGetter, make_index

ENTRY = RepositoryEntry(name="charts", url="https://charts.example.com/stable/")


def test_index_url_strips_trailing_slash() -> None:
    assert index_url(ENTRY.url) == "https://charts.example.com/stable/index.yaml"


def test_fetch_caches_raw_index(store: MetadataStore) -> None:
    raw = make_index({"nginx": ["1.0.0", "1.1.0"]})
    getter = FakeGetter(responses={index_url(ENTRY.url): raw})

    index = IndexFetcher(store, getter).fetch(ENTRY)

    assert [cv.version for cv in index.entries["nginx"]] == ["1.0.0", "1.1.0"]
    assert store.index_path("charts").read_bytes() == raw


def test_transport_failure_keeps_previous_cache(store: MetadataStore) -> None:
    raw = make_index({"nginx": ["1.0.0"]})
    getter = FakeGetter(responses={index_url(ENTRY.url): raw})
    fetcher = IndexFetcher(store, getter)
    fetcher.fetch(ENTRY)

    getter.failures[index_url(ENTRY.url)] = "503 Service Unavailable"
    with pytest.raises(FetchFailed):
        fetcher.fetch(ENTRY)

    assert store.index_path("charts").read_bytes() == raw


@pytest.mark.parametrize(
    "body",
    [
        b"entries: [broken",
        b"- just\n- a list\n",
        b"entries: {}\n",
        b"apiVersion: v1\nentries: [1, 2]\n",
    ],
)
def test_invalid_index_is_rejected_and_not_cached(store: MetadataStore, body: bytes) -> None:
    getter = FakeGetter(responses={index_url(ENTRY.url): body})

    with pytest.raises(FetchFailed):
        IndexFetcher(store, getter).fetch(ENTRY)

    assert not store.index_path("charts").exists()


def test_invalid_chart_versions_are_skipped(store: MetadataStore) -> None:
    body = b"""apiVersion: v1
entries:
  nginx:
  - {name: nginx, version: 1.0.0, urls: [nginx-1.0.0.tgz]}
  - {name: nginx, urls: [nginx-unknown.tgz]}
  - {name: nginx, version: 2.0.0}
  empty:
  - {name: empty}
"""
    getter = FakeGetter(responses={index_url(ENTRY.url): body})

    index = IndexFetcher(store, getter).fetch(ENTRY)

    assert index.chart_names == ["nginx"]
    assert [cv.version for cv in index.versions()] == ["1.0.0"]


def test_wrongly_typed_entries_are_skipped(store: MetadataStore) -> None:
    """Valid YAML with non-list chart entries or URLs is not fatal."""
    body = b"""apiVersion: v1
entries:
  broken: 5
  nginx:
  - {name: nginx, version: 1.0.0, urls: 7}
  - {name: nginx, version: 1.1.0, urls: "https://charts.example.com/nginx-1.1.0.tgz"}
  - {name: nginx, version: 1.2.0, urls: [nginx-1.2.0.tgz], annotations: [x]}
"""
    getter = FakeGetter(responses={index_url(ENTRY.url): body})

    index = IndexFetcher(store, getter).fetch(ENTRY)

    assert index.chart_names == ["nginx"]
    assert [(cv.version, cv.urls) for cv in index.versions()] == [("1.2.0", ["nginx-1.2.0.tgz"])]
    assert index.versions()[0].annotations == {}


def test_explicit_timeout_overrides_default(store: MetadataStore) -> None:
    getter = FakeGetter(responses={index_url(ENTRY.url): make_index({"nginx": ["1.0.0"]})})
    fetcher = IndexFetcher(store, getter, timeout=30.0)

    fetcher.fetch(ENTRY)
    fetcher.fetch(ENTRY, timeout=1.5)
    with pytest.raises(FetchFailed, match="deadline"):
        fetcher.fetch(ENTRY, timeout=0.0)

    assert getter.timeouts == [30.0, 1.5]
