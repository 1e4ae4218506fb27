"""Download a repository's index.yaml and refresh the local cache."""

from __future__ import annotations

import logging

import yaml

from helm_sync.core.getter import Getter
from helm_sync.core.metadata_store import MetadataStore
from helm_sync.errors import FetchFailed, StorageError
from helm_sync.models.chart import RepositoryIndex
from helm_sync.models.repo import RepositoryEntry

logger = logging.getLogger(__name__)

_YamlLoader = getattr(yaml, "CSafeLoader", yaml.SafeLoader)


def index_url(repo_url: str) -> str:
    return repo_url.rstrip("/") + "/index.yaml"


class IndexFetcher:
    """The only writer of cached index files."""

    def __init__(self, store: MetadataStore, getter: Getter, timeout: float = 120.0):
        self.store = store
        self.getter = getter
        self.timeout = timeout

    def fetch(self, entry: RepositoryEntry, timeout: float | None = None) -> RepositoryIndex:
        """Download, validate and cache the index of *entry*.

        Any failure leaves the previously cached index untouched.
        """
        url = index_url(entry.url)
        if timeout is None:
            timeout = self.timeout
        if timeout <= 0:
            raise FetchFailed(url, "deadline exceeded before the download started")
        raw = self.getter.get(url, timeout=timeout, entry=entry)
        try:
            index = RepositoryIndex.from_dict(yaml.load(raw, Loader=_YamlLoader))
        except yaml.YAMLError as err:
            raise FetchFailed(url, f"index is not valid YAML: {err}") from err
        except ValueError as err:
            raise FetchFailed(url, f"not a chart repository index: {err}") from err

        try:
            path = self.store.write_cached_index(entry.name, raw, index)
        except StorageError as err:
            raise FetchFailed(url, str(err)) from err
        logger.debug(
            "Cached index for %s at %s (%d charts)", entry.name, path, len(index.entries)
        )
        return index
