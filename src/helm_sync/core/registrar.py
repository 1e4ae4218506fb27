"""Add or update a repository in the registry."""

from __future__ import annotations

import logging
from urllib.parse import urlparse

from helm_sync.core.index_fetcher import IndexFetcher
from helm_sync.core.metadata_store import MetadataStore
from helm_sync.errors import FetchFailed, InvalidReference, UnreachableRepository
from helm_sync.models.repo import Credentials, Registration, RepositoryEntry

logger = logging.getLogger(__name__)


class Registrar:
    def __init__(
        self,
        store: MetadataStore,
        fetcher: IndexFetcher,
        lock_timeout: float = 30.0,
        lock_poll_interval: float = 1.0,
    ):
        self.store = store
        self.fetcher = fetcher
        self.lock_timeout = lock_timeout
        self.lock_poll_interval = lock_poll_interval

    def register(
        self,
        name: str,
        url: str,
        credentials: Credentials | None = None,
        timeout: float | None = None,
    ) -> Registration:
        """Upsert repository *name* and persist it once its index is reachable.

        The whole load/probe/persist cycle runs under the registry lock.  If
        the probe fails the registry file is not written at all.  *timeout*
        overrides the fetcher's default for the probe download.
        """
        _validate_repo_url(url)
        if not name:
            raise InvalidReference(url, "repository name must not be empty")
        entry = RepositoryEntry(name=name, url=url.rstrip("/"), credentials=credentials or Credentials())

        with self.store.exclusive_lock(self.lock_timeout, self.lock_poll_interval):
            registry = self.store.read_registry()
            existed = registry.has(name)
            registry.update(entry)

            try:
                self.fetcher.fetch(entry, timeout=timeout)
            except FetchFailed as err:
                raise UnreachableRepository(name, entry.url, err.reason) from err

            self.store.write_registry(registry)

        if existed:
            logger.info("%r has been updated in your repositories", name)
        else:
            logger.info("%r has been added to your repositories", name)
        return Registration(entry=entry, updated=existed)


def _validate_repo_url(url: str) -> None:
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https", "file"):
        raise InvalidReference(url, "repository URL must use http, https or file")
    if parsed.scheme != "file" and not parsed.netloc:
        raise InvalidReference(url, "repository URL has no host")
