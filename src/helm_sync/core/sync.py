"""Synchronize, resolve, pull: the single-shot client operation."""

from __future__ import annotations

import logging
import time
from dataclasses import replace

from helm_sync.config.settings import Settings
from helm_sync.core.getter import Getter, HttpGetter
from helm_sync.core.index_fetcher import IndexFetcher
from helm_sync.core.locator import parse_source, parse_target
from helm_sync.core.metadata_store import MetadataStore
from helm_sync.core.puller import pull
from helm_sync.core.registrar import Registrar
from helm_sync.core.resolver import resolve
from helm_sync.core.unified_index import UnifiedIndex, build_unified_index
from helm_sync.errors import InvalidReference, LockTimeout, StorageError
from helm_sync.models import OverwritePolicy
from helm_sync.models.reference import PullResult
from helm_sync.models.repo import Credentials, Registration

logger = logging.getLogger(__name__)


class ChartSync:
    """Wires the store, fetcher, registrar and puller together."""

    def __init__(self, store: MetadataStore, getter: Getter, settings: Settings):
        self.store = store
        self.getter = getter
        self.settings = settings
        self.fetcher = IndexFetcher(store, getter, timeout=settings.fetch_timeout)
        self.registrar = Registrar(
            store,
            self.fetcher,
            lock_timeout=settings.lock_timeout,
            lock_poll_interval=settings.lock_poll_interval,
        )

    @classmethod
    def from_settings(cls, settings: Settings, getter: Getter | None = None) -> ChartSync:
        store = MetadataStore(settings.repositories_file, settings.index_cache_dir)
        return cls(store, getter or HttpGetter(), settings)

    def add_repo(self, name: str, url: str, credentials: Credentials | None = None) -> Registration:
        return self.registrar.register(name, url, credentials)

    def unified_index(self) -> UnifiedIndex:
        return build_unified_index(self.store, self.store.read_registry())

    def pull(
        self,
        source: str,
        target: str,
        version: str | None = None,
        overwrite: OverwritePolicy = OverwritePolicy.OVERWRITE,
    ) -> PullResult:
        """Register the source repository, refresh it, resolve the chart and pull it.

        The index refresh and the chart download share one deadline of
        ``settings.fetch_timeout`` seconds.
        """
        ref = parse_source(source)
        pull_target = parse_target(target, overwrite)
        if version is not None:
            if ref.version is not None and ref.version != version:
                raise InvalidReference(
                    source, f"version {ref.version!r} in URI conflicts with requested {version!r}"
                )
            ref = replace(ref, version=version)

        deadline = time.monotonic() + self.settings.fetch_timeout
        try:
            self.registrar.register(
                ref.repository_name, ref.repository_url, timeout=_remaining(deadline)
            )
        except (LockTimeout, StorageError) as err:
            # A previously cached index for the repository can still serve the pull.
            logger.warning(
                "failed to add helm repository %r prior to pull, using cached state: %s",
                ref.repository_name, err,
            )

        registry = self.store.read_registry()
        index = build_unified_index(self.store, registry)
        logger.debug("Unified index covers %d repositories", len(index.repo_names))

        record = resolve(index, ref.chart_name, ref.version)
        path = pull(
            record,
            pull_target,
            self.getter,
            timeout=_remaining(deadline),
            entry=registry.get(record.repo_name),
        )
        return PullResult(reference=ref, record=record, path=path)


def _remaining(deadline: float) -> float:
    return max(deadline - time.monotonic(), 0.0)
