from pathlib import Path

import pytest

from helm_sync.config.settings import Settings
from helm_sync.core.metadata_store import MetadataStore


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    return Settings(
        repositories_file=tmp_path / "config" / "repositories.yaml",
        helm_cache_dir=tmp_path / "cache",
        lock_timeout=2.0,
        lock_poll_interval=0.01,
        fetch_timeout=5.0,
    )


@pytest.fixture
def store(test_settings: Settings) -> MetadataStore:
    return MetadataStore(test_settings.repositories_file, test_settings.index_cache_dir)
