"""End-to-end tests for sync -> resolve -> pull with a fake transport."""

from pathlib import Path

import pytest

from helm_sync.config.settings import Settings
from helm_sync.core.sync import ChartSync
from helm_sync.errors import (
    ChartNotFound,
    FetchFailed,
    InvalidReference,
    UnreachableRepository,
    VersionNotFound,
)
from tests.fakes import FakeGetter, chart_bytes, serve_repo

HOST = "repo.example.com"
REPO_URL = f"https://{HOST}"


def _sync(test_settings: Settings, getter: FakeGetter) -> ChartSync:
    return ChartSync.from_settings(test_settings, getter=getter)


def test_pull_latest(test_settings: Settings, tmp_path: Path) -> None:
    getter = FakeGetter()
    serve_repo(getter, REPO_URL, {"nginx": ["1.2.0", "1.4.0", "1.3.5"]})
    out = tmp_path / "out"
    out.mkdir()

    result = _sync(test_settings, getter).pull(f"helm://{HOST}/nginx", f"file://{out}")

    assert result.record.version == "1.4.0"
    assert result.record.repo_name == "repo-example-com"
    assert result.path == out / "nginx-1.4.0.tgz"
    assert result.path.read_bytes() == chart_bytes("nginx", "1.4.0")
    assert _sync(test_settings, getter).store.read_registry().names == ["repo-example-com"]


def test_pull_exact_version_from_query(test_settings: Settings, tmp_path: Path) -> None:
    getter = FakeGetter()
    serve_repo(getter, REPO_URL, {"nginx": ["1.2.0", "1.4.0"]})
    target = tmp_path / "nginx.tgz"

    result = _sync(test_settings, getter).pull(f"helm://{HOST}/nginx?version=1.2.0", f"file://{target}")

    assert result.record.version == "1.2.0"
    assert target.read_bytes() == chart_bytes("nginx", "1.2.0")


def test_version_option_conflicting_with_query_fails(test_settings: Settings, tmp_path: Path) -> None:
    getter = FakeGetter()

    with pytest.raises(InvalidReference):
        _sync(test_settings, getter).pull(
            f"helm://{HOST}/nginx?version=1.2.0", f"file://{tmp_path}", version="1.4.0"
        )

    assert getter.requested == []


def test_invalid_source_fails_before_any_mutation(test_settings: Settings, tmp_path: Path) -> None:
    getter = FakeGetter()

    with pytest.raises(InvalidReference):
        _sync(test_settings, getter).pull(f"helm://{HOST}/a/b", f"file://{tmp_path}")

    assert getter.requested == []
    assert not test_settings.repositories_file.exists()


def test_unreachable_repository_is_fatal(test_settings: Settings, tmp_path: Path) -> None:
    with pytest.raises(UnreachableRepository):
        _sync(test_settings, FakeGetter()).pull(f"helm://{HOST}/nginx", f"file://{tmp_path}")

    assert list(tmp_path.glob("*.tgz")) == []


def test_missing_chart_and_version(test_settings: Settings, tmp_path: Path) -> None:
    getter = FakeGetter()
    serve_repo(getter, REPO_URL, {"nginx": ["1.0.0"]})
    sync = _sync(test_settings, getter)

    with pytest.raises(ChartNotFound):
        sync.pull(f"helm://{HOST}/redis", f"file://{tmp_path}")
    with pytest.raises(VersionNotFound):
        sync.pull(f"helm://{HOST}/nginx?version=9.9.9", f"file://{tmp_path}")


def test_resolution_uses_every_cached_repository(test_settings: Settings, tmp_path: Path) -> None:
    """A chart only present in an earlier-registered repository is still found."""
    getter = FakeGetter()
    serve_repo(getter, "https://mirror.example.com", {"nginx": ["2.0.0"], "redis": ["7.0.0"]})
    serve_repo(getter, REPO_URL, {"nginx": ["2.0.0"]})
    sync = _sync(test_settings, getter)
    sync.add_repo("mirror", "https://mirror.example.com")

    redis = sync.pull(f"helm://{HOST}/redis", f"file://{tmp_path}")
    nginx = sync.pull(f"helm://{HOST}/nginx", f"file://{tmp_path}")

    assert redis.record.repo_name == "mirror"
    # Same version in both: the repository registered first wins.
    assert nginx.record.repo_name == "mirror"
    assert nginx.record.download_url == "https://mirror.example.com/charts/nginx-2.0.0.tgz"


def test_lock_timeout_falls_back_to_cached_index(test_settings: Settings, tmp_path: Path) -> None:
    getter = FakeGetter()
    serve_repo(getter, REPO_URL, {"nginx": ["1.0.0"]})
    sync = _sync(test_settings, getter)
    sync.pull(f"helm://{HOST}/nginx", f"file://{tmp_path}")
    (tmp_path / "nginx-1.0.0.tgz").unlink()

    test_settings.lock_timeout = 0.1
    blocked = _sync(test_settings, getter)
    with sync.store.exclusive_lock(timeout=1.0):
        result = blocked.pull(f"helm://{HOST}/nginx", f"file://{tmp_path}")

    assert result.path.read_bytes() == chart_bytes("nginx", "1.0.0")


def test_search_index_reads_cache_only(test_settings: Settings) -> None:
    getter = FakeGetter()
    serve_repo(getter, REPO_URL, {"nginx": ["1.0.0", "1.1.0"]})
    sync = _sync(test_settings, getter)
    sync.add_repo("repo-example-com", REPO_URL)
    requested = len(getter.requested)

    index = sync.unified_index()

    assert [r.version for r in index.get("nginx")] == ["1.0.0", "1.1.0"]
    assert len(getter.requested) == requested


def test_index_refresh_and_download_share_one_deadline(test_settings: Settings, tmp_path: Path) -> None:
    getter = FakeGetter(delay=0.05)
    serve_repo(getter, REPO_URL, {"nginx": ["1.0.0"]})

    _sync(test_settings, getter).pull(f"helm://{HOST}/nginx", f"file://{tmp_path}")

    assert getter.requested == [f"{REPO_URL}/index.yaml", f"{REPO_URL}/charts/nginx-1.0.0.tgz"]
    index_timeout, chart_timeout = getter.timeouts
    assert index_timeout <= test_settings.fetch_timeout
    # The download only gets what the index refresh left over.
    assert chart_timeout < index_timeout - 0.04


def test_slow_index_refresh_exhausts_the_deadline(test_settings: Settings, tmp_path: Path) -> None:
    test_settings.fetch_timeout = 0.1
    getter = FakeGetter(delay=0.2)
    serve_repo(getter, REPO_URL, {"nginx": ["1.0.0"]})
    out = tmp_path / "out"
    out.mkdir()

    with pytest.raises(FetchFailed, match="deadline"):
        _sync(test_settings, getter).pull(f"helm://{HOST}/nginx", f"file://{out}")

    assert getter.requested == [f"{REPO_URL}/index.yaml"]
    assert list(out.iterdir()) == []
