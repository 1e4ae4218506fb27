"""Error taxonomy for repository sync, resolution and pull."""

from __future__ import annotations

from pathlib import Path


class HelmSyncError(Exception):
    """Base class for every failure surfaced by the sync engine."""


class InvalidReference(HelmSyncError):
    """Raised when a source or target locator is malformed."""

    def __init__(self, reference: str, reason: str):
        self.reference = reference
        self.reason = reason
        super().__init__(f"invalid reference {reference!r}: {reason}")


class FetchFailed(HelmSyncError):
    """Raised when an index or artifact cannot be downloaded or parsed."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"failed to fetch {url}: {reason}")


class UnreachableRepository(HelmSyncError):
    """Raised when the reachability probe of a repository fails."""

    def __init__(self, name: str, url: str, reason: str = ""):
        self.name = name
        self.url = url
        message = f"looks like {url!r} is not a valid chart repository or cannot be reached"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class LockTimeout(HelmSyncError):
    """Raised when the registry lock cannot be acquired in time."""

    def __init__(self, lock_path: Path, timeout: float):
        self.lock_path = lock_path
        self.timeout = timeout
        super().__init__(f"timed out after {timeout:g}s waiting for lock {lock_path}")


class ChartNotFound(HelmSyncError):
    def __init__(self, chart_name: str):
        self.chart_name = chart_name
        super().__init__(f"chart {chart_name!r} not found in any repository index")


class VersionNotFound(HelmSyncError):
    def __init__(self, chart_name: str, version: str):
        self.chart_name = chart_name
        self.version = version
        super().__init__(f"chart {chart_name!r} has no version {version!r}")


class StorageError(HelmSyncError):
    """Raised on local filesystem failures (registry, cache or pull target)."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class TargetExists(HelmSyncError):
    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"target {path} already exists and overwrite is disabled")
