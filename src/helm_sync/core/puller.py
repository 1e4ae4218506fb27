"""Download a resolved chart archive to its target path."""

from __future__ import annotations

import hashlib
import logging
import os
import tempfile
from pathlib import Path

from helm_sync.core.getter import Getter
from helm_sync.errors import FetchFailed, StorageError, TargetExists
from helm_sync.models import OverwritePolicy
from helm_sync.models.reference import IndexRecord, PullTarget
from helm_sync.models.repo import RepositoryEntry

logger = logging.getLogger(__name__)


def target_file(record: IndexRecord, target: PullTarget) -> Path:
    """An existing directory receives ``<chart>-<version>.tgz``; anything else is the file itself."""
    if target.path.is_dir():
        return target.path / f"{record.chart.name}-{record.version}.tgz"
    return target.path


def pull(
    record: IndexRecord,
    target: PullTarget,
    getter: Getter,
    timeout: float = 120.0,
    entry: RepositoryEntry | None = None,
) -> Path:
    """Fetch the chart archive for *record* and move it into place.

    Bytes land in a temp file beside the destination and are renamed over
    it only after the download and digest check succeed; on failure the
    temp file is removed and the destination is untouched.
    """
    dest = target_file(record, target)
    if target.overwrite is OverwritePolicy.FAIL_IF_EXISTS and dest.exists():
        raise TargetExists(dest)

    url = record.download_url
    if not record.chart.download_url:
        raise FetchFailed(url, f"{record.chart.name} {record.version} has no download URL")
    if timeout <= 0:
        raise FetchFailed(url, "deadline exceeded before the download started")

    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=dest.parent, prefix=f".{dest.name}.", suffix=".part")
    except OSError as err:
        raise StorageError(dest, f"cannot create temporary file: {err}") from err

    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as handle:
            data = getter.get(url, timeout=timeout, entry=entry)
            _verify_digest(url, data, record.chart.digest)
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, dest)
    except OSError as err:
        tmp_path.unlink(missing_ok=True)
        raise StorageError(dest, f"cannot write chart archive: {err}") from err
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise

    logger.info("Pulled %s %s from %s to %s", record.chart.name, record.version, record.repo_name, dest)
    return dest


def _verify_digest(url: str, data: bytes, digest: str) -> None:
    if not digest:
        return
    expected = digest.split(":", 1)[1] if digest.startswith("sha256:") else digest
    actual = hashlib.sha256(data).hexdigest()
    if actual.lower() != expected.lower():
        raise FetchFailed(url, f"digest mismatch: expected {expected}, got {actual}")
