"""Per-invocation request models: what to pull and where to put it."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urljoin

from helm_sync.models import OverwritePolicy
from helm_sync.models.chart import ChartVersion


@dataclass(frozen=True)
class ArtifactReference:
    repository_host: str
    chart_name: str
    version: str | None = None
    raw: str = ""

    @property
    def repository_name(self) -> str:
        return repo_name_for_host(self.repository_host)

    @property
    def repository_url(self) -> str:
        return "https://" + self.repository_host


@dataclass(frozen=True)
class PullTarget:
    path: Path
    overwrite: OverwritePolicy = OverwritePolicy.OVERWRITE


@dataclass(frozen=True)
class IndexRecord:
    """A chart version tagged with the repository it came from."""

    repo_name: str
    repo_url: str
    chart: ChartVersion

    @property
    def version(self) -> str:
        return self.chart.version

    @property
    def download_url(self) -> str:
        """Chart URL, resolved against the repository URL when relative."""
        return urljoin(self.repo_url.rstrip("/") + "/", self.chart.download_url)


@dataclass
class PullResult:
    reference: ArtifactReference
    record: IndexRecord
    path: Path


def repo_name_for_host(host: str) -> str:
    return host.replace(".", "-")
