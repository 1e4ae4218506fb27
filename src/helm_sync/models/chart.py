"""Chart index models."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


def _scalar(value: object) -> str:
    """Stringify scalars; mappings and lists become empty."""
    if value is None or isinstance(value, (dict, list)):
        return ""
    return str(value)


@dataclass
class ChartVersion:
    """One published version of a chart, as listed in a repository index."""

    name: str = ""
    version: str = ""
    app_version: str = ""
    description: str = ""
    urls: list[str] = field(default_factory=list)
    digest: str = ""
    created: str = ""
    deprecated: bool = False
    annotations: dict[str, str] = field(default_factory=dict)

    @property
    def download_url(self) -> str:
        return self.urls[0] if self.urls else ""

    @classmethod
    def from_dict(cls, d: dict, name: str = "") -> ChartVersion:
        """Build a chart version; fields of the wrong type are dropped.

        A ``urls`` value that is not a list yields no URLs, so the entry is
        rejected by the index rather than split into characters.
        """
        urls = d.get("urls")
        annotations = d.get("annotations")
        return cls(
            name=str(d.get("name", "") or name),
            version=_scalar(d.get("version")),
            app_version=_scalar(d.get("appVersion")),
            description=_scalar(d.get("description")),
            urls=[u for u in urls if isinstance(u, str) and u] if isinstance(urls, list) else [],
            digest=_scalar(d.get("digest")),
            created=_scalar(d.get("created")),
            deprecated=d.get("deprecated") is True,
            annotations=annotations if isinstance(annotations, dict) else {},
        )


@dataclass
class RepositoryIndex:
    api_version: str = ""
    generated: str = ""
    entries: dict[str, list[ChartVersion]] = field(default_factory=dict)

    @property
    def chart_names(self) -> list[str]:
        return list(self.entries)

    def versions(self) -> list[ChartVersion]:
        """All chart versions in document order."""
        return [cv for chart_versions in self.entries.values() for cv in chart_versions]

    @classmethod
    def from_dict(cls, d: dict) -> RepositoryIndex:
        """Build an index from a parsed index.yaml document.

        Raises ValueError when the document is not a chart repository index.
        Individual versions without a version string or download URL are
        skipped, the rest of the index stays usable.
        """
        if not isinstance(d, dict):
            raise ValueError("index document is not a mapping")
        if not d.get("apiVersion"):
            raise ValueError("no API version specified")
        raw_entries = d.get("entries") or {}
        if not isinstance(raw_entries, dict):
            raise ValueError("'entries' is not a mapping")

        entries: dict[str, list[ChartVersion]] = {}
        for chart_name, chart_entries in raw_entries.items():
            kept: list[ChartVersion] = []
            if not isinstance(chart_entries, list):
                logger.warning("skipping chart %r: index entries are not a list", chart_name)
                continue
            for raw in chart_entries:
                if not isinstance(raw, dict):
                    continue
                cv = ChartVersion.from_dict(raw, name=str(chart_name))
                if not cv.version or not cv.urls:
                    logger.warning("skipping invalid entry for chart %r in index", chart_name)
                    continue
                kept.append(cv)
            if kept:
                entries[str(chart_name)] = kept
        return cls(
            api_version=str(d["apiVersion"]),
            generated=str(d.get("generated", "") or ""),
            entries=entries,
        )
