"""Pick exactly one chart version from the unified index."""

from __future__ import annotations

import logging

from helm_sync.core.unified_index import UnifiedIndex
from helm_sync.errors import ChartNotFound, VersionNotFound
from helm_sync.models.reference import IndexRecord
from helm_sync.utils.version_compare import is_newer

logger = logging.getLogger(__name__)


def resolve(index: UnifiedIndex, chart_name: str, version: str | None = None) -> IndexRecord:
    """Return the single record for *chart_name*.

    With *version*, the record must match it exactly.  Without, the highest
    version wins; unparseable versions rank below every parseable one.  In
    both cases a tie goes to the repository that was registered first.
    """
    records = index.get(chart_name)
    if not records:
        raise ChartNotFound(chart_name)

    if version is not None:
        matches = [r for r in records if r.version == version]
        if not matches:
            raise VersionNotFound(chart_name, version)
        chosen = matches[0]
        others = sorted({r.repo_name for r in matches[1:]} - {chosen.repo_name})
        if others:
            logger.debug(
                "%s %s also published by %s; using %s",
                chart_name, version, ", ".join(others), chosen.repo_name,
            )
        return chosen

    best = records[0]
    for record in records[1:]:
        if is_newer(best.version, record.version):
            best = record
    return best
