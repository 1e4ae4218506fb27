"""Parse ``helm://`` source and ``file://`` target locators."""

from __future__ import annotations

from pathlib import Path
from urllib.parse import parse_qs, unquote, urlparse

from helm_sync.errors import InvalidReference
from helm_sync.models import OverwritePolicy
from helm_sync.models.reference import ArtifactReference, PullTarget

SOURCE_SCHEME = "helm"
TARGET_SCHEME = "file"


def parse_source(locator: str) -> ArtifactReference:
    """``helm://<host>/<chart>[?version=<v>]`` -> ArtifactReference."""
    try:
        parsed = urlparse(locator)
    except ValueError as err:
        raise InvalidReference(locator, str(err)) from err

    if parsed.scheme != SOURCE_SCHEME:
        raise InvalidReference(locator, "source URI must be a helm chart (helm://host/chart)")
    if not parsed.netloc:
        raise InvalidReference(locator, "source URI has no repository host")

    chart_name = unquote(parsed.path[1:] if parsed.path.startswith("/") else parsed.path)
    if not chart_name:
        raise InvalidReference(locator, "source URI does not name a chart")
    if "/" in chart_name:
        raise InvalidReference(
            locator,
            f"helm source URI must contain a single path segment (the chart name), was {chart_name!r}",
        )

    version = None
    query = parse_qs(parsed.query, keep_blank_values=True)
    if "version" in query:
        values = query["version"]
        if len(values) != 1 or not values[0]:
            raise InvalidReference(locator, "version must be given exactly once and be non-empty")
        version = values[0]

    return ArtifactReference(
        repository_host=parsed.netloc,
        chart_name=chart_name,
        version=version,
        raw=locator,
    )


def parse_target(locator: str, overwrite: OverwritePolicy = OverwritePolicy.OVERWRITE) -> PullTarget:
    """``file://<path>`` -> PullTarget; ``file://./x`` and ``file:///abs/x`` both work."""
    try:
        parsed = urlparse(locator)
    except ValueError as err:
        raise InvalidReference(locator, str(err)) from err

    if parsed.scheme != TARGET_SCHEME:
        raise InvalidReference(locator, "target URI must be a file (file://path)")
    netloc = "" if parsed.netloc == "localhost" else parsed.netloc
    raw_path = unquote(netloc + parsed.path)
    if not raw_path:
        raise InvalidReference(locator, "target URI has no path")
    return PullTarget(path=Path(raw_path), overwrite=overwrite)
