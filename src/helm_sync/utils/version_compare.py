"""Semver comparison utilities."""

from __future__ import annotations

import re

import semver
from packaging.version import Version, InvalidVersion

# Helm accepts a leading "v" and missing minor/patch ("1.2" == "1.2.0").
_SEMVER_RE = re.compile(
    r"^v?(?P<major>0|[1-9]\d*)"
    r"(?:\.(?P<minor>0|[1-9]\d*))?"
    r"(?:\.(?P<patch>0|[1-9]\d*))?"
    r"(?:-(?P<prerelease>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)


def parse_version(v: str) -> semver.Version | None:
    """Parse a chart version as semver, returning None on failure."""
    match = _SEMVER_RE.match(v)
    if match is None:
        return None
    return semver.Version(
        major=int(match["major"]),
        minor=int(match["minor"] or 0),
        patch=int(match["patch"] or 0),
        prerelease=match["prerelease"],
        build=match["build"],
    )


def _parse_pep440(v: str) -> Version | None:
    try:
        return Version(v)
    except InvalidVersion:
        # Try stripping leading 'v'
        if v.startswith("v"):
            try:
                return Version(v[1:])
            except InvalidVersion:
                pass
    return None


def version_key(v: str) -> tuple:
    """Sort key: semver first, then PEP 440-only strings, then anything else.

    Keys only compare within their own tier, so semver precedence decides
    between any two semver versions.
    """
    sv = parse_version(v)
    if sv is not None:
        return (2, sv)
    pv = _parse_pep440(v)
    if pv is not None:
        return (1, pv)
    return (0,)


def is_newer(current: str, candidate: str) -> bool:
    """Return True if candidate ranks strictly above current."""
    return version_key(candidate) > version_key(current)
