"""Data models for helm-sync."""

from __future__ import annotations

import enum


class OverwritePolicy(enum.Enum):
    OVERWRITE = "overwrite"
    FAIL_IF_EXISTS = "fail-if-exists"
