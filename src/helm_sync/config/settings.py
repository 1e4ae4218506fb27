"""Application configuration and defaults."""

from __future__ import annotations

import os
import platform
from dataclasses import dataclass, field
from pathlib import Path


def _default_helm_cache_dir() -> Path:
    """Return the default Helm repository cache directory for the current platform.

    Checks HELM_REPOSITORY_CACHE and HELM_CACHE_HOME env vars first,
    matching helm's own resolution order.
    """
    repo_cache = os.environ.get("HELM_REPOSITORY_CACHE", "")
    if repo_cache:
        return Path(repo_cache)
    cache_home = os.environ.get("HELM_CACHE_HOME", "")
    if cache_home:
        return Path(cache_home) / "repository"
    system = platform.system()
    if system == "Windows":
        # Helm on Windows uses %TEMP%\helm as default cache home
        temp = os.environ.get("TEMP", "")
        if temp:
            candidate = Path(temp) / "helm" / "repository"
            if candidate.exists():
                return candidate
        appdata = os.environ.get("APPDATA", "")
        if appdata:
            return Path(appdata) / "helm" / "repository"
        return Path.home() / "AppData" / "Roaming" / "helm" / "repository"
    # Linux / macOS
    xdg = os.environ.get("XDG_CACHE_HOME", "")
    if xdg:
        return Path(xdg) / "helm" / "repository"
    return Path.home() / ".cache" / "helm" / "repository"


def _default_helm_config_dir() -> Path:
    config_home = os.environ.get("HELM_CONFIG_HOME", "")
    if config_home:
        return Path(config_home)
    system = platform.system()
    if system == "Windows":
        appdata = os.environ.get("APPDATA", "")
        if appdata:
            return Path(appdata) / "helm"
        return Path.home() / "AppData" / "Roaming" / "helm"
    xdg = os.environ.get("XDG_CONFIG_HOME", "")
    if xdg:
        return Path(xdg) / "helm"
    return Path.home() / ".config" / "helm"


def _default_repositories_file() -> Path:
    repo_config = os.environ.get("HELM_REPOSITORY_CONFIG", "")
    if repo_config:
        return Path(repo_config)
    return _default_helm_config_dir() / "repositories.yaml"


def _default_fetch_timeout() -> float:
    raw = os.environ.get("HSYNC_FETCH_TIMEOUT", "")
    try:
        return float(raw) if raw else 120.0
    except ValueError:
        return 120.0


@dataclass
class Settings:
    repositories_file: Path = field(default_factory=_default_repositories_file)
    helm_cache_dir: Path = field(default_factory=_default_helm_cache_dir)
    lock_timeout: float = 30.0  # seconds to wait for the registry lock
    lock_poll_interval: float = 1.0
    fetch_timeout: float = field(default_factory=_default_fetch_timeout)

    @property
    def index_cache_dir(self) -> Path:
        return self.helm_cache_dir


# Default instance for the CLI; core code receives paths explicitly.
settings = Settings()
