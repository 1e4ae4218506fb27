"""Repository registry models (the repositories.yaml document)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass
class Credentials:
    username: str = ""
    password: str = ""
    ca_file: str = ""
    cert_file: str = ""
    key_file: str = ""
    insecure_skip_tls_verify: bool = False
    pass_credentials_all: bool = False


@dataclass
class RepositoryEntry:
    name: str
    url: str
    credentials: Credentials = field(default_factory=Credentials)

    @classmethod
    def from_dict(cls, d: dict) -> RepositoryEntry:
        return cls(
            name=d.get("name", ""),
            url=d.get("url", ""),
            credentials=Credentials(
                username=d.get("username", "") or "",
                password=d.get("password", "") or "",
                ca_file=d.get("caFile", "") or "",
                cert_file=d.get("certFile", "") or "",
                key_file=d.get("keyFile", "") or "",
                insecure_skip_tls_verify=bool(d.get("insecure_skip_tls_verify", False)),
                pass_credentials_all=bool(d.get("pass_credentials_all", False)),
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        c = self.credentials
        return {
            "name": self.name,
            "url": self.url,
            "username": c.username,
            "password": c.password,
            "caFile": c.ca_file,
            "certFile": c.cert_file,
            "keyFile": c.key_file,
            "insecure_skip_tls_verify": c.insecure_skip_tls_verify,
            "pass_credentials_all": c.pass_credentials_all,
        }


@dataclass
class Registry:
    """Ordered mapping of repository name to entry.

    Registration order is preserved; it decides resolution tie-breaks.
    """

    api_version: str = "v1"
    generated: str = ""
    repositories: list[RepositoryEntry] = field(default_factory=list)

    def has(self, name: str) -> bool:
        return self.get(name) is not None

    def get(self, name: str) -> RepositoryEntry | None:
        for entry in self.repositories:
            if entry.name == name:
                return entry
        return None

    def update(self, entry: RepositoryEntry) -> None:
        """Insert *entry*, or replace the existing entry of the same name in place."""
        for i, existing in enumerate(self.repositories):
            if existing.name == entry.name:
                self.repositories[i] = entry
                return
        self.repositories.append(entry)

    @property
    def names(self) -> list[str]:
        return [r.name for r in self.repositories]

    @classmethod
    def from_dict(cls, d: dict | None) -> Registry:
        if not d:
            return cls()
        registry = cls(
            api_version=d.get("apiVersion", "v1") or "v1",
            generated=str(d.get("generated", "") or ""),
        )
        # Later duplicates overwrite earlier ones so names stay unique.
        for raw in d.get("repositories") or []:
            if isinstance(raw, dict) and raw.get("name"):
                registry.update(RepositoryEntry.from_dict(raw))
        return registry

    def to_dict(self) -> dict[str, Any]:
        generated = self.generated or datetime.now(timezone.utc).isoformat()
        return {
            "apiVersion": self.api_version,
            "generated": generated,
            "repositories": [r.to_dict() for r in self.repositories],
        }


@dataclass
class Registration:
    entry: RepositoryEntry
    updated: bool = False  # False when the entry was newly added
