"""Transport used to download index documents and chart archives."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from pathlib import Path
from urllib.parse import unquote, urlparse

import requests

from helm_sync.errors import FetchFailed
from helm_sync.models.repo import RepositoryEntry

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


class Getter(ABC):
    """Fetches the bytes behind a URL.

    Implementations raise FetchFailed for every transport problem and must
    not return partial content.
    """

    @abstractmethod
    def get(self, url: str, *, timeout: float, entry: RepositoryEntry | None = None) -> bytes:
        """Return the full body of *url* or raise FetchFailed."""


class HttpGetter(Getter):
    """requests-backed getter for http(s) and file URLs."""

    def __init__(self, session: requests.Session | None = None, user_agent: str = "helm-sync"):
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", user_agent)

    def get(self, url: str, *, timeout: float, entry: RepositoryEntry | None = None) -> bytes:
        parsed = urlparse(url)
        if parsed.scheme == "file":
            return self._get_file(url, parsed.path)
        if parsed.scheme not in ("http", "https"):
            raise FetchFailed(url, f"unsupported URL scheme {parsed.scheme!r}")

        kwargs = self._request_options(url, entry)
        deadline = time.monotonic() + timeout
        logger.debug("GET %s", url)
        try:
            with self.session.get(url, stream=True, timeout=timeout, **kwargs) as response:
                response.raise_for_status()
                chunks: list[bytes] = []
                for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                    if time.monotonic() > deadline:
                        raise FetchFailed(url, f"transfer exceeded {timeout:g}s deadline")
                    chunks.append(chunk)
        except requests.RequestException as err:
            raise FetchFailed(url, str(err)) from err
        return b"".join(chunks)

    @staticmethod
    def _get_file(url: str, path: str) -> bytes:
        try:
            return Path(unquote(path)).read_bytes()
        except OSError as err:
            raise FetchFailed(url, str(err)) from err

    @staticmethod
    def _request_options(url: str, entry: RepositoryEntry | None) -> dict:
        if entry is None:
            return {}
        creds = entry.credentials
        options: dict = {}
        if creds.username or creds.password:
            # Credentials only go to the repository's own host unless told otherwise.
            same_host = urlparse(url).netloc == urlparse(entry.url).netloc
            if same_host or creds.pass_credentials_all:
                options["auth"] = (creds.username, creds.password)
        if creds.insecure_skip_tls_verify:
            options["verify"] = False
        elif creds.ca_file:
            options["verify"] = creds.ca_file
        if creds.cert_file and creds.key_file:
            options["cert"] = (creds.cert_file, creds.key_file)
        return options
