# cityindex/DB/http_source.py
from __future__ import annotations
import logging
from typing import Any, Optional

import requests

from .api import ArtifactFetchError, ArtifactNotFound
from .. import config as CFG

log = logging.getLogger(__name__)


class HttpSource:
    """Artifacts served by any static file server; one GET per artifact."""
    def __init__(self, base_url: str, *, timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None) -> None:
        self.base_url = base_url.rstrip("/") + "/"
        self.timeout = CFG.HTTP_TIMEOUT if timeout is None else float(timeout)
        self._session = session or requests.Session()

    def url_for(self, name: str) -> str:
        return self.base_url + name.lstrip("/")

    def fetch(self, name: str) -> Any:
        url = self.url_for(name)
        log.debug("GET %s", url)
        try:
            resp = self._session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ArtifactFetchError(name, str(exc)) from exc
        if resp.status_code == 404:
            raise ArtifactNotFound(name, "HTTP 404")
        if not resp.ok:
            raise ArtifactFetchError(name, f"HTTP {resp.status_code}")
        try:
            return resp.json()
        except ValueError as exc:
            raise ArtifactFetchError(name, f"invalid JSON ({exc})") from exc

    def close(self) -> None:
        self._session.close()
