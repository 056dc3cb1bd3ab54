# cityindex/DB/api.py
from __future__ import annotations
from typing import Any, Protocol


class ArtifactFetchError(RuntimeError):
    """An artifact could not be fetched (missing file, non-2xx status, bad JSON)."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"Failed to load {name}: {reason}")
        self.name = name
        self.reason = reason


class ArtifactNotFound(ArtifactFetchError):
    """The artifact does not exist (missing file, HTTP 404)."""


class ArtifactSource(Protocol):
    # Read one JSON artifact by its name relative to the artifact root
    def fetch(self, name: str) -> Any: ...
    # lifecycle
    def close(self) -> None: ...


def make_source(location: str, *, timeout: float | None = None) -> ArtifactSource:
    """
    Factory:
      - http://host/cities, https://... -> HttpSource (GET through requests)
      - file:///path or a plain path   -> DirectorySource (built output directory)
    """
    if location.startswith(("http://", "https://")):
        from .http_source import HttpSource
        return HttpSource(location, timeout=timeout)

    path = location.removeprefix("file://")
    if not path:
        raise ValueError(f"Unsupported artifact location: {location!r}")
    from .dir_source import DirectorySource
    return DirectorySource(path)
