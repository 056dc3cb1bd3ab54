"""Flask app serving the public site, its JSON artifacts and a small search API."""
from __future__ import annotations

from .web import app, configure

__all__ = ["app", "configure"]
