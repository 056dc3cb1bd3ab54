"""Search index builder and reader for the municipal election lookup."""
from __future__ import annotations

from .engine import IndexBuilder
from .models import BuildReport, IndexSchema, Municipality, SearchHit, SlugCollisionError
from .normalize import normalize_text, prefix_ngrams, tokenize
from .search import ArtifactCache, SearchClient, SearchResult

__all__ = [
    "IndexBuilder",
    "BuildReport",
    "IndexSchema",
    "Municipality",
    "SearchHit",
    "SlugCollisionError",
    "normalize_text",
    "prefix_ngrams",
    "tokenize",
    "ArtifactCache",
    "SearchClient",
    "SearchResult",
]
