from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union

from .models import SearchHit
from .normalize import normalize_text
from .DB.api import ArtifactFetchError, ArtifactNotFound, ArtifactSource, make_source
from .DB.storage import partition_key
from . import config as CFG

log = logging.getLogger(__name__)

_LAYOUTS = ("partition", "per_key")

# User-facing messages (the site is French)
MESSAGES = {
    "no_results": "Aucune ville trouvée",
    "search_error": "Erreur lors de la recherche",
    "city_not_found": "Ville non trouvée",
}


class ArtifactCache:
    """
    Per-session memo of fetched artifacts.
    A failed load is not stored; two callers missing at once may both load (same value, last write wins).
    """
    def __init__(self) -> None:
        self._items: Dict[str, Any] = {}

    def get_or_load(self, key: str, loader: Callable[[], Any]) -> Any:
        if key in self._items:
            return self._items[key]
        value = loader()
        self._items[key] = value
        return value

    def __contains__(self, key: str) -> bool:
        return key in self._items


@dataclass(frozen=True)
class SearchResult:
    status: str                      # "skipped" | "empty" | "ok" | "error"
    query: str = ""
    normalized: str = ""
    hits: List[SearchHit] = field(default_factory=list)
    message: str = ""

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "query": self.query,
            "normalized": self.normalized,
            "results": [h.to_row() for h in self.hits],
            "message": self.message,
        }


class SearchClient:
    """
    Read side of the artifact set: partitions, full records, slug map.
    Every artifact is fetched at most once per client and kept in its ArtifactCache.
    Nothing raises past this class; failures become "error" results or None.

    layout must match the build's emit mode: "partition" reads search-<bucket>.json,
    "per_key" reads search/<key>.json where a missing file is a key miss.
    """
    def __init__(self, source: Union[str, ArtifactSource], *,
                 cache: Optional[ArtifactCache] = None,
                 display_limit: Optional[int] = None,
                 layout: Optional[str] = None) -> None:
        self.layout = (layout or CFG.EMIT_MODE).lower()
        if self.layout not in _LAYOUTS:
            raise ValueError(f"Unsupported layout: {layout!r} (expected one of {_LAYOUTS})")
        self.source: ArtifactSource = make_source(source) if isinstance(source, str) else source
        self.cache = cache if cache is not None else ArtifactCache()
        self.display_limit = CFG.DISPLAY_LIMIT if display_limit is None else int(display_limit)

    # ---- loaders ----
    def _fetch(self, name: str) -> Any:
        return self.cache.get_or_load(name, lambda: self.source.fetch(name))

    def partition(self, bucket: str) -> Dict[str, list]:
        return self._fetch(CFG.PARTITION_FILE.format(bucket=bucket))

    def cities_data(self) -> Dict[str, dict]:
        return self._fetch(CFG.CITIES_DATA_FILE)

    def slug_map(self) -> Dict[str, int]:
        return self._fetch(CFG.SLUG_MAP_FILE)

    def _rows_for(self, key: str) -> Any:
        if self.layout == "per_key":
            try:
                return self._fetch(f"{CFG.PER_KEY_DIR}/{key}.json")
            except ArtifactNotFound:
                return []
        part = self.partition(partition_key(key))
        if not isinstance(part, dict):
            raise ValueError(f"partition for {key!r} is {type(part).__name__}, not an object")
        return part.get(key) or []

    # ---- search ----
    def search(self, query: Optional[str]) -> SearchResult:
        if not query or len(query.strip()) < CFG.MIN_QUERY_LENGTH:
            return SearchResult(status="skipped", query=query or "")

        normalized = normalize_text(query)
        if not normalized:
            return SearchResult(status="empty", query=query, message=MESSAGES["no_results"])

        try:
            rows = self._rows_for(normalized)
            if not isinstance(rows, list):
                raise ValueError(f"hits for {normalized!r} are {type(rows).__name__}, not a list")
            hits = [SearchHit.from_row(r) for r in rows[: self.display_limit]]
        except (ArtifactFetchError, ValueError, TypeError) as exc:
            log.error("Search error for %r: %s", query, exc)
            return SearchResult(status="error", query=query, normalized=normalized,
                                message=MESSAGES["search_error"])

        if not hits:
            return SearchResult(status="empty", query=query, normalized=normalized,
                                message=MESSAGES["no_results"])
        return SearchResult(status="ok", query=query, normalized=normalized, hits=hits)

    # ---- details ----
    def city_by_id(self, rid: int) -> Optional[dict]:
        try:
            return self.cities_data().get(str(rid))
        except ArtifactFetchError as exc:
            log.error("Error fetching city %s: %s", rid, exc)
            return None

    def city_by_slug(self, slug: str) -> Optional[dict]:
        try:
            rid = self.slug_map().get(slug)
        except ArtifactFetchError as exc:
            log.error("Error fetching city %s: %s", slug, exc)
            return None
        if rid is None:
            return None
        return self.city_by_id(rid)

    def close(self) -> None:
        self.source.close()
