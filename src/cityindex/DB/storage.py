from __future__ import annotations
import json
import os
import shutil
from typing import Any, Dict, Iterable, List, Mapping

from ..models import Municipality, SlugCollisionError
from ..stats import full_record
from .index import InvertedIndex
from .. import config as CFG

_LETTERS = frozenset("abcdefghijklmnopqrstuvwxyz")


# ---- files ----
def write_json(path: str, obj: Any) -> int:
    """Write compact UTF-8 JSON via a temp sibling + rename; returns bytes written."""
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    data = json.dumps(obj, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    tmp = f"{path}.tmp"
    try:
        with open(tmp, "wb") as f:
            f.write(data)
        os.replace(tmp, path)
    finally:
        # only left behind when the write or rename failed
        if os.path.exists(tmp):
            os.remove(tmp)
    return len(data)


def reset_dir(path: str) -> None:
    """Drop the previous artifact set entirely; builds never update in place."""
    if os.path.lexists(path):
        shutil.rmtree(path)
    os.makedirs(path, exist_ok=True)


# ---- partitioning / ranking ----
def partition_key(key: str) -> str:
    """First character when it is a-z, otherwise the fallback bucket."""
    if key and key[0] in _LETTERS:
        return key[0]
    return CFG.FALLBACK_BUCKET


def rank_records(ids: Iterable[int], index: InvertedIndex, cap: int | None = None) -> List[Municipality]:
    """Shortest display names first (ties by id), cut to cap."""
    cap = CFG.MAX_RESULTS_PER_KEY if cap is None else int(cap)
    recs = [index.record(i) for i in ids]
    recs.sort(key=lambda r: (len(r.name), r.id))
    return recs[:cap]


def hit_row(rec: Municipality) -> list:
    return [rec.id, rec.name, rec.result_code]


def build_partitions(index: InvertedIndex, cap: int | None = None) -> Dict[str, Dict[str, list]]:
    """bucket -> {key: [[id, name, code], ...]} for every bucket (empty ones included)."""
    parts: Dict[str, Dict[str, list]] = {b: {} for b in CFG.BUCKETS}
    for key, ids in index.iter_items():
        rows = [hit_row(r) for r in rank_records(ids, index, cap)]
        parts.setdefault(partition_key(key), {})[key] = rows
    return parts


def emit_partitions(out_dir: str, parts: Mapping[str, Mapping[str, list]]) -> tuple[int, int]:
    """One search-<bucket>.json per bucket; returns (files, bytes)."""
    files = size = 0
    for bucket, entries in parts.items():
        path = os.path.join(out_dir, CFG.PARTITION_FILE.format(bucket=bucket))
        size += write_json(path, entries)
        files += 1
    return files, size


def emit_per_key(out_dir: str, parts: Mapping[str, Mapping[str, list]]) -> tuple[int, int]:
    """Legacy layout: search/<key>.json holding the hit array of that key."""
    files = size = 0
    base = os.path.join(out_dir, CFG.PER_KEY_DIR)
    for entries in parts.values():
        for key, rows in entries.items():
            size += write_json(os.path.join(base, f"{key}.json"), rows)
            files += 1
    return files, size


# ---- records / slugs ----
def build_slug_map(records: Iterable[Municipality]) -> Dict[str, int]:
    slugs: Dict[str, int] = {}
    for rec in records:
        prev = slugs.get(rec.slug)
        if prev is not None and prev != rec.id:
            raise SlugCollisionError(rec.slug, prev, rec.id)
        slugs[rec.slug] = rec.id
    return slugs


def emit_records(out_dir: str,
                 records: List[Municipality],
                 slug_map: Mapping[str, int],
                 *,
                 per_record_files: bool = False) -> tuple[int, int]:
    """cities-data.json + slug-map.json (+ <id>.json / <slug>.json); returns (files, bytes)."""
    details = {str(r.id): full_record(r) for r in records}
    size = write_json(os.path.join(out_dir, CFG.CITIES_DATA_FILE), details)
    size += write_json(os.path.join(out_dir, CFG.SLUG_MAP_FILE), dict(slug_map))
    files = 2

    if per_record_files:
        for r in records:
            d = details[str(r.id)]
            size += write_json(os.path.join(out_dir, f"{r.id}.json"), d)
            size += write_json(os.path.join(out_dir, f"{r.slug}.json"), d)
            files += 2
    return files, size
