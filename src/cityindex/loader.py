from __future__ import annotations
import json
import logging
import os
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple

from .models import Dataset, IndexSchema, Municipality
from .normalize import normalize_text
from . import config as CFG

log = logging.getLogger(__name__)

# Progress logging (set CITYINDEX_VERBOSE=1 to enable)
VERBOSE = os.environ.get("CITYINDEX_VERBOSE") == "1"
PROGRESS_EVERY_RECORDS = 10_000

# Merged 2020 municipal results (one entry per commune, French column headers)
ELECTIONS = IndexSchema(
    name="elections",
    id_field="__id",
    name_field="Libellé de la commune",
    locator_fields=("Code du département", "Code de la commune"),
    result_code_field="Code du département",
    slug_fields=("Code du département", "Code de la commune"),
)

# Commune list (postal codes, name without leading article)
COMMUNES = IndexSchema(
    name="communes",
    id_field="id",
    name_field="nom_standard",
    alt_name_fields=("nom_sans_pronom",),
    locator_fields=("code_postal", "codes_postaux", "code_departement", "code_commune"),
    result_code_field="code_postal",
    slug_fields=("code_postal",),
)

SCHEMAS: Dict[str, IndexSchema] = {s.name: s for s in (ELECTIONS, COMMUNES)}


def get_schema(name: str | None = None) -> IndexSchema:
    key = (name or CFG.SCHEMA).lower()
    try:
        return SCHEMAS[key]
    except KeyError:
        raise ValueError(f"Unknown schema: {name!r} (expected one of {sorted(SCHEMAS)})")


def make_slug(codes: Iterable[Any], name: str) -> str:
    """'42', '218', 'Saint-Étienne' -> '42-218-saint-etienne'."""
    parts = [str(c).strip() for c in codes if c is not None and str(c).strip()]
    parts.append(normalize_text(name))
    return "-".join(p for p in parts if p)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _values(value: Any) -> List[str]:
    """A field may hold one code or a list of codes (e.g. codes_postaux)."""
    if isinstance(value, (list, tuple)):
        return [t for t in (_text(v) for v in value) if t]
    t = _text(value)
    return [t] if t else []


def _coerce_id(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def to_municipality(entry: Mapping[str, Any], schema: IndexSchema) -> Optional[Municipality]:
    """Project one source entry onto a record; None when id or display name is missing."""
    rid = _coerce_id(entry.get(schema.id_field))
    name = _text(entry.get(schema.name_field))
    if rid is None or not name:
        return None

    alt_names = tuple(t for t in (_text(entry.get(f)) for f in schema.alt_name_fields) if t)
    locators: List[Tuple[str, str]] = []
    for f in schema.locator_fields:
        for v in _values(entry.get(f)):
            locators.append((f, v))

    result_code = _text(entry.get(schema.result_code_field)) if schema.result_code_field else ""
    slug = make_slug((_text(entry.get(f)) for f in schema.slug_fields), name)

    return Municipality(
        id=rid,
        name=name,
        normalized_name=normalize_text(name),
        alt_names=alt_names,
        locators=tuple(locators),
        result_code=result_code,
        slug=slug,
        payload=dict(entry),
    )


def load_records(entries: Iterable[Any], schema: IndexSchema | None = None) -> Dataset:
    """
    Turn raw entries into records.
    Entries without id/display name, or repeating an id, are skipped and counted.
    """
    schema = schema or get_schema()
    records: List[Municipality] = []
    seen: Set[int] = set()
    skipped = 0

    for pos, entry in enumerate(entries):
        rec = to_municipality(entry, schema) if isinstance(entry, Mapping) else None
        if rec is None:
            skipped += 1
            log.warning("Skipping entry #%d: missing %r or %r", pos, schema.id_field, schema.name_field)
            continue
        if rec.id in seen:
            skipped += 1
            log.warning("Skipping entry #%d: duplicate id %d (%s)", pos, rec.id, rec.name)
            continue
        seen.add(rec.id)
        records.append(rec)

        if VERBOSE and len(records) % PROGRESS_EVERY_RECORDS == 0:
            print(f"[loaded] records={len(records):,}")

    if VERBOSE:
        print(f"[done] records={len(records):,} skipped={skipped:,}")
    return Dataset(records=records, skipped=skipped)


def load_dataset(path: str, schema: IndexSchema | None = None) -> Dataset:
    """Read a JSON array of source entries from path."""
    if not os.path.exists(path):
        raise FileNotFoundError(f"Input not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a JSON array of records, got {type(data).__name__}")
    log.info("Read %d entries from %s", len(data), path)
    return load_records(data, schema)
