from __future__ import annotations
import math
from typing import Any, Dict, Mapping, Optional

from .models import Municipality

_YOUNG_BANDS = ("F18-24", "H18-24", "F25-39", "H25-39")
_ADULT_BANDS = tuple(
    f"{sex}{band}"
    for sex in ("F", "H")
    for band in ("18-24", "25-39", "40-54", "55-64", "65-79", "80+")
)

# Source keys already carried as top-level record fields
_DEPT = "Code du département"
_COMMUNE = "Code de la commune"


def _band_sum(pop: Optional[Mapping[str, Any]], bands) -> float:
    if not pop:
        return 0.0
    return float(sum((pop.get(b) or 0) for b in bands))


def round_half_up(x: float) -> int:
    """Halves go up (2.5 -> 3, -2.5 -> -2), unlike round()."""
    return math.floor(x + 0.5)


def code_insee(dept: str, commune: str) -> str:
    """'1', '4' -> '01004'; 3-char overseas department codes are kept as is."""
    dept = str(dept)
    width = 3 if len(dept) >= 3 else 2
    return dept.zfill(width) + str(commune).zfill(3)


def decisive_round(entry: Mapping[str, Any]) -> Optional[Mapping[str, Any]]:
    return entry.get("Tour 2") or entry.get("Tour 1")


def analyse(entry: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Youth and turnout figures derived from the population bands and the decisive round.
    Keeps whatever the source 'Analyse' block already holds (e.g. 'Votes décisifs').
    """
    pop = entry.get("population")
    pop_18_39 = _band_sum(pop, _YOUNG_BANDS)
    pop_adults = _band_sum(pop, _ADULT_BANDS)

    tour = decisive_round(entry) or {}
    votants = tour.get("Votants") or 0

    out = dict(entry.get("Analyse") or {})
    out["Pop 18-39"] = round_half_up(pop_18_39)
    out["Pop 18+"] = round_half_up(pop_adults)
    out["Non votants"] = round_half_up(pop_adults - votants)
    out["Part ne votant pas"] = (pop_adults - votants) / pop_adults if pop_adults > 0 else 0
    return out


def full_record(rec: Municipality) -> Dict[str, Any]:
    """Detail payload for one record: the source entry plus id, slug and derived stats."""
    entry = rec.payload
    out: Dict[str, Any] = {"id": rec.id, "slug": rec.slug, "nom_standard": rec.name}
    for k, v in entry.items():
        if k not in out:
            out[k] = v

    if "Tour 1" in entry:
        if _DEPT in entry and _COMMUNE in entry:
            out["code_insee"] = code_insee(entry[_DEPT], entry[_COMMUNE])
        out["Analyse"] = analyse(entry)
    return out
