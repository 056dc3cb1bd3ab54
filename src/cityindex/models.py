from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple


class SlugCollisionError(ValueError):
    """Two records produced the same slug."""

    def __init__(self, slug: str, first_id: int, second_id: int) -> None:
        super().__init__(f"slug {slug!r} produced by records {first_id} and {second_id}")
        self.slug = slug
        self.first_id = first_id
        self.second_id = second_id


@dataclass(frozen=True)
class IndexSchema:
    """Where to find each role in one input shape (field names of the source JSON)."""
    name: str
    id_field: str
    name_field: str
    alt_name_fields: Tuple[str, ...] = ()
    locator_fields: Tuple[str, ...] = ()     # indexed codes (list values allowed)
    result_code_field: str = ""              # third element of a search hit
    slug_fields: Tuple[str, ...] = ()        # slug = these values + normalized name


@dataclass(frozen=True)
class Municipality:
    id: int
    name: str                               # display name, as in the source
    normalized_name: str
    alt_names: Tuple[str, ...]
    locators: Tuple[Tuple[str, str], ...]   # (field, value), schema order
    result_code: str
    slug: str
    payload: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def indexable_values(self) -> List[str]:
        """Values fed to the tokenizer: name, alternate names, then locator codes."""
        return [self.name, *self.alt_names, *(v for _, v in self.locators)]


@dataclass(frozen=True)
class SearchHit:
    id: int
    name: str
    code: str

    def to_row(self) -> list:
        return [self.id, self.name, self.code]

    @classmethod
    def from_row(cls, row: list) -> "SearchHit":
        rid, name, code = row
        return cls(int(rid), str(name), str(code))


@dataclass
class Dataset:
    records: List[Municipality]
    skipped: int = 0


@dataclass
class BuildReport:
    records: int = 0
    skipped: int = 0
    keys: int = 0
    partitions: Dict[str, int] = field(default_factory=dict)  # bucket -> key count
    files_written: int = 0
    bytes_written: int = 0
    seconds: float = 0.0
