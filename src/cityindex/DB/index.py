from __future__ import annotations
from collections import defaultdict
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple

from ..models import Municipality
from ..normalize import ngrams_for_value
from .. import config as CFG


class InvertedIndex:
    """
    Prefix n-gram index: key -> set of record ids.
    Build is purely in memory; emission (ranking, partitioning, files) lives in storage.
    """
    def __init__(self,
                 min_ngram: Optional[int] = None,
                 max_ngram: Optional[int] = None,
                 split_words: Optional[bool] = None) -> None:
        self.min_ngram = CFG.MIN_NGRAM if min_ngram is None else int(min_ngram)
        self.max_ngram = CFG.MAX_NGRAM if max_ngram is None else int(max_ngram)
        self.split_words = CFG.SPLIT_WORDS if split_words is None else bool(split_words)
        if self.min_ngram < 1 or self.max_ngram < self.min_ngram:
            raise ValueError(f"invalid n-gram bounds: min={self.min_ngram} max={self.max_ngram}")

        self._postings: Dict[str, Set[int]] = defaultdict(set)
        self._records: Dict[int, Municipality] = {}

    # ---- Build (offline) ----
    def build(self, records: Iterable[Municipality]) -> None:
        for rec in records:
            self.add(rec)

    def add(self, rec: Municipality) -> int:
        """Register rec under every n-gram of its indexable values; returns the number of keys."""
        keys = self.keys_for(rec)
        for k in keys:
            self._postings[k].add(rec.id)
        self._records[rec.id] = rec
        return len(keys)

    def keys_for(self, rec: Municipality) -> Set[str]:
        keys: Set[str] = set()
        for value in rec.indexable_values():
            keys |= ngrams_for_value(value, self.min_ngram, self.max_ngram,
                                     split_words=self.split_words)
        return keys

    # ---- Query ----
    def get(self, key: str) -> Set[int]:
        return set(self._postings.get(key, ()))

    def record(self, rid: int) -> Municipality:
        return self._records[rid]

    def records(self) -> List[Municipality]:
        return list(self._records.values())

    def iter_items(self) -> Iterator[Tuple[str, Set[int]]]:
        """(key, ids) in key order."""
        for k in sorted(self._postings):
            yield k, self._postings[k]

    def __contains__(self, key: str) -> bool:
        return key in self._postings

    def __len__(self) -> int:
        return len(self._postings)
