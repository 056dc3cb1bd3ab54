from __future__ import annotations
import re
import unicodedata
from typing import Any, List, Set

from . import config as CFG

_APOSTROPHES = re.compile(r"['‘’`]")
_NON_WORD = re.compile(r"[^a-z0-9]+")
_SPACES = re.compile(r"\s+")
_EDGE_HYPHENS = re.compile(r"^-+|-+$")


def _strip_marks(text: str) -> str:
    """Decompose (NFD) and drop combining marks: 'É' -> 'E', 'ç' -> 'c'."""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_text(text: Any) -> str:
    """
    Canonical search form of a name or code.
      * accents removed, lower-cased
      * apostrophes (straight, curly, backtick) become '-'
      * any run outside [a-z0-9] becomes a single '-'
      * no leading/trailing '-'
    Idempotent: normalize_text(normalize_text(s)) == normalize_text(s).
    """
    if text is None:
        return ""
    s = _strip_marks(str(text)).lower()
    s = _APOSTROPHES.sub("-", s)
    s = _NON_WORD.sub("-", s)
    s = _SPACES.sub("-", s)
    s = _EDGE_HYPHENS.sub("", s)
    return s.strip()


def tokenize(text: Any, *, split_words: bool | None = None) -> List[str]:
    """
    Split a field value into search units.

    The normalized value is always one token (a multi-word name such as
    "Saint-Étienne" stays "saint-etienne"). With split_words on, each
    hyphen-separated word follows it as its own token so that "etien"
    can match the second word. Duplicates are kept.
    """
    if split_words is None:
        split_words = CFG.SPLIT_WORDS
    joined = normalize_text(text)
    if not joined:
        return []
    tokens = [joined]
    if split_words and "-" in joined:
        tokens.extend(w for w in joined.split("-") if w)
    return tokens


def prefix_ngrams(token: str,
                  min_size: int | None = None,
                  max_size: int | None = None) -> Set[str]:
    """Return distinct prefixes of token with min_size <= len <= max_size (+ token when longer)."""
    lo = CFG.MIN_NGRAM if min_size is None else int(min_size)
    hi = CFG.MAX_NGRAM if max_size is None else int(max_size)
    if lo < 1 or hi < lo:
        raise ValueError(f"invalid n-gram bounds: min={lo} max={hi}")

    L = len(token)
    grams = {token[:n] for n in range(lo, min(L, hi) + 1)}
    if L > hi:
        grams.add(token)
    return grams


def ngrams_for_value(text: Any,
                     min_size: int | None = None,
                     max_size: int | None = None,
                     *,
                     split_words: bool | None = None) -> Set[str]:
    """Union of prefix n-grams over every token of one field value."""
    out: Set[str] = set()
    for tok in tokenize(text, split_words=split_words):
        out |= prefix_ngrams(tok, min_size, max_size)
    return out
