import pytest
from cityindex.normalize import ngrams_for_value, prefix_ngrams, tokenize


def test_tokenize_keeps_joined_name_then_words():
    assert tokenize("Saint-Étienne") == ["saint-etienne", "saint", "etienne"]
    assert tokenize("Saint-Étienne", split_words=False) == ["saint-etienne"]
    assert tokenize("Lyon") == ["lyon"]


def test_tokenize_empty():
    assert tokenize("") == []
    assert tokenize("  ?! ") == []
    assert tokenize(None) == []


def test_duplicates_are_permitted():
    assert tokenize("Bar-le-Bar") == ["bar-le-bar", "bar", "le", "bar"]


def test_prefix_ngrams_counts():
    grams = prefix_ngrams("lyon", 2, 45)
    assert grams == {"ly", "lyo", "lyon"}
    # min(L, max) - min + 1
    assert len(prefix_ngrams("saint-etienne", 2, 45)) == len("saint-etienne") - 2 + 1


def test_token_shorter_than_min_gives_nothing():
    assert prefix_ngrams("a", 2, 45) == set()
    assert prefix_ngrams("", 2, 45) == set()


def test_long_token_is_added_whole():
    tok = "x" * 10 + "y" * 10
    grams = prefix_ngrams(tok, 2, 5)
    assert grams == {tok[:2], tok[:3], tok[:4], tok[:5], tok}


@pytest.mark.parametrize("tok", ["ab", "lyon", "saint-etienne", "z" * 60, "a" * 45, "b" * 46])
def test_bound_and_prefix_property(tok):
    lo, hi = 2, 45
    grams = prefix_ngrams(tok, lo, hi)
    assert len(grams) <= (hi - lo + 1) + 1
    assert all(tok.startswith(g) for g in grams)


def test_invalid_bounds():
    with pytest.raises(ValueError):
        prefix_ngrams("lyon", 0, 5)
    with pytest.raises(ValueError):
        prefix_ngrams("lyon", 5, 3)


def test_value_ngrams_cover_every_word():
    grams = ngrams_for_value("Saint-Étienne", 2, 45)
    assert {"sa", "saint-e", "saint-etienne", "et", "etien", "etienne"} <= grams
    whole_only = ngrams_for_value("Saint-Étienne", 2, 45, split_words=False)
    assert "etien" not in whole_only
    assert "saint-etienne" in whole_only
