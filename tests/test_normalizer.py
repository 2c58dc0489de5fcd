"""Test keyword and title normalization."""

import pytest
from matheque.ingestion.normalizer import normalize, tokenize


def test_normalize_strips_punctuation_and_case():
    """Punctuation, digits and case don't matter."""
    assert normalize("Fight Club!!") == "fight club"
    assert normalize("Fight Club!!") == normalize("fight   club")


def test_normalize_collapses_spaces():
    """Runs of spaces become one, including runs left behind by removed characters."""
    assert normalize("Dune:  Part Two") == "dune part two"
    assert normalize("Dune - Part Two") == "dune part two"


def test_normalize_keeps_diacritics():
    """Latin-extended letters survive and are lower-cased."""
    assert normalize("Clubul Bătăușilor") == "clubul bătăușilor"
    assert normalize("ÉLÉPHANT") == "éléphant"
    assert normalize("Ạ Ỹ") == "ạ ỹ"


def test_normalize_drops_non_latin_and_symbols():
    """Emoji, ticket symbols and non-Latin scripts are removed."""
    assert normalize("🎟 Oppenheimer (IMAX) 2D") == " oppenheimer imax d"
    assert normalize("Ёлки 10") == " "
    assert normalize("") == ""


def test_normalize_keeps_edge_spaces():
    """Leading and trailing spaces are collapsed, not trimmed."""
    assert normalize("  dune  ") == " dune "


@pytest.mark.parametrize("text", [
    "Fight Club!!",
    "  Dune: Part Two ",
    "Clubul Bătăușilor",
    "İstanbul Hatırası",
    "Mission: Impossible – Dead Reckoning Part One",
    "",
    "!!!",
])
def test_normalize_is_idempotent(text):
    """Normalizing twice gives the same key as normalizing once."""
    assert normalize(normalize(text)) == normalize(text)


def test_tokenize_drops_empty_and_duplicate_tokens():
    """Tokens come out unique, in first-seen order."""
    assert tokenize("Fight Club Fight Club") == ["fight", "club"]
    assert tokenize("  The   Matrix!! ") == ["the", "matrix"]
    assert tokenize("2024 !!") == []
