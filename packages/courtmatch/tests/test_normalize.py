"""Tests for facility name normalization."""

import pytest

from courtmatch.normalize import name_similarity, normalize, normalize_words


def test_lowercases_and_strips_punctuation():
    assert normalize("Padel Up - Culver City") == "padelupculvercity"


def test_keeps_digits():
    assert normalize("Padel 956") == "padel956"


def test_empty_input():
    assert normalize("") == ""


def test_only_punctuation_is_empty():
    assert normalize(" - & ! ") == ""


def test_non_ascii_letters_are_dropped():
    assert normalize("Pádel Club") == "pdelclub"


@pytest.mark.parametrize("name", [
    "ACCESS PADEL",
    "Let's Go Pickleball & Padel",
    "Padel + Pickle",
    "U-Padel Woodlands",
    "",
])
def test_idempotent(name):
    assert normalize(normalize(name)) == normalize(name)


@pytest.mark.parametrize("name", ["Access Padel", "PADELphia", "Bay Padel - Dogpatch"])
def test_case_insensitive(name):
    assert normalize(name) == normalize(name.upper())


def test_normalize_words_keeps_boundaries():
    assert normalize_words("  Padel Up - Culver City ") == "padel up culver city"


class TestNameSimilarity:
    def test_identical(self):
        assert name_similarity("Padel Club Austin", "PADEL CLUB AUSTIN") == 1.0

    def test_partial_overlap_uses_longer_name(self):
        # 2 shared words out of max(2, 4)
        assert name_similarity("Padel Alley", "Padel Alley Dallas Texas") == 0.5

    def test_no_overlap(self):
        assert name_similarity("Cube Padel", "Rad Tennis") == 0.0

    def test_empty_side(self):
        assert name_similarity("", "Padel") == 0.0
