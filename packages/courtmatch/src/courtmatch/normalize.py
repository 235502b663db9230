"""Facility name normalization."""

from __future__ import annotations

import re

_NON_ALNUM = re.compile(r"[^a-z0-9]")
_NON_ALNUM_RUN = re.compile(r"[^a-z0-9]+")


def normalize(name: str) -> str:
    """Collapse a facility name to lowercase ASCII letters and digits.

    "Padel Up - Culver City" -> "padelupculvercity". Names with no ASCII
    alphanumerics normalize to "".
    """
    return _NON_ALNUM.sub("", name.lower())


def normalize_words(name: str) -> str:
    """Like normalize() but keeps single spaces between words."""
    return _NON_ALNUM_RUN.sub(" ", name.lower()).strip()


def name_similarity(a: str, b: str) -> float:
    """Share of a's words found in b, over the longer word count."""
    words_a = normalize_words(a).split()
    words_b = normalize_words(b).split()
    if not words_a or not words_b:
        return 0.0
    matches = sum(1 for w in words_a if w in words_b)
    return matches / max(len(words_a), len(words_b))
