"""Facility name matching: exact pass, then longest-prefix pass."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

import structlog
from rapidfuzz import fuzz, process

from courtmatch.config import MatchConfig
from courtmatch.normalize import normalize, normalize_words
from courtmatch.types import MatchResult

log = structlog.get_logger()


@dataclass
class MatcherStats:
    """Statistics collected during matching."""

    known_count: int = 0
    candidate_count: int = 0
    duplicate_known_keys: int = 0
    decisions: dict[str, int] = field(default_factory=lambda: {
        "EXACT_MATCH": 0, "PREFIX_MATCH": 0, "NO_MATCH": 0
    })


class Matcher:
    """Resolves candidate names against a snapshot of known (key, id) pairs."""

    def __init__(self, config: MatchConfig | None = None) -> None:
        self.config = config or MatchConfig()
        self._exact: dict[str, tuple[str, Any]] = {}
        self._prefix: list[tuple[str, str, Any]] = []
        self.stats = MatcherStats()

    def preprocess_known(self, known: Iterable[tuple[str, Any]]) -> None:
        """Normalize the known keys once and build both lookup tables."""
        known = list(known)
        self.stats.known_count = len(known)
        self._exact = {}
        normalized: list[tuple[str, str, Any]] = []

        for key, target_id in known:
            norm = normalize(key)
            normalized.append((norm, key, target_id))
            if norm in self._exact:
                # First encountered wins; surface it so the data gets fixed
                self.stats.duplicate_known_keys += 1
                log.warning(
                    "duplicate_known_key",
                    normalized=norm,
                    kept=self._exact[norm][0],
                    ignored=key,
                )
                continue
            self._exact[norm] = (key, target_id)

        # Stable sort: ties keep snapshot order
        normalized.sort(key=lambda item: len(item[0]), reverse=True)
        min_len = self.config.prefix_min_length
        self._prefix = [item for item in normalized if len(item[0]) >= min_len]
        log.debug(
            "known_preprocessed",
            known=len(known),
            exact_keys=len(self._exact),
            prefix_keys=len(self._prefix),
        )

    def match_one(self, name: str) -> MatchResult:
        """Resolve a single candidate name."""
        norm = normalize(name)

        hit = self._exact.get(norm)
        if hit is not None:
            result = MatchResult(name, "EXACT_MATCH", target_id=hit[1], target_key=hit[0])
        else:
            result = MatchResult(name, "NO_MATCH")
            if norm:
                for norm_key, key, target_id in self._prefix:
                    if norm.startswith(norm_key):
                        result = MatchResult(
                            name, "PREFIX_MATCH", target_id=target_id, target_key=key
                        )
                        break

        self.stats.candidate_count += 1
        self.stats.decisions[result.decision] += 1
        log.debug(
            "match_one_done",
            candidate=name,
            decision=result.decision,
            target_key=result.target_key,
        )
        return result

    def match_all(self, names: Sequence[str]) -> list[MatchResult]:
        return [self.match_one(n) for n in names]


def resolve(
    candidate_name: str,
    known: Iterable[tuple[str, Any]],
    config: MatchConfig | None = None,
) -> MatchResult:
    """One-shot resolve of a candidate against known (key, id) pairs."""
    matcher = Matcher(config)
    matcher.preprocess_known(known)
    return matcher.match_one(candidate_name)


def closest_name(
    name: str, choices: Sequence[str], min_score: float = 85.0
) -> tuple[str, float] | None:
    """Best fuzzy match for a name that failed exact and prefix matching."""
    best = process.extractOne(
        name, choices, scorer=fuzz.WRatio, processor=normalize_words, score_cutoff=min_score
    )
    if best is None:
        return None
    choice, score, _ = best
    return choice, score
