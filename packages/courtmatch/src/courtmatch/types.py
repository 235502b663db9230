"""Core types for the courtmatch reconciliation toolkit."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Literal


@dataclass
class CandidateRecord:
    name: str
    source_attributes: dict[str, Any] = field(default_factory=dict)


@dataclass
class KnownFacility:
    id: str
    name: str
    existing_attributes: dict[str, Any] = field(default_factory=dict)


Decision = Literal["EXACT_MATCH", "PREFIX_MATCH", "NO_MATCH"]


@dataclass
class MatchResult:
    candidate: str
    decision: Decision
    target_id: Any = None
    target_key: str | None = None

    @property
    def matched(self) -> bool:
        return self.decision != "NO_MATCH"


Action = Literal["UPDATE", "DEACTIVATE", "SKIP", "ERROR"]


@dataclass
class ItemOutcome:
    """What happened to one candidate during a batch run."""

    name: str
    action: Action
    facility_id: str | None = None
    match: MatchResult | None = None
    fields: dict[str, Any] = field(default_factory=dict)
    error: str | None = None
    reason: str | None = None
    notes: str | None = None


@dataclass
class BatchReport:
    """Ordered outcomes of a batch run plus end-of-run diagnostics."""

    outcomes: list[ItemOutcome] = field(default_factory=list)
    unmatched_keys: list[str] = field(default_factory=list)
    suggestions: dict[str, tuple[str, float]] = field(default_factory=dict)
    field_counts: Counter = field(default_factory=Counter)
    dry_run: bool = False
    overwrite: bool = False

    def count(self, action: Action) -> int:
        return sum(1 for o in self.outcomes if o.action == action)

    @property
    def updated(self) -> int:
        return self.count("UPDATE")

    @property
    def deactivated(self) -> int:
        return self.count("DEACTIVATE")

    @property
    def skipped(self) -> int:
        return self.count("SKIP")

    @property
    def errors(self) -> int:
        return self.count("ERROR")
