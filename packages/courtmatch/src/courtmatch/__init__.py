"""courtmatch - Padel facility data reconciliation."""

from courtmatch.config import AppConfig, BatchConfig, MatchConfig, StoreConfig
from courtmatch.denylist import Denylist, should_deactivate
from courtmatch.matcher import Matcher, MatcherStats, resolve
from courtmatch.merge import merge_fields
from courtmatch.normalize import normalize
from courtmatch.reconcile import CleanupReconciler, ResearchReconciler
from courtmatch.research import ResearchTable, load_research_table
from courtmatch.types import BatchReport, ItemOutcome, KnownFacility, MatchResult

__all__ = [
    "AppConfig",
    "BatchConfig",
    "BatchReport",
    "CleanupReconciler",
    "Denylist",
    "ItemOutcome",
    "KnownFacility",
    "MatchConfig",
    "MatchResult",
    "Matcher",
    "MatcherStats",
    "ResearchReconciler",
    "ResearchTable",
    "StoreConfig",
    "load_research_table",
    "merge_fields",
    "normalize",
    "resolve",
    "should_deactivate",
]
