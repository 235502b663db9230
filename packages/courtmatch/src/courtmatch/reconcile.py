"""Reconciliation batch drivers: research tables and junk cleanup."""

from __future__ import annotations

import time
from collections.abc import Callable

import structlog

from courtmatch.config import BatchConfig, MatchConfig
from courtmatch.denylist import Denylist
from courtmatch.matcher import Matcher, closest_name
from courtmatch.merge import merge_fields
from courtmatch.research import ResearchTable
from courtmatch.store import FacilityStore, StoreError
from courtmatch.types import BatchReport, ItemOutcome, KnownFacility

log = structlog.get_logger()


class BatchDriver:
    """Shared write discipline: dry-run gate, per-item errors, throttle."""

    def __init__(self, store: FacilityStore, batch: BatchConfig | None = None) -> None:
        self.store = store
        self.batch = batch or BatchConfig()

    def _new_report(self) -> BatchReport:
        return BatchReport(dry_run=self.batch.dry_run, overwrite=self.batch.overwrite)

    def _write(self, op: Callable[[], None]) -> str | None:
        """Run one write unless dry-run. Returns the store's error message, if any."""
        if self.batch.dry_run:
            return None
        try:
            op()
        except StoreError as e:
            return str(e)
        finally:
            if self.batch.write_delay_ms > 0:
                time.sleep(self.batch.write_delay_ms / 1000)
        return None

    def _deactivate(self, facility: KnownFacility) -> ItemOutcome:
        error = self._write(lambda: self.store.deactivate(facility.id))
        if error:
            log.error("write_failed", facility=facility.name, op="deactivate", error=error)
            return ItemOutcome(facility.name, "ERROR", facility_id=facility.id, error=error)
        log.info("facility_deactivated", facility=facility.name, dry_run=self.batch.dry_run)
        return ItemOutcome(facility.name, "DEACTIVATE", facility_id=facility.id)


class ResearchReconciler(BatchDriver):
    """Applies a research table to the active facilities in the store.

    Each facility name is resolved against the table keys. The table's own
    deactivation list is checked first and takes precedence over matching.
    """

    def __init__(
        self,
        store: FacilityStore,
        table: ResearchTable,
        batch: BatchConfig | None = None,
        match: MatchConfig | None = None,
    ) -> None:
        super().__init__(store, batch)
        self.table = table
        self.denylist = Denylist(table.deactivate)
        self.matcher = Matcher(match)

    def run(self) -> BatchReport:
        report = self._new_report()
        facilities = self.store.fetch_active(self.table.columns())
        log.info(
            "research_run_start",
            table=self.table.name,
            facilities=len(facilities),
            keys=len(self.table),
            dry_run=self.batch.dry_run,
            overwrite=self.batch.overwrite,
        )

        self.matcher.preprocess_known((key, key) for key in self.table.keys())
        claimed: set[str] = set()

        for facility in facilities:
            report.outcomes.append(self._reconcile_one(facility, claimed, report))

        report.unmatched_keys = [k for k in self.table.keys() if k not in claimed]
        names = [f.name for f in facilities]
        for key in report.unmatched_keys:
            hint = closest_name(key, names, self.matcher.config.suggest_min_score)
            if hint is not None:
                report.suggestions[key] = hint
        log.info(
            "research_run_done",
            table=self.table.name,
            updated=report.updated,
            deactivated=report.deactivated,
            skipped=report.skipped,
            errors=report.errors,
            unmatched=len(report.unmatched_keys),
        )
        return report

    def _reconcile_one(
        self, facility: KnownFacility, claimed: set[str], report: BatchReport
    ) -> ItemOutcome:
        if self.denylist.should_deactivate(facility.name):
            return self._deactivate(facility)

        match = self.matcher.match_one(facility.name)
        if not match.matched:
            return ItemOutcome(facility.name, "SKIP", facility_id=facility.id, match=match,
                               reason="no_match")

        key = match.target_key
        if self.batch.exclusive_targets and key in claimed:
            log.warning("target_already_claimed", facility=facility.name, key=key)
            return ItemOutcome(facility.name, "SKIP", facility_id=facility.id, match=match,
                               reason="target_already_claimed")
        claimed.add(key)

        entry = self.table[key]
        payload = merge_fields(
            facility.existing_attributes,
            entry.fields,
            overwrite=self.batch.overwrite,
            linked=self.table.linked_fields,
        )
        if not payload:
            return ItemOutcome(facility.name, "SKIP", facility_id=facility.id, match=match,
                               reason="nothing_to_fill")

        error = self._write(lambda: self.store.update(facility.id, payload))
        if error:
            log.error("write_failed", facility=facility.name, op="update", error=error)
            return ItemOutcome(facility.name, "ERROR", facility_id=facility.id, match=match,
                               fields=payload, error=error)

        report.field_counts.update(payload.keys())
        log.info(
            "facility_updated",
            facility=facility.name,
            key=key,
            decision=match.decision,
            fields=list(payload),
            dry_run=self.batch.dry_run,
        )
        return ItemOutcome(facility.name, "UPDATE", facility_id=facility.id, match=match,
                           fields=payload, notes=entry.notes)


class CleanupReconciler(BatchDriver):
    """Deactivates active facilities whose names are on a junk denylist."""

    def __init__(
        self, store: FacilityStore, denylist: Denylist, batch: BatchConfig | None = None
    ) -> None:
        super().__init__(store, batch)
        self.denylist = denylist

    def run(self) -> BatchReport:
        report = self._new_report()
        facilities = self.store.fetch_active()
        log.info("cleanup_run_start", facilities=len(facilities), denylist=len(self.denylist))

        for facility in facilities:
            if self.denylist.should_deactivate(facility.name):
                report.outcomes.append(self._deactivate(facility))

        log.info("cleanup_run_done", deactivated=report.deactivated, errors=report.errors)
        return report
