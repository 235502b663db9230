"""Shared fixtures: an in-memory facility store."""

from __future__ import annotations

from typing import Any

import pytest

from courtmatch.config import BatchConfig
from courtmatch.store import StoreError
from courtmatch.types import KnownFacility


class FakeFacilityStore:
    """In-memory FacilityStore recording every write."""

    def __init__(self, rows: list[dict[str, Any]], fail_ids: set[str] | None = None):
        self.rows = {row["id"]: dict(row) for row in rows}
        self.fail_ids = fail_ids or set()
        self.updates: list[tuple[str, dict[str, Any]]] = []
        self.fetch_calls = 0

    def fetch_active(self, columns=()) -> list[KnownFacility]:
        self.fetch_calls += 1
        active = [r for r in self.rows.values() if r.get("status", "active") == "active"]
        active.sort(key=lambda r: r["name"])
        return [
            KnownFacility(
                id=r["id"],
                name=r["name"],
                existing_attributes={c: r.get(c) for c in columns if c not in ("id", "name")},
            )
            for r in active
        ]

    def update(self, facility_id: str, payload: dict[str, Any]) -> None:
        if facility_id in self.fail_ids:
            raise StoreError(f"violates check constraint for {facility_id}")
        self.updates.append((facility_id, dict(payload)))
        self.rows[facility_id].update(payload)

    def deactivate(self, facility_id: str) -> None:
        self.update(facility_id, {"status": "inactive"})


@pytest.fixture
def make_store():
    return FakeFacilityStore


@pytest.fixture
def live_batch() -> BatchConfig:
    return BatchConfig(write_delay_ms=0)
