"""Facility store access: a small protocol plus the Supabase implementation."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol

import httpx
import structlog
from postgrest.exceptions import APIError
from supabase import Client, create_client

from courtmatch.config import StoreConfig
from courtmatch.types import KnownFacility

log = structlog.get_logger()


class StoreError(RuntimeError):
    """A read or write against the facility store failed."""


class FacilityStore(Protocol):
    """Protocol for facility stores."""

    def fetch_active(self, columns: Sequence[str] = ()) -> list[KnownFacility]: ...

    def update(self, facility_id: str, payload: dict[str, Any]) -> None: ...

    def deactivate(self, facility_id: str) -> None: ...


class SupabaseFacilityStore:
    """FacilityStore backed by the Supabase `facilities` table."""

    def __init__(self, config: StoreConfig, client: Client | None = None) -> None:
        self.config = config
        self._client = client or create_client(config.url, config.service_key)

    def fetch_active(self, columns: Sequence[str] = ()) -> list[KnownFacility]:
        """Snapshot every active facility ordered by name, paging past the row limit."""
        extra = [c for c in columns if c not in ("id", "name")]
        select = ", ".join(["id", "name", *extra])
        page_size = self.config.page_size

        rows: list[dict[str, Any]] = []
        offset = 0
        while True:
            try:
                result = (
                    self._client.table(self.config.table)
                    .select(select)
                    .eq("status", "active")
                    .order("name")
                    .range(offset, offset + page_size - 1)
                    .execute()
                )
            except APIError as e:
                raise StoreError(e.message or str(e)) from e
            except httpx.HTTPError as e:
                raise StoreError(str(e) or type(e).__name__) from e

            if not result.data:
                break
            rows.extend(result.data)
            if len(result.data) < page_size:
                break
            offset += page_size

        log.info("snapshot_loaded", table=self.config.table, count=len(rows))
        return [
            KnownFacility(
                id=str(row["id"]),
                name=row.get("name") or "",
                existing_attributes={c: row.get(c) for c in extra},
            )
            for row in rows
        ]

    def update(self, facility_id: str, payload: dict[str, Any]) -> None:
        try:
            self._client.table(self.config.table).update(payload).eq("id", facility_id).execute()
        except APIError as e:
            raise StoreError(e.message or str(e)) from e
        except httpx.HTTPError as e:
            raise StoreError(str(e) or type(e).__name__) from e

    def deactivate(self, facility_id: str) -> None:
        self.update(facility_id, {"status": "inactive"})
