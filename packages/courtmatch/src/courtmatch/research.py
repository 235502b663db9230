"""Operator-curated research tables (facility name -> column updates)."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from courtmatch.config import data_dir

log = structlog.get_logger()

BUILTIN_TABLES = ("manual", "pricing")


class ResearchTableError(ValueError):
    """Raised when a research table is missing or malformed."""


class FacilityFields(BaseModel):
    """Facility columns a research entry may set. Prices are per court per hour."""

    model_config = ConfigDict(extra="forbid")

    total_courts: int | None = None
    indoor_courts: bool | None = None
    outdoor_courts: bool | None = None
    indoor_court_count: int | None = None
    outdoor_court_count: int | None = None
    surface_type: str | None = None
    price_per_hour_cents: int | None = None
    price_peak_cents: int | None = None
    notes: str | None = None


COLUMNS: tuple[str, ...] = tuple(f for f in FacilityFields.model_fields if f != "notes")


class ResearchTableFile(BaseModel):
    """On-disk shape of a research table."""

    model_config = ConfigDict(extra="forbid")

    name: str
    description: str = ""
    deactivate: list[str] = []
    linked_fields: dict[str, str] = {}
    entries: dict[str, FacilityFields]

    @field_validator("linked_fields")
    @classmethod
    def _known_columns(cls, value: dict[str, str]) -> dict[str, str]:
        for follower, leader in value.items():
            for column in (follower, leader):
                if column not in COLUMNS:
                    raise ValueError(f"unknown column in linked_fields: {column}")
        return value


@dataclass
class ResearchEntry:
    key: str
    fields: dict[str, Any]
    notes: str | None = None


@dataclass
class ResearchTable:
    name: str
    entries: dict[str, ResearchEntry]
    deactivate: list[str] = field(default_factory=list)
    linked_fields: dict[str, str] = field(default_factory=dict)
    description: str = ""

    def keys(self) -> list[str]:
        return list(self.entries)

    def columns(self) -> list[str]:
        """Columns referenced by any entry, in schema order."""
        used = {c for e in self.entries.values() for c in e.fields}
        return [c for c in COLUMNS if c in used]

    def __getitem__(self, key: str) -> ResearchEntry:
        return self.entries[key]

    def __len__(self) -> int:
        return len(self.entries)


def table_path(table: str) -> Path:
    """Resolve a built-in table name or pass a path through."""
    if table in BUILTIN_TABLES:
        return data_dir() / "research" / f"{table}_research.json"
    return Path(table)


def parse_research_table(data: Any, source: str = "<data>") -> ResearchTable:
    try:
        parsed = ResearchTableFile.model_validate(data)
    except ValidationError as e:
        raise ResearchTableError(f"{source}: {e}") from e

    entries: dict[str, ResearchEntry] = {}
    for key, fields in parsed.entries.items():
        values = fields.model_dump(exclude_none=True)
        notes = values.pop("notes", None)
        entries[key] = ResearchEntry(key=key, fields=values, notes=notes)

    return ResearchTable(
        name=parsed.name,
        entries=entries,
        deactivate=list(parsed.deactivate),
        linked_fields=dict(parsed.linked_fields),
        description=parsed.description,
    )


def load_research_table(table: str) -> ResearchTable:
    """Load a research table by built-in name ("manual", "pricing") or path."""
    path = table_path(table)
    if not path.exists():
        raise ResearchTableError(f"research table not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ResearchTableError(f"{path}: invalid JSON ({e})") from e

    result = parse_research_table(data, source=str(path))
    log.info(
        "research_table_loaded",
        table=result.name,
        path=str(path),
        entries=len(result),
        deactivate=len(result.deactivate),
    )
    return result
