"""Google Maps scraper output: filter, match to facilities, apply updates."""

from __future__ import annotations

import json
import math
import re
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pandas as pd
import structlog

from courtmatch.config import BatchConfig, MatchConfig
from courtmatch.denylist import Denylist
from courtmatch.matcher import Matcher
from courtmatch.merge import is_absent
from courtmatch.normalize import name_similarity
from courtmatch.reconcile import BatchDriver
from courtmatch.types import BatchReport, CandidateRecord, ItemOutcome, KnownFacility

log = structlog.get_logger()

# Columns the scraper matching step needs from the snapshot
SNAPSHOT_COLUMNS = ["slug", "city", "state", "zip_code", "google_place_id", "phone"]

_ZIP = re.compile(r"\b(\d{5})\b")

ScraperRow = dict[str, str]


class ScraperInputError(ValueError):
    """Raised when scraper input files are missing or malformed."""


@dataclass
class ScrapedReview:
    author: str
    rating: float
    text: str
    published_at: str
    owner_response: str | None
    owner_response_date: str | None
    helpful_count: int
    review_id: str


@dataclass
class ScraperMatch:
    facility_id: str
    facility_name: str
    method: str
    scraper_data: ScraperRow


@dataclass
class ScraperReviews:
    place_id: str
    facility_name: str
    reviews: list[ScrapedReview]


@dataclass
class ScraperReport:
    total_rows: int = 0
    padel_rows: int = 0
    matched: list[ScraperMatch] = field(default_factory=list)
    new: list[ScraperRow] = field(default_factory=list)
    reviews: list[ScraperReviews] = field(default_factory=list)
    skipped: list[tuple[str, str]] = field(default_factory=list)  # (title, reason)


def read_scraper_csv(path: str | Path) -> list[ScraperRow]:
    """Read scraper CSV output as string-valued rows (blank cells -> "")."""
    path = Path(path)
    if not path.exists():
        raise ScraperInputError(f"scraper file not found: {path}")
    try:
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise ScraperInputError(f"{path}: {e}") from e
    df.columns = [str(c).strip() for c in df.columns]
    return [{k: str(v).strip() for k, v in row.items()} for row in df.to_dict(orient="records")]


def is_padel(row: ScraperRow) -> bool:
    text = " ".join(row.get(c, "") for c in ("title", "category", "categories")).lower()
    if "padel" not in text:
        return False
    return "paddle board" not in text and "paddleboard" not in text


def dedupe_by_place_id(rows: list[ScraperRow]) -> list[ScraperRow]:
    """First row per place_id wins; rows without one are all kept."""
    seen: set[str] = set()
    unique: list[ScraperRow] = []
    for row in rows:
        place_id = row.get("place_id", "")
        if place_id:
            if place_id in seen:
                continue
            seen.add(place_id)
        unique.append(row)
    return unique


def _first(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return default


def _to_float(value: Any) -> float | None:
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return result if math.isfinite(result) else None


def parse_reviews(raw: str) -> list[ScrapedReview]:
    """Parse the scraper's user_reviews JSON column. Malformed input -> []."""
    if not raw or raw == "[]":
        return []
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        log.debug("reviews_unparseable", raw=raw[:80])
        return []
    if not isinstance(parsed, list):
        return []

    reviews: list[ScrapedReview] = []
    for r in parsed:
        if not isinstance(r, dict):
            continue
        author = str(_first(r, "name", "author", default="Anonymous"))
        rating = _to_float(_first(r, "rating", default=0)) or 0.0
        owner_response = r.get("owner_response")
        owner_response_date = r.get("owner_response_date")
        review_id = _first(r, "review_id", "id")
        reviews.append(ScrapedReview(
            author=author,
            rating=rating,
            text=str(_first(r, "text", "snippet", default="")),
            published_at=str(_first(r, "published_at", "date", "time", default="")),
            owner_response=str(owner_response) if owner_response else None,
            owner_response_date=str(owner_response_date) if owner_response_date else None,
            helpful_count=int(_to_float(_first(r, "likes", "helpful_count", default=0)) or 0),
            review_id=str(review_id) if review_id is not None else f"{author}-{rating:g}",
        ))
    return reviews


def parse_rating_distribution(raw: str) -> dict[str, int] | None:
    """Parse "1:5,2:3,5:80" or a JSON object into {star: count}."""
    if not raw:
        return None
    raw = raw.strip()
    if raw.startswith("{"):
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            return None
        if not isinstance(data, dict):
            return None
        counts = {str(k): _to_float(v) for k, v in data.items()}
        return {k: int(v) for k, v in counts.items() if v is not None} or None

    result: dict[str, int] = {}
    for pair in raw.split(","):
        star, _, count = pair.partition(":")
        star, count = star.strip(), count.strip()
        if star and count.isdecimal():
            result[star] = int(count)
    return result or None


class ScraperReconciler:
    """Splits scraped rows into matched updates and new-facility discoveries.

    Matching order: Google place id, then the name matcher (exact, then
    longest prefix), then word similarity within the same city, then word
    similarity within the same zip code.
    """

    def __init__(
        self,
        facilities: list[KnownFacility],
        denylist: Denylist | None = None,
        match: MatchConfig | None = None,
        batch: BatchConfig | None = None,
    ) -> None:
        self.facilities = facilities
        self.denylist = denylist or Denylist()
        self.config = match or MatchConfig()
        self.batch = batch or BatchConfig()
        self.matcher = Matcher(self.config)
        self.matcher.preprocess_known((f.name, f.id) for f in facilities)
        self._by_id = {f.id: f for f in facilities}
        self._by_place_id = {
            f.existing_attributes["google_place_id"]: f
            for f in facilities
            if f.existing_attributes.get("google_place_id")
        }

    def run(self, rows: list[ScraperRow]) -> ScraperReport:
        report = ScraperReport(total_rows=len(rows))
        padel = [r for r in rows if is_padel(r)]
        report.padel_rows = len(padel)
        unique = dedupe_by_place_id(padel)
        log.info("scraper_rows_filtered", total=len(rows), padel=len(padel), unique=len(unique))

        claimed: set[str] = set()
        for row in unique:
            candidate = CandidateRecord(row.get("title", ""), row)
            title = candidate.name
            if self.denylist.should_deactivate(title):
                report.skipped.append((title, "denylisted"))
                continue

            reviews = parse_reviews(row.get("user_reviews", ""))
            if reviews:
                report.reviews.append(ScraperReviews(row.get("place_id", ""), title, reviews))

            found = self._find(candidate)
            if found is None:
                report.new.append(row)
            else:
                facility, method = found
                if self.batch.exclusive_targets and facility.id in claimed:
                    log.warning("target_already_claimed", candidate=title, facility=facility.name)
                    report.skipped.append((title, "target_already_claimed"))
                    continue
                claimed.add(facility.id)
                report.matched.append(ScraperMatch(facility.id, facility.name, method, row))

        log.info(
            "scraper_run_done",
            matched=len(report.matched),
            new=len(report.new),
            with_reviews=len(report.reviews),
            skipped=len(report.skipped),
        )
        return report

    def _find(self, candidate: CandidateRecord) -> tuple[KnownFacility, str] | None:
        row = candidate.source_attributes
        place_id = row.get("place_id", "")
        if place_id and place_id in self._by_place_id:
            return self._by_place_id[place_id], "place_id"

        title = candidate.name
        result = self.matcher.match_one(title)
        if result.matched:
            return self._by_id[result.target_id], result.decision.lower()

        address = row.get("address", "")
        address_lower = address.lower()
        for f in self.facilities:
            city = (f.existing_attributes.get("city") or "").lower()
            if (
                city
                and city in address_lower
                and name_similarity(f.name, title) >= self.config.similarity_same_city
            ):
                return f, "similarity_city"

        zip_match = _ZIP.search(address)
        if zip_match:
            for f in self.facilities:
                if (
                    f.existing_attributes.get("zip_code") == zip_match.group(1)
                    and name_similarity(f.name, title) >= self.config.similarity_same_zip
                ):
                    return f, "similarity_zip"
        return None


def write_scraper_outputs(report: ScraperReport, out_dir: str | Path) -> list[Path]:
    """Write matched-updates.json, new-facilities.json and scraper-reviews.json."""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    outputs = {
        "matched-updates.json": [asdict(m) for m in report.matched],
        "new-facilities.json": [{"scraper_data": row} for row in report.new],
        "scraper-reviews.json": [asdict(r) for r in report.reviews],
    }
    paths: list[Path] = []
    for filename, data in outputs.items():
        path = out_dir / filename
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        paths.append(path)
    log.info("scraper_outputs_written", out_dir=str(out_dir), files=len(paths))
    return paths


def load_matched_updates(path: str | Path) -> list[ScraperMatch]:
    path = Path(path)
    if not path.exists():
        raise ScraperInputError(f"matched updates file not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return [
            ScraperMatch(
                facility_id=str(m["facility_id"]),
                facility_name=m["facility_name"],
                method=m.get("method", ""),
                scraper_data=dict(m["scraper_data"]),
            )
            for m in data
        ]
    except (json.JSONDecodeError, KeyError, TypeError) as e:
        raise ScraperInputError(f"{path}: malformed matched updates ({e})") from e


def build_update_payload(
    row: ScraperRow, existing: dict[str, Any], verified_at: str
) -> dict[str, Any]:
    """Columns to write for one matched scraper row."""
    payload: dict[str, Any] = {}
    if row.get("place_id"):
        payload["google_place_id"] = row["place_id"]
    if row.get("cid"):
        payload["google_cid"] = row["cid"]

    rating = _to_float(row.get("review_rating"))
    if rating is not None:
        payload["google_rating"] = rating
    review_count = _to_float(row.get("review_count"))
    if review_count is not None:
        payload["google_review_count"] = int(review_count)

    distribution = parse_rating_distribution(row.get("reviews_per_rating", ""))
    if distribution:
        payload["rating_distribution"] = distribution

    payload["verification_status"] = "verified"
    payload["verified_at"] = verified_at
    payload["data_source"] = "google_maps_scraper"

    # Phone is fill-gaps-only
    if row.get("phone") and is_absent(existing.get("phone")):
        payload["phone"] = row["phone"]
    return payload


class ScrapedUpdateApplier(BatchDriver):
    """Writes matched scraper updates to the store, one facility at a time."""

    def run(
        self, matched: list[ScraperMatch], facilities: list[KnownFacility] | None = None
    ) -> BatchReport:
        report = self._new_report()
        if facilities is None:
            facilities = self.store.fetch_active(["phone"])
        by_id = {f.id: f for f in facilities}
        verified_at = datetime.now(timezone.utc).isoformat()
        log.info("apply_scraped_start", updates=len(matched), dry_run=self.batch.dry_run)

        for i, m in enumerate(matched, start=1):
            facility = by_id.get(m.facility_id)
            if facility is None:
                report.outcomes.append(ItemOutcome(
                    m.facility_name, "SKIP", facility_id=m.facility_id, reason="not_active"
                ))
                continue

            payload = build_update_payload(m.scraper_data, facility.existing_attributes, verified_at)
            error = self._write(lambda: self.store.update(m.facility_id, payload))
            if error:
                log.error("write_failed", facility=m.facility_name, op="update", error=error)
                report.outcomes.append(ItemOutcome(
                    m.facility_name, "ERROR", facility_id=m.facility_id, fields=payload, error=error
                ))
                continue

            report.field_counts.update(payload.keys())
            report.outcomes.append(ItemOutcome(
                m.facility_name, "UPDATE", facility_id=m.facility_id, fields=payload
            ))
            log.debug("scraped_update_applied", index=i, total=len(matched), facility=m.facility_name)

        log.info("apply_scraped_done", updated=report.updated, errors=report.errors)
        return report
