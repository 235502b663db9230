"""Console output and tabular export of batch reports."""

from __future__ import annotations

from pathlib import Path

import pandas as pd

from courtmatch.types import BatchReport, ItemOutcome


def format_outcome(outcome: ItemOutcome) -> str:
    """One console line per decision, e.g. "[UPDATE] Padel Up ← total_courts=4"."""
    if outcome.action == "UPDATE":
        fields = ", ".join(f"{k}={v}" for k, v in outcome.fields.items())
        return f"  [UPDATE] {outcome.name} ← {fields}"
    if outcome.action == "DEACTIVATE":
        return f"  [DEACTIVATE] {outcome.name}"
    if outcome.action == "ERROR":
        return f"  [ERROR] {outcome.name}: {outcome.error}"
    return f"  [SKIP] {outcome.name} ({outcome.reason})"


def print_outcomes(report: BatchReport, show_skipped: bool = False) -> None:
    for outcome in report.outcomes:
        if outcome.action == "SKIP" and not show_skipped:
            continue
        print(format_outcome(outcome))
        if outcome.action == "UPDATE" and outcome.notes:
            print(f"           ({outcome.notes})")


def print_summary(report: BatchReport) -> None:
    if report.unmatched_keys:
        print(f"\n  Unmatched research keys ({len(report.unmatched_keys)}):")
        for key in report.unmatched_keys:
            hint = report.suggestions.get(key)
            if hint:
                print(f'    - "{key}"  (closest: "{hint[0]}", {hint[1]:.0f})')
            else:
                print(f'    - "{key}"')

    print("\n========================================")
    print(f"Updated:      {report.updated}")
    print(f"Deactivated:  {report.deactivated}")
    print(f"Skipped:      {report.skipped}")
    print(f"Errors:       {report.errors}")
    print(f"Unmatched:    {len(report.unmatched_keys)}")
    for column, count in sorted(report.field_counts.items()):
        print(f"  {column}: {count}")
    print("========================================")

    if report.dry_run:
        print("\n(Dry run - no changes were made. Remove --dry-run to apply.)")


def report_frame(report: BatchReport) -> pd.DataFrame:
    rows = []
    for o in report.outcomes:
        rows.append({
            "name": o.name,
            "facility_id": o.facility_id,
            "action": o.action,
            "decision": o.match.decision if o.match else None,
            "matched_key": o.match.target_key if o.match else None,
            "fields": "; ".join(f"{k}={v}" for k, v in o.fields.items()),
            "reason": o.reason,
            "error": o.error,
        })
    return pd.DataFrame(
        rows,
        columns=["name", "facility_id", "action", "decision", "matched_key", "fields",
                 "reason", "error"],
    )


def write_report(report: BatchReport, path: str | Path) -> Path:
    """Write outcomes to .xlsx or .csv (by suffix)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df = report_frame(report)
    if path.suffix == ".xlsx":
        df.to_excel(path, index=False)
    else:
        df.to_csv(path, index=False)
    return path
