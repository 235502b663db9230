"""CLI for facility reconciliation batch jobs."""

import argparse
import sys

import structlog

from courtmatch.config import AppConfig, BatchConfig, ConfigError, StoreConfig
from courtmatch.denylist import Denylist, default_junk_path
from courtmatch.logging import bind_run, configure_logging
from courtmatch.matcher import Matcher
from courtmatch.normalize import normalize
from courtmatch.reconcile import CleanupReconciler, ResearchReconciler
from courtmatch.report import print_outcomes, print_summary, write_report
from courtmatch.research import ResearchTableError, load_research_table
from courtmatch.scraper import (
    SNAPSHOT_COLUMNS,
    ScrapedUpdateApplier,
    ScraperInputError,
    ScraperReconciler,
    load_matched_updates,
    read_scraper_csv,
    write_scraper_outputs,
)
from courtmatch.store import SupabaseFacilityStore, StoreError
from courtmatch.types import BatchReport


def _build_config(args: argparse.Namespace) -> AppConfig:
    """Build an AppConfig from CLI args. Store settings come from the environment."""
    config = AppConfig(
        batch=BatchConfig(
            dry_run=getattr(args, "dry_run", False),
            overwrite=getattr(args, "overwrite", False),
        ),
    )
    if getattr(args, "needs_store", False):
        config.store = StoreConfig.from_env(getattr(args, "env_file", ".env.local"))
    return config


def _build_store(config: AppConfig) -> SupabaseFacilityStore:
    log = structlog.get_logger()
    log.info("store_client_init", table=config.store.table)
    return SupabaseFacilityStore(config.store)


def _mode_line(config: AppConfig) -> None:
    mode = "DRY RUN" if config.batch.dry_run else "LIVE"
    policy = "OVERWRITE" if config.batch.overwrite else "fill-gaps-only"
    print(f"Mode: {mode} | {policy}\n")


def _finish(report: BatchReport, args: argparse.Namespace) -> None:
    print_outcomes(report, show_skipped=args.show_skipped)
    print_summary(report)
    if args.report:
        path = write_report(report, args.report)
        print(f"\nReport saved to: {path}")


def cmd_research(args: argparse.Namespace) -> None:
    table = load_research_table(args.table)
    config = _build_config(args)
    _mode_line(config)

    reconciler = ResearchReconciler(
        _build_store(config), table, batch=config.batch, match=config.match
    )
    report = reconciler.run()
    _finish(report, args)


def cmd_cleanup(args: argparse.Namespace) -> None:
    denylist = Denylist.load(args.denylist or default_junk_path())
    config = _build_config(args)
    _mode_line(config)
    print(f"Deactivating entries matching {len(denylist)} junk names...\n")

    report = CleanupReconciler(_build_store(config), denylist, batch=config.batch).run()
    _finish(report, args)


def cmd_scrape_process(args: argparse.Namespace) -> None:
    rows = read_scraper_csv(args.input)
    print(f"Parsed {len(rows)} total rows from CSV.")
    denylist = Denylist.load(args.denylist or default_junk_path())
    config = _build_config(args)

    facilities = _build_store(config).fetch_active(SNAPSHOT_COLUMNS)
    print(f"Found {len(facilities)} existing facilities in DB.")

    report = ScraperReconciler(facilities, denylist, match=config.match, batch=config.batch).run(rows)

    print(f"Filtered to {report.padel_rows} padel-related results.")
    print("\nResults:")
    print(f"  Matched existing: {len(report.matched)}")
    print(f"  New discoveries:  {len(report.new)}")
    print(f"  Skipped:          {len(report.skipped)}")
    print(f"  Facilities with reviews: {len(report.reviews)}")
    print(f"  Total reviews: {sum(len(r.reviews) for r in report.reviews)}")
    for title, reason in report.skipped:
        print(f"  [SKIP] {title} ({reason})")

    paths = write_scraper_outputs(report, args.output_dir)
    print("\nFiles written:")
    for path in paths:
        print(f"  {path}")


def cmd_scrape_apply(args: argparse.Namespace) -> None:
    matched = load_matched_updates(args.input)
    config = _build_config(args)
    _mode_line(config)
    print(f"Processing {len(matched)} matched facility updates.\n")

    report = ScrapedUpdateApplier(_build_store(config), batch=config.batch).run(matched)
    _finish(report, args)


def cmd_resolve(args: argparse.Namespace) -> None:
    """Show how names resolve against a research table, without touching the store."""
    table = load_research_table(args.table)
    denylist = Denylist(table.deactivate)
    matcher = Matcher(AppConfig().match)
    matcher.preprocess_known((key, key) for key in table.keys())

    for name in args.names:
        if denylist.should_deactivate(name):
            print(f"{name!r} -> DEACTIVATE")
            continue
        result = matcher.match_one(name)
        if result.matched:
            print(f"{name!r} -> {result.decision} {result.target_key!r}")
        else:
            print(f"{name!r} -> NO_MATCH")


def _print_groups(title: str, names: list[str]) -> None:
    groups: dict[str, list[str]] = {}
    for name in names:
        groups.setdefault(normalize(name), []).append(name)

    print(f"=== {title} [normalized] ===")
    dupes = {norm: members for norm, members in groups.items() if len(members) > 1}
    if not dupes:
        print("  No duplicates found.")
        return
    for norm, members in sorted(dupes.items()):
        print(f"  {norm or '<empty>'} (x{len(members)})")
        for member in members:
            print(f"    - {member}")
    print(f"\n  Total: {len(dupes)} duplicate names, {sum(len(m) for m in dupes.values())} total rows")


def cmd_dupes(args: argparse.Namespace) -> None:
    """List names that normalize identically (first one wins during matching)."""
    if args.table:
        table = load_research_table(args.table)
        _print_groups(f"Research keys ({table.name})", table.keys())
        print()
    if args.store:
        config = _build_config(args)
        facilities = _build_store(config).fetch_active()
        _print_groups("Active facilities", [f.name for f in facilities])


def main(argv: list[str] | None = None) -> None:
    # Global options, accepted before or after the subcommand (no defaults, so
    # the subparser cannot reset a value given before it)
    parent_parser = argparse.ArgumentParser(add_help=False)
    parent_parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=argparse.SUPPRESS,
        help="Set logging level (default: $LOG_LEVEL, else INFO)",
    )
    parent_parser.add_argument(
        "--log-json",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Emit log events as JSON lines",
    )
    parent_parser.add_argument(
        "--env-file",
        default=argparse.SUPPRESS,
        help="dotenv file with Supabase credentials (default: .env.local)",
    )

    # Batch options shared by the writing subcommands
    batch_parser = argparse.ArgumentParser(add_help=False)
    batch_parser.add_argument("--dry-run", action="store_true", help="Log decisions without writing")
    batch_parser.add_argument("--report", help="Write outcomes to a .csv or .xlsx file")
    batch_parser.add_argument("--show-skipped", action="store_true", help="Also print skipped facilities")

    parser = argparse.ArgumentParser(
        description="Padel facility data reconciliation CLI",
        parents=[parent_parser],
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # research subcommand
    research_parser = subparsers.add_parser(
        "research", parents=[parent_parser, batch_parser], help="Apply a research table"
    )
    research_parser.add_argument("--table", default="manual", help="manual, pricing, or a JSON file path")
    research_parser.add_argument("--overwrite", action="store_true", help="Overwrite existing values")
    research_parser.set_defaults(func=cmd_research, needs_store=True)

    # cleanup subcommand
    cleanup_parser = subparsers.add_parser(
        "cleanup", parents=[parent_parser, batch_parser], help="Deactivate junk entries"
    )
    cleanup_parser.add_argument("--denylist", help="JSON list of names (default: config_data/denylists/junk.json)")
    cleanup_parser.set_defaults(func=cmd_cleanup, needs_store=True)

    # scrape-process subcommand
    process_parser = subparsers.add_parser(
        "scrape-process", parents=[parent_parser], help="Match scraper CSV output to facilities"
    )
    process_parser.add_argument("--input", default="data/scraper-raw.csv", help="Scraper CSV path")
    process_parser.add_argument("--output-dir", default="data", help="Directory for the JSON outputs")
    process_parser.add_argument("--denylist", help="JSON list of junk names to skip")
    process_parser.set_defaults(func=cmd_scrape_process, needs_store=True)

    # scrape-apply subcommand
    apply_parser = subparsers.add_parser(
        "scrape-apply", parents=[parent_parser, batch_parser], help="Apply matched scraper updates"
    )
    apply_parser.add_argument("--input", default="data/matched-updates.json", help="Matched updates JSON")
    apply_parser.set_defaults(func=cmd_scrape_apply, needs_store=True)

    # resolve subcommand
    resolve_parser = subparsers.add_parser(
        "resolve", parents=[parent_parser], help="Show how names resolve against a research table"
    )
    resolve_parser.add_argument("names", nargs="+", metavar="NAME")
    resolve_parser.add_argument("--table", default="manual", help="manual, pricing, or a JSON file path")
    resolve_parser.set_defaults(func=cmd_resolve)

    # dupes subcommand
    dupes_parser = subparsers.add_parser(
        "dupes", parents=[parent_parser], help="Find names that normalize identically"
    )
    dupes_parser.add_argument("--table", help="Check research table keys (manual, pricing, or path)")
    dupes_parser.add_argument("--store", action="store_true", help="Check active facility names")
    dupes_parser.set_defaults(func=cmd_dupes)

    args = parser.parse_args(argv)
    if args.command == "dupes":
        args.needs_store = args.store
    configure_logging(getattr(args, "log_level", None), json_logs=getattr(args, "log_json", False))
    bind_run(args.command, dry_run=getattr(args, "dry_run", False))

    try:
        args.func(args)
    except (ConfigError, ResearchTableError, ScraperInputError, StoreError,
            FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
