"""Command line access to the local store: dashboard summary and migration."""

from __future__ import annotations

import argparse
import json
import os
import sys
from typing import List, Optional

from grocery_tracker.adapters.supabase_client import get_supabase_client, sign_in
from grocery_tracker.config import DEFAULT_DB_PATH, get_settings
from grocery_tracker.domain.errors import GroceryTrackerError
from grocery_tracker.logging_config import setup_logging
from grocery_tracker.services.aggregation import build_dashboard
from grocery_tracker.services.gateway import RemoteGateway
from grocery_tracker.services.migration import has_existing_data, migrate_local_store
from grocery_tracker.services.record_store import LocalRecordStore


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="grocery-tracker")
    parser.add_argument(
        "--db",
        default=os.environ.get("GROCERY_DB_PATH", DEFAULT_DB_PATH),
        help="Path to the local sqlite file",
    )
    parser.add_argument("--log-level", default=None)
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("summary", help="Print dashboard statistics for the local store")

    migrate = commands.add_parser("migrate", help="Copy local records to the remote store")
    migrate.add_argument("--email", required=True)
    migrate.add_argument("--password", required=True)
    migrate.add_argument("--force", action="store_true", help="Run even if already migrated")
    return parser


def _print_summary(store: LocalRecordStore) -> None:
    summary = build_dashboard(
        store.load_purchases(), store.load_items(), store.load_categories()
    )
    print(f"Total spent:        {summary.total_spent:,.2f}")
    print(f"This month:         {summary.current_month_spending:,.2f}")
    print(f"Avg. per purchase:  {summary.average_per_purchase:,.2f}")
    print(f"Total purchases:    {summary.purchase_count}")

    if summary.top_items:
        print("\nTop items:")
        for entry in summary.top_items:
            print(f"  {entry.name:<30} {entry.amount:>10,.2f}")
    if summary.category_spending:
        print("\nBy category:")
        for entry in summary.category_spending:
            print(f"  {entry.category:<30} {entry.amount:>10,.2f}")


def _migrate(store: LocalRecordStore, email: str, password: str, force: bool) -> None:
    settings = get_settings()
    client = get_supabase_client(settings.supabase_url, settings.supabase_key)
    token = sign_in(client, email=email, password=password)
    gateway = RemoteGateway(client, access_token=token)

    if has_existing_data(gateway) and not force:
        print("Remote store already holds data for this user; use --force to migrate anyway.")
        sys.exit(1)

    report = migrate_local_store(store, gateway, force=force)
    print(json.dumps(report.as_dict(), indent=2))


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entry point."""
    args = _build_parser().parse_args(argv)
    setup_logging(args.log_level)

    store = LocalRecordStore.open(args.db)
    store.adopt_hyphenated_keys()

    try:
        if args.command == "summary":
            _print_summary(store)
        elif args.command == "migrate":
            _migrate(store, args.email, args.password, args.force)
    except GroceryTrackerError as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
