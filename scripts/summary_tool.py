#!/usr/bin/env python3
"""
Maintain the summary table from the command line.

Usage:
    python3 scripts/summary_tool.py sync
    python3 scripts/summary_tool.py export summary.xlsx
    python3 scripts/summary_tool.py import summary.xlsx
    python3 scripts/summary_tool.py list [--search TEXT] [--company NAME] [--group NAME]
    python3 scripts/summary_tool.py seed-users

Examples:
    # Append rows for newly approved requests, using a JSON store
    python3 scripts/summary_tool.py --config deploy.yaml sync

    # Print rows mentioning "acme"
    python3 scripts/summary_tool.py list --search acme
"""

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

W = 80


def banner(title: str) -> None:
    print()
    print("=" * W)
    print(f"  {title}")
    print("=" * W)


def print_rows(rows) -> None:
    if not rows:
        print("    (no rows)")
        return
    print(f"    {'ID':<20} {'Security Group':<24} Company List")
    for row in rows:
        print(f"    {row.user_id:<20} {row.security_group:<24} {row.company_list}")


def main() -> int:
    parser = argparse.ArgumentParser(description="Summary table maintenance")
    parser.add_argument(
        "--config", type=str, default=None,
        help="Configuration YAML (default: the packaged default set)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("sync", help="Append rows for approved submissions")

    p_export = sub.add_parser("export", help="Write the table to an xlsx workbook")
    p_export.add_argument("path", type=str)

    p_import = sub.add_parser("import", help="Replace the table from an xlsx workbook")
    p_import.add_argument("path", type=str)

    p_list = sub.add_parser("list", help="Print the table")
    p_list.add_argument("--search", type=str, default="")
    p_list.add_argument("--company", type=str, default="")
    p_list.add_argument("--group", type=str, default="")

    sub.add_parser("seed-users", help="Create the default accounts in an empty store")

    args = parser.parse_args()

    from access_review_config import get_active_config
    from access_review_config.bridges import (
        apply_logging,
        build_reviewer_bindings,
        build_stores,
        build_summary_field_map,
    )
    from access_review_kernel.exceptions import AccessReviewError
    from access_review_kernel.services import AccountService, SummaryService

    try:
        config = get_active_config(args.config)
    except (FileNotFoundError, ValueError) as exc:
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 1

    apply_logging(config)
    stores = build_stores(config)
    service = SummaryService(stores.summary, stores.records, build_summary_field_map(config))

    try:
        if args.command == "sync":
            result = service.sync()
            banner("SUMMARY SYNC")
            print(f"    appended: {len(result.appended)}  total: {len(result.rows)}")
            print_rows(result.appended)
        elif args.command == "export":
            path = service.export_xlsx(args.path)
            print(f"  wrote {path}")
        elif args.command == "import":
            rows = service.import_xlsx(args.path)
            print(f"  imported {len(rows)} rows from {args.path}")
        elif args.command == "list":
            banner("SUMMARY")
            print_rows(service.filter(args.search, args.company, args.group))
        elif args.command == "seed-users":
            bindings = build_reviewer_bindings(config)
            accounts = AccountService(stores.users, bindings.account_admin_roles)
            print(f"  seeded {accounts.seed_defaults()} users")
    except AccessReviewError as exc:
        print(f"  ERROR [{exc.code}]: {exc}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
