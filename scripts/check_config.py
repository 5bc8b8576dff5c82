#!/usr/bin/env python3
"""
Check a review configuration file and print its identity.

Usage:
    python scripts/check_config.py [config.yaml]

If no file is given, the packaged default set is checked.

The script:
  1. Loads the YAML file
  2. Validates it, printing every error and warning
  3. Prints config_id, version, checksum and the reviewer bindings

Exit status is 1 when validation fails, so the script can gate a deploy.
"""

import sys
from pathlib import Path

# Add project root to path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from access_review_config import DEFAULT_CONFIG_PATH
from access_review_config.loader import load_config
from access_review_config.validator import validate_configuration


def check(path: Path) -> int:
    print(f"Loading: {path}")
    config = load_config(path)
    print(f"  config_id: {config.config_id}")
    print(f"  version:   {config.version}")
    print(f"  checksum:  {config.checksum[:16]}...")

    print("Validating...")
    result = validate_configuration(config)
    for w in result.warnings:
        print(f"  WARNING: {w}")
    if not result.is_valid:
        print("VALIDATION FAILED:")
        for err in result.errors:
            print(f"  ERROR: {err}")
        return 1

    reviewers = config.reviewers
    print("Bindings:")
    print(f"  validator:     {', '.join(reviewers.validator_usernames)}")
    print(f"  recommender:   {', '.join(reviewers.recommender_usernames)}")
    print(f"  final status:  {', '.join(reviewers.approver_roles)}")
    print(f"  signed file:   {', '.join(reviewers.file_roles or reviewers.approver_roles)}")
    print(f"  accounts:      {', '.join(reviewers.account_admin_roles)}")
    print(f"  store backend: {config.store.backend}")
    return 0


def main() -> int:
    path = Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_CONFIG_PATH
    if not path.exists():
        print(f"ERROR: {path} does not exist", file=sys.stderr)
        return 1
    return check(path)


if __name__ == "__main__":
    sys.exit(main())
