"""
Configuration Loader (``access_review_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into the frozen
``access_review_config.schema`` dataclasses.  Runtime callers go through
``access_review_config.get_active_config()``, which validates the result.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  No dependency on the kernel.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py``.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.
* Sections that are absent take the schema defaults; ``config_id`` and
  ``version`` are required.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing ``config_id`` / ``version``  -> ``KeyError`` propagates.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from access_review_config.schema import (
    LoggingConfig,
    ReviewConfig,
    ReviewerConfig,
    StoreConfig,
    SummaryConfig,
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _names(value: Any) -> tuple[str, ...]:
    """A YAML scalar or list of names as a tuple of stripped strings."""
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    return tuple(str(v).strip() for v in value if str(v).strip())


def parse_reviewers(data: dict[str, Any]) -> ReviewerConfig:
    return ReviewerConfig(
        validator_usernames=_names(data.get("validator_usernames")),
        recommender_usernames=_names(data.get("recommender_usernames")),
        approver_roles=_names(data.get("approver_roles")),
        file_roles=_names(data.get("file_roles")),
        account_admin_roles=_names(data.get("account_admin_roles")),
    )


def parse_summary(data: dict[str, Any]) -> SummaryConfig:
    defaults = SummaryConfig()
    return SummaryConfig(
        key_field=data.get("key_field", defaults.key_field),
        list_field=data.get("list_field", defaults.list_field),
        group_field=data.get("group_field", defaults.group_field),
    )


def parse_store(data: dict[str, Any]) -> StoreConfig:
    return StoreConfig(
        backend=str(data.get("backend", "memory")).lower(),
        path=data.get("path"),
        database_url=data.get("database_url"),
    )


def parse_logging(data: dict[str, Any]) -> LoggingConfig:
    return LoggingConfig(level=str(data.get("level", "INFO")).upper())


def parse_config(data: dict[str, Any]) -> ReviewConfig:
    """Parse a raw YAML mapping into a ``ReviewConfig``."""
    return ReviewConfig(
        config_id=data["config_id"],
        version=int(data["version"]),
        reviewers=parse_reviewers(data.get("reviewers") or {}),
        summary=parse_summary(data.get("summary") or {}),
        store=parse_store(data.get("store") or {}),
        logging=parse_logging(data.get("logging") or {}),
        checksum=compute_checksum(data),
    )


def load_config(path: Path) -> ReviewConfig:
    """Load and parse one configuration file (not validated)."""
    return parse_config(load_yaml_file(path))


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Postconditions:
        - Identical ``data`` always produces identical checksums
          (deterministic).
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
