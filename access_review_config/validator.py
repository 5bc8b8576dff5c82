"""
Configuration Validator (``access_review_config.validator``).

Responsibility
--------------
Checks a parsed ``ReviewConfig`` for structural problems before any kernel
object is built from it.

Invariants enforced
-------------------
* Every reviewer binding (validator, recommender, approver, account admin)
  names at least one identity.
* No username is bound to both the Validator and Recommender stage.
* The store backend is known and has the setting it needs.

Failure modes
-------------
* Validation errors (``ConfigValidationResult.errors``)  -> configuration
  MUST NOT be used.
* Validation warnings  -> usable but worth a look.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from access_review_config.schema import STORE_BACKENDS, ReviewConfig


@dataclass
class ConfigValidationResult:
    """
    Result of configuration validation.

    ``is_valid`` returns ``True`` only when ``errors`` is empty.
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)


def validate_configuration(config: ReviewConfig) -> ConfigValidationResult:
    """Validate a configuration; collects every problem rather than stopping."""
    result = ConfigValidationResult()
    _validate_reviewers(config, result)
    _validate_summary(config, result)
    _validate_store(config, result)
    _validate_logging(config, result)
    return result


def _validate_reviewers(config: ReviewConfig, result: ConfigValidationResult) -> None:
    reviewers = config.reviewers
    required = {
        "validator_usernames": reviewers.validator_usernames,
        "recommender_usernames": reviewers.recommender_usernames,
        "approver_roles": reviewers.approver_roles,
        "account_admin_roles": reviewers.account_admin_roles,
    }
    for name, values in required.items():
        if not values:
            result.add_error(f"reviewers.{name} must name at least one identity")

    both = set(reviewers.validator_usernames) & set(reviewers.recommender_usernames)
    if both:
        result.add_error(
            f"usernames bound to both validator and recommender: {sorted(both)}"
        )

    if not reviewers.file_roles:
        result.add_warning("reviewers.file_roles not set; approver roles manage files")


def _validate_summary(config: ReviewConfig, result: ConfigValidationResult) -> None:
    for name in ("key_field", "list_field", "group_field"):
        if not getattr(config.summary, name):
            result.add_error(f"summary.{name} must not be empty")


def _validate_store(config: ReviewConfig, result: ConfigValidationResult) -> None:
    store = config.store
    if store.backend not in STORE_BACKENDS:
        result.add_error(
            f"store.backend {store.backend!r} is not one of {sorted(STORE_BACKENDS)}"
        )
    elif store.backend == "json" and not store.path:
        result.add_error("store.path is required for the json backend")
    elif store.backend == "sql" and not store.database_url:
        result.add_error("store.database_url is required for the sql backend")


def _validate_logging(config: ReviewConfig, result: ConfigValidationResult) -> None:
    if not isinstance(logging.getLevelName(config.logging.level), int):
        result.add_error(f"logging.level {config.logging.level!r} is not a logging level")
