"""
ReviewConfig schema.

Defines the human-authored, reviewable configuration of one deployment:
who reviews which stage, which payload fields feed the summary table,
where records are kept and how verbose logging is.  YAML is parsed into
these types by the loader and checked by the validator; the bridges turn
them into kernel inputs.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# ---------------------------------------------------------------------------
# Reviewer identities
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ReviewerConfig:
    """Which identities may write which review field.

    ``file_roles`` left empty means the approver roles also manage the
    signed artifact.
    """

    validator_usernames: tuple[str, ...] = ()
    recommender_usernames: tuple[str, ...] = ()
    approver_roles: tuple[str, ...] = ()
    file_roles: tuple[str, ...] = ()
    account_admin_roles: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Summary projection
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SummaryConfig:
    key_field: str = "factUserId"
    list_field: str = "entityName"
    group_field: str = "securityGroupOther"


# ---------------------------------------------------------------------------
# Storage and logging
# ---------------------------------------------------------------------------

STORE_BACKENDS = frozenset({"memory", "json", "sql"})


@dataclass(frozen=True)
class StoreConfig:
    backend: str = "memory"
    path: str | None = None  # json
    database_url: str | None = None  # sql


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


# ---------------------------------------------------------------------------
# Aggregate
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ReviewConfig:
    """A complete, checksummed configuration.

    ``checksum`` is the SHA-256 of the canonical JSON of the source data,
    so two loads of the same YAML always agree.
    """

    config_id: str
    version: int
    reviewers: ReviewerConfig = field(default_factory=ReviewerConfig)
    summary: SummaryConfig = field(default_factory=SummaryConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    checksum: str = ""
