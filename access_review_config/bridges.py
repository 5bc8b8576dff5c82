"""
Config → Kernel Bridges.

Functions that convert a validated ReviewConfig into kernel inputs. These
live in access_review_config (the producer) because the kernel must NEVER
import access_review_config.

Usage:
    from access_review_config.bridges import build_reviewer_bindings, build_stores

    config = get_active_config()
    stores = build_stores(config)
    service = ReviewService(stores.records, build_reviewer_bindings(config))
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from access_review_config.schema import ReviewConfig
from access_review_kernel.db.engine import (
    create_tables,
    get_session_factory,
    init_engine_from_url,
)
from access_review_kernel.domain.reviewers import ReviewerBindings
from access_review_kernel.domain.summary import SummaryFieldMap
from access_review_kernel.logging_config import configure_logging
from access_review_kernel.stores.base import RecordStore, SummaryRowStore, UserStore
from access_review_kernel.stores.json_file import (
    JsonFileRecordStore,
    JsonFileSummaryRowStore,
    JsonFileUserStore,
)
from access_review_kernel.stores.memory import (
    InMemoryRecordStore,
    InMemorySummaryRowStore,
    InMemoryUserStore,
)
from access_review_kernel.stores.sql import SqlRecordStore, SqlSummaryRowStore, SqlUserStore


@dataclass(frozen=True)
class StoreSet:
    """The three stores one deployment runs on."""

    records: RecordStore
    summary: SummaryRowStore
    users: UserStore


def build_reviewer_bindings(config: ReviewConfig) -> ReviewerBindings:
    """Build the field-to-identity bindings from the reviewers section."""
    reviewers = config.reviewers
    return ReviewerBindings(
        validator_usernames=frozenset(reviewers.validator_usernames),
        recommender_usernames=frozenset(reviewers.recommender_usernames),
        approver_roles=frozenset(reviewers.approver_roles),
        file_roles=frozenset(reviewers.file_roles),
        account_admin_roles=frozenset(reviewers.account_admin_roles),
    )


def build_summary_field_map(config: ReviewConfig) -> SummaryFieldMap:
    return SummaryFieldMap(
        key_field=config.summary.key_field,
        list_field=config.summary.list_field,
        group_field=config.summary.group_field,
    )


def build_stores(config: ReviewConfig) -> StoreSet:
    """Open the record, summary and user stores for the configured backend.

    For ``sql`` this initializes the module-level engine and creates any
    missing tables.
    """
    backend = config.store.backend
    if backend == "json":
        path = Path(config.store.path)
        return StoreSet(
            records=JsonFileRecordStore(path),
            summary=JsonFileSummaryRowStore(path),
            users=JsonFileUserStore(path),
        )
    if backend == "sql":
        init_engine_from_url(config.store.database_url)
        create_tables()
        factory = get_session_factory()
        return StoreSet(
            records=SqlRecordStore(factory),
            summary=SqlSummaryRowStore(factory),
            users=SqlUserStore(factory),
        )
    if backend == "memory":
        return StoreSet(
            records=InMemoryRecordStore(),
            summary=InMemorySummaryRowStore(),
            users=InMemoryUserStore(),
        )
    raise ValueError(f"Unknown store backend: {backend!r}")


def apply_logging(config: ReviewConfig) -> None:
    """Configure kernel logging at the configured level."""
    configure_logging(level=config.logging.level)
