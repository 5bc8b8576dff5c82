"""Persistence behind the store protocols: in-memory, JSON file and SQL."""

from access_review_kernel.stores.base import RecordStore, SummaryRowStore, UserStore
from access_review_kernel.stores.json_file import (
    JsonFileRecordStore,
    JsonFileSummaryRowStore,
    JsonFileUserStore,
    KeyValueFile,
)
from access_review_kernel.stores.memory import (
    InMemoryRecordStore,
    InMemorySummaryRowStore,
    InMemoryUserStore,
)
from access_review_kernel.stores.sql import SqlRecordStore, SqlSummaryRowStore, SqlUserStore

__all__ = [
    "RecordStore",
    "SummaryRowStore",
    "UserStore",
    "JsonFileRecordStore",
    "JsonFileSummaryRowStore",
    "JsonFileUserStore",
    "KeyValueFile",
    "InMemoryRecordStore",
    "InMemorySummaryRowStore",
    "InMemoryUserStore",
    "SqlRecordStore",
    "SqlSummaryRowStore",
    "SqlUserStore",
]
