"""
Module: access_review_kernel.db.base
Responsibility: Declarative base for all SQLAlchemy ORM models and the
    column types shared by them.
Architecture position: Kernel > DB.  The lowest-level import target within
    the kernel.  MUST NOT import from models/, stores/, services/ or domain/.

Invariants enforced:
    - Timestamps are timezone-aware on the way in and on the way out, on
      every backend (SQLite drops tzinfo, so UTCDateTime restores it).
    - int maps to BigInteger -- submission ids are millisecond timestamps.
"""

from datetime import datetime, timezone
from typing import ClassVar

from sqlalchemy import BigInteger, DateTime
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware datetime stored as UTC.

    Guarantees:
        - process_bind_param: aware datetime -> UTC datetime.
        - process_result_value: naive value from the driver -> UTC-aware.
        - cache_ok=True enables SQLAlchemy statement caching.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError(f"Naive datetime not allowed: {value!r}")
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Models declare their own primary keys: submissions are keyed by their
    integer id, summary rows by user id, users by username.
    """

    type_annotation_map: ClassVar[dict] = {
        datetime: UTCDateTime(),
        int: BigInteger,
    }
