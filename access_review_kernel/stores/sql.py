"""
Module: access_review_kernel.stores.sql
Responsibility: Relational stores over the SQLAlchemy ORM models, for the
    hosted deployment (PostgreSQL via psycopg, SQLite for tests).
Architecture position: Kernel > Stores.  May import from db/, models/,
    domain/ and exceptions.

Invariants enforced:
    - One session per store call, committed or rolled back by session_scope.
    - upsert with expected_version locks the row (SELECT ... FOR UPDATE where
      the backend supports it) before comparing versions.
    - original_submission_id is UNIQUE in the table, so at most one
      resubmission can ever link to a source record.

Failure modes:
    - OptimisticLockError on a stale compare-and-set.
    - DuplicateSubmissionError from replace_all.
    - sqlalchemy.exc.IntegrityError when a second record links to an
      original that already has a resubmission.
"""

from __future__ import annotations

from typing import Iterable

from sqlalchemy import delete, select
from sqlalchemy.orm import Session, sessionmaker

from access_review_kernel.db.engine import session_scope
from access_review_kernel.domain.accounts import UserAccount
from access_review_kernel.domain.submission import Submission
from access_review_kernel.domain.summary import SummaryRow
from access_review_kernel.exceptions import OptimisticLockError
from access_review_kernel.logging_config import get_logger
from access_review_kernel.models.submission import SubmissionModel
from access_review_kernel.models.summary import SummaryRowModel
from access_review_kernel.models.user import UserModel
from access_review_kernel.stores.base import MISSING_VERSION, check_unique_ids

logger = get_logger("stores.sql")


class SqlRecordStore:
    """Submissions in ``access_review_submissions``."""

    def __init__(self, session_factory: sessionmaker[Session]):
        self._factory = session_factory

    def list_all(self) -> list[Submission]:
        with session_scope(self._factory) as session:
            rows = session.scalars(select(SubmissionModel).order_by(SubmissionModel.id))
            return [row.to_dto() for row in rows]

    def get_by_id(self, submission_id: int) -> Submission | None:
        with session_scope(self._factory) as session:
            row = session.get(SubmissionModel, submission_id)
            return row.to_dto() if row is not None else None

    def upsert(self, submission: Submission, expected_version: int | None = None) -> None:
        with session_scope(self._factory) as session:
            row = session.get(
                SubmissionModel,
                submission.id,
                with_for_update=expected_version is not None,
            )
            if expected_version is not None:
                actual = row.version if row is not None else MISSING_VERSION
                if actual != expected_version:
                    raise OptimisticLockError(
                        "Submission", str(submission.id), expected_version, actual,
                    )
            if row is None:
                session.add(SubmissionModel.from_dto(submission))
            else:
                row.apply_dto(submission)

    def replace_all(self, submissions: Iterable[Submission]) -> None:
        records = check_unique_ids(submissions)
        with session_scope(self._factory) as session:
            session.execute(delete(SubmissionModel))
            session.add_all(SubmissionModel.from_dto(s) for s in records)
        logger.info("submissions_replaced", extra={"count": len(records)})


class SqlSummaryRowStore:
    """Summary rows in ``access_review_summary_rows``."""

    def __init__(self, session_factory: sessionmaker[Session]):
        self._factory = session_factory

    def list_all(self) -> list[SummaryRow]:
        with session_scope(self._factory) as session:
            rows = session.scalars(select(SummaryRowModel).order_by(SummaryRowModel.position))
            return [row.to_dto() for row in rows]

    def replace_all(self, rows: Iterable[SummaryRow]) -> None:
        rows = list(rows)
        with session_scope(self._factory) as session:
            session.execute(delete(SummaryRowModel))
            session.add_all(
                SummaryRowModel.from_dto(r, position) for position, r in enumerate(rows)
            )


class SqlUserStore:
    """Accounts in ``access_review_users``."""

    def __init__(self, session_factory: sessionmaker[Session]):
        self._factory = session_factory

    def list_all(self) -> list[UserAccount]:
        with session_scope(self._factory) as session:
            rows = session.scalars(select(UserModel).order_by(UserModel.username))
            return [row.to_dto() for row in rows]

    def get_by_id(self, username: str) -> UserAccount | None:
        with session_scope(self._factory) as session:
            row = session.get(UserModel, username)
            return row.to_dto() if row is not None else None

    def upsert(self, user: UserAccount) -> None:
        with session_scope(self._factory) as session:
            session.merge(UserModel.from_dto(user))

    def delete(self, username: str) -> bool:
        with session_scope(self._factory) as session:
            row = session.get(UserModel, username)
            if row is None:
                return False
            session.delete(row)
            return True
