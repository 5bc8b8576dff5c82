"""
Module: access_review_kernel.stores.base
Responsibility: Store protocols -- the only persistence surface the services
    depend on.
Architecture position: Kernel > Stores.  May import from domain/ and
    exceptions.  Implementations: memory.py, json_file.py, sql.py.

Invariants enforced:
    - get_by_id(x.id) after upsert(x) returns a value equal to x; stores
      never rewrite the records they are given.
    - upsert(x, expected_version=v) raises OptimisticLockError when the
      stored record's version is not v (a missing record has version -1).
    - replace_all() with two records sharing an id raises
      DuplicateSubmissionError and leaves the store unchanged.

Failure modes:
    - OptimisticLockError on a stale compare-and-set.
    - DuplicateSubmissionError from replace_all.
"""

from __future__ import annotations

from typing import Iterable, Protocol, runtime_checkable

from access_review_kernel.domain.accounts import UserAccount
from access_review_kernel.domain.submission import Submission
from access_review_kernel.domain.summary import SummaryRow
from access_review_kernel.exceptions import DuplicateSubmissionError

# Version reported for a record that does not exist yet.
MISSING_VERSION = -1


@runtime_checkable
class RecordStore(Protocol):
    """Mapping from submission id to submission."""

    def list_all(self) -> list[Submission]: ...

    def get_by_id(self, submission_id: int) -> Submission | None: ...

    def upsert(self, submission: Submission, expected_version: int | None = None) -> None: ...

    def replace_all(self, submissions: Iterable[Submission]) -> None: ...


@runtime_checkable
class SummaryRowStore(Protocol):
    """The derived summary table, keyed by user id."""

    def list_all(self) -> list[SummaryRow]: ...

    def replace_all(self, rows: Iterable[SummaryRow]) -> None: ...


@runtime_checkable
class UserStore(Protocol):
    """Login accounts keyed by username."""

    def list_all(self) -> list[UserAccount]: ...

    def get_by_id(self, username: str) -> UserAccount | None: ...

    def upsert(self, user: UserAccount) -> None: ...

    def delete(self, username: str) -> bool: ...


def check_unique_ids(submissions: Iterable[Submission]) -> list[Submission]:
    """Materialize ``submissions``; raise on the first repeated id."""
    seen: set[int] = set()
    result = []
    for submission in submissions:
        if submission.id in seen:
            raise DuplicateSubmissionError(submission.id)
        seen.add(submission.id)
        result.append(submission)
    return result
