"""
In-memory stores (``access_review_kernel.stores.memory``).

Dict-backed implementations of the store protocols for tests and for
single-process use.  Values are frozen dataclasses, but ``Submission.fields``
is a plain dict, so records are deep-copied on the way in and out.
"""

from __future__ import annotations

import copy
import threading
from typing import Iterable

from access_review_kernel.domain.accounts import UserAccount
from access_review_kernel.domain.submission import Submission
from access_review_kernel.domain.summary import SummaryRow
from access_review_kernel.exceptions import OptimisticLockError
from access_review_kernel.stores.base import MISSING_VERSION, check_unique_ids


class InMemoryRecordStore:
    def __init__(self, submissions: Iterable[Submission] = ()):
        self._lock = threading.Lock()
        self._records: dict[int, Submission] = {}
        self.replace_all(submissions)

    def list_all(self) -> list[Submission]:
        with self._lock:
            return [copy.deepcopy(s) for s in self._records.values()]

    def get_by_id(self, submission_id: int) -> Submission | None:
        with self._lock:
            record = self._records.get(submission_id)
            return copy.deepcopy(record) if record is not None else None

    def upsert(self, submission: Submission, expected_version: int | None = None) -> None:
        with self._lock:
            if expected_version is not None:
                current = self._records.get(submission.id)
                actual = current.version if current is not None else MISSING_VERSION
                if actual != expected_version:
                    raise OptimisticLockError(
                        "Submission", str(submission.id), expected_version, actual,
                    )
            self._records[submission.id] = copy.deepcopy(submission)

    def replace_all(self, submissions: Iterable[Submission]) -> None:
        records = check_unique_ids(submissions)
        with self._lock:
            self._records = {s.id: copy.deepcopy(s) for s in records}


class InMemorySummaryRowStore:
    def __init__(self, rows: Iterable[SummaryRow] = ()):
        self._rows: list[SummaryRow] = list(rows)

    def list_all(self) -> list[SummaryRow]:
        return list(self._rows)

    def replace_all(self, rows: Iterable[SummaryRow]) -> None:
        self._rows = list(rows)


class InMemoryUserStore:
    def __init__(self, users: Iterable[UserAccount] = ()):
        self._users: dict[str, UserAccount] = {u.username: u for u in users}

    def list_all(self) -> list[UserAccount]:
        return list(self._users.values())

    def get_by_id(self, username: str) -> UserAccount | None:
        return self._users.get(username)

    def upsert(self, user: UserAccount) -> None:
        self._users[user.username] = user

    def delete(self, username: str) -> bool:
        return self._users.pop(username, None) is not None
