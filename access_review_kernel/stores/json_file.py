"""
Module: access_review_kernel.stores.json_file
Responsibility: File-backed stores sharing one JSON document of named
    collections, the layout the browser deployment kept in local storage:
    ``forms`` (submissions), ``summaryFact`` (summary rows) and ``users``.
Architecture position: Kernel > Stores.  May import from domain/ and
    exceptions.

Invariants enforced:
    - Every write replaces the whole document atomically: the new content
      goes to a temp file in the same directory, then os.replace().
    - Reads and read-modify-writes on one document are serialized by a
      per-path lock shared by every store opened on that path.

Failure modes:
    - json.JSONDecodeError when the document on disk is not valid JSON.
    - OptimisticLockError on a stale compare-and-set.
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Iterable

from access_review_kernel.domain.accounts import UserAccount
from access_review_kernel.domain.codec import (
    submission_from_dict,
    submission_to_dict,
    summary_row_from_dict,
    summary_row_to_dict,
    user_from_dict,
    user_to_dict,
)
from access_review_kernel.domain.submission import Submission
from access_review_kernel.domain.summary import SummaryRow
from access_review_kernel.exceptions import OptimisticLockError
from access_review_kernel.logging_config import get_logger
from access_review_kernel.stores.base import MISSING_VERSION, check_unique_ids

logger = get_logger("stores.json_file")

FORMS = "forms"
SUMMARY = "summaryFact"
USERS = "users"

_path_locks: dict[str, threading.RLock] = {}
_path_locks_guard = threading.Lock()


def _lock_for(path: Path) -> threading.RLock:
    key = str(path.resolve())
    with _path_locks_guard:
        return _path_locks.setdefault(key, threading.RLock())


class KeyValueFile:
    """One JSON object on disk mapping collection name to a list of records."""

    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)
        self.lock = _lock_for(self.path)

    def read(self) -> dict[str, Any]:
        with self.lock:
            if not self.path.exists():
                return {}
            text = self.path.read_text(encoding="utf-8")
            return json.loads(text) if text.strip() else {}

    def get_collection(self, name: str) -> list[dict[str, Any]]:
        return list(self.read().get(name) or [])

    def set_collection(self, name: str, records: list[dict[str, Any]]) -> None:
        with self.lock:
            document = self.read()
            document[name] = records
            self._write(document)

    def _write(self, document: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(document, handle, indent=2, sort_keys=True)
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
        logger.debug("json_document_written", extra={"path": str(self.path)})


class JsonFileRecordStore:
    """Submissions kept in the ``forms`` collection."""

    def __init__(self, path: str | os.PathLike):
        self._file = KeyValueFile(path)

    def list_all(self) -> list[Submission]:
        return [submission_from_dict(d) for d in self._file.get_collection(FORMS)]

    def get_by_id(self, submission_id: int) -> Submission | None:
        for data in self._file.get_collection(FORMS):
            if int(data["id"]) == submission_id:
                return submission_from_dict(data)
        return None

    def upsert(self, submission: Submission, expected_version: int | None = None) -> None:
        with self._file.lock:
            records = self._file.get_collection(FORMS)
            index = next(
                (i for i, d in enumerate(records) if int(d["id"]) == submission.id),
                None,
            )
            if expected_version is not None:
                actual = (
                    int(records[index].get("version", 0))
                    if index is not None else MISSING_VERSION
                )
                if actual != expected_version:
                    raise OptimisticLockError(
                        "Submission", str(submission.id), expected_version, actual,
                    )
            data = submission_to_dict(submission)
            if index is None:
                records.append(data)
            else:
                records[index] = data
            self._file.set_collection(FORMS, records)

    def replace_all(self, submissions: Iterable[Submission]) -> None:
        records = check_unique_ids(submissions)
        self._file.set_collection(FORMS, [submission_to_dict(s) for s in records])


class JsonFileSummaryRowStore:
    """Summary rows kept in the ``summaryFact`` collection."""

    def __init__(self, path: str | os.PathLike):
        self._file = KeyValueFile(path)

    def list_all(self) -> list[SummaryRow]:
        return [summary_row_from_dict(d) for d in self._file.get_collection(SUMMARY)]

    def replace_all(self, rows: Iterable[SummaryRow]) -> None:
        self._file.set_collection(SUMMARY, [summary_row_to_dict(r) for r in rows])


class JsonFileUserStore:
    """Accounts kept in the ``users`` collection."""

    def __init__(self, path: str | os.PathLike):
        self._file = KeyValueFile(path)

    def list_all(self) -> list[UserAccount]:
        return [user_from_dict(d) for d in self._file.get_collection(USERS)]

    def get_by_id(self, username: str) -> UserAccount | None:
        for user in self.list_all():
            if user.username == username:
                return user
        return None

    def upsert(self, user: UserAccount) -> None:
        with self._file.lock:
            users = [u for u in self.list_all() if u.username != user.username]
            users.append(user)
            self._file.set_collection(USERS, [user_to_dict(u) for u in users])

    def delete(self, username: str) -> bool:
        with self._file.lock:
            users = self.list_all()
            remaining = [u for u in users if u.username != username]
            if len(remaining) == len(users):
                return False
            self._file.set_collection(USERS, [user_to_dict(u) for u in remaining])
            return True
