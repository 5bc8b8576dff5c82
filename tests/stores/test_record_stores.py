"""
Store contract tests, run against every backend (memory, JSON file, SQLite).

Invariants tested:
- get_by_id after upsert returns an equal value.
- Compare-and-set on version rejects stale writers.
- replace_all refuses duplicate ids and leaves the store unchanged.
"""

import json
from dataclasses import replace
from datetime import timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from access_review_kernel.domain.accounts import UserAccount
from access_review_kernel.domain.summary import SummaryRow
from access_review_kernel.exceptions import DuplicateSubmissionError, OptimisticLockError
from access_review_kernel.stores.base import (
    MISSING_VERSION,
    RecordStore,
    SummaryRowStore,
    UserStore,
)
from access_review_kernel.stores.json_file import (
    FORMS,
    SUMMARY,
    USERS,
    JsonFileRecordStore,
    JsonFileSummaryRowStore,
    JsonFileUserStore,
)
from access_review_kernel.stores.sql import SqlRecordStore


class TestRecordStoreContract:
    def test_satisfies_protocol(self, record_store, summary_store, user_store):
        assert isinstance(record_store, RecordStore)
        assert isinstance(summary_store, SummaryRowStore)
        assert isinstance(user_store, UserStore)

    def test_empty(self, record_store):
        assert record_store.list_all() == []
        assert record_store.get_by_id(1) is None

    def test_read_after_write(self, record_store, make_submission):
        s = make_submission(
            1, validator="Approved", recommender="Rejected", approved_file="sig.pdf", version=3,
        )
        record_store.upsert(s)
        assert record_store.get_by_id(1) == s
        assert record_store.list_all() == [s]

    def test_upsert_overwrites(self, record_store, make_submission):
        s = make_submission(1)
        record_store.upsert(s)
        updated = replace(s, validator=make_submission(validator="Approved").validator, version=1)
        record_store.upsert(updated)
        assert record_store.get_by_id(1) == updated
        assert len(record_store.list_all()) == 1

    def test_returned_values_are_detached(self, record_store, make_submission):
        record_store.upsert(make_submission(1))
        loaded = record_store.get_by_id(1)
        loaded.fields["reason"] = "tampered"
        assert record_store.get_by_id(1).fields["reason"] == "Month-end close"

    def test_compare_and_set(self, record_store, make_submission):
        s = make_submission(1)
        record_store.upsert(s, expected_version=MISSING_VERSION)

        with pytest.raises(OptimisticLockError) as exc_info:
            record_store.upsert(replace(s, version=1), expected_version=5)
        assert exc_info.value.expected == 5
        assert exc_info.value.actual == 0

        record_store.upsert(replace(s, version=1), expected_version=0)
        assert record_store.get_by_id(1).version == 1

    def test_create_with_cas_refuses_existing(self, record_store, make_submission):
        record_store.upsert(make_submission(1))
        with pytest.raises(OptimisticLockError):
            record_store.upsert(make_submission(1), expected_version=MISSING_VERSION)

    def test_replace_all(self, record_store, make_submission):
        record_store.upsert(make_submission(9))
        record_store.replace_all([make_submission(1), make_submission(2)])
        assert sorted(s.id for s in record_store.list_all()) == [1, 2]

    def test_replace_all_rejects_duplicates(self, record_store, make_submission):
        record_store.upsert(make_submission(9))
        with pytest.raises(DuplicateSubmissionError) as exc_info:
            record_store.replace_all([make_submission(1), make_submission(1)])
        assert exc_info.value.submission_id == 1
        assert [s.id for s in record_store.list_all()] == [9]

    def test_time_zone_survives(self, record_store, make_submission):
        s = make_submission(1, validator="Approved")
        record_store.upsert(s)
        loaded = record_store.get_by_id(1)
        assert loaded.validator.decided_at.utcoffset() == timedelta(0)
        assert loaded.created_at == s.created_at


class TestSideStores:
    def test_summary_rows_keep_order(self, summary_store):
        rows = [SummaryRow("U-9", "Gamma", "OPS"), SummaryRow("U-1", "Acme Ltd", "FIN")]
        summary_store.replace_all(rows)
        assert summary_store.list_all() == rows
        summary_store.replace_all([])
        assert summary_store.list_all() == []

    def test_summary_rows_may_repeat_ids(self, summary_store):
        rows = [SummaryRow("U-1", "A", ""), SummaryRow("U-1", "B", "")]
        summary_store.replace_all(rows)
        assert summary_store.list_all() == rows

    def test_users(self, user_store):
        user = UserAccount("Siva", "Normal", "pbkdf2_sha256$1$00$00", "Finance")
        user_store.upsert(user)
        assert user_store.get_by_id("Siva") == user
        user_store.upsert(replace(user, role="Admin"))
        assert user_store.get_by_id("Siva").role == "Admin"
        assert user_store.delete("Siva") is True
        assert user_store.delete("Siva") is False
        assert user_store.list_all() == []


class TestJsonFileLayout:
    def test_one_document_with_named_collections(self, tmp_path, make_submission):
        path = tmp_path / "store.json"
        store = JsonFileRecordStore(path)
        store.upsert(make_submission(1))

        document = json.loads(path.read_text(encoding="utf-8"))
        assert list(document) == [FORMS]
        assert document[FORMS][0]["id"] == 1
        assert document[FORMS][0]["validator"] == {"status": "Pending"}

    def test_collections_share_the_file(self, tmp_path, make_submission):
        path = tmp_path / "store.json"
        JsonFileRecordStore(path).upsert(make_submission(1))
        JsonFileSummaryRowStore(path).replace_all([SummaryRow("U-1")])
        JsonFileUserStore(path).upsert(UserAccount("a", "Admin", "h"))

        document = json.loads(path.read_text(encoding="utf-8"))
        assert set(document) == {FORMS, SUMMARY, USERS}
        assert JsonFileRecordStore(path).get_by_id(1) == make_submission(1)

    def test_legacy_blank_status(self, tmp_path, make_submission):
        path = tmp_path / "store.json"
        JsonFileRecordStore(path).upsert(make_submission(1))
        document = json.loads(path.read_text(encoding="utf-8"))
        document[FORMS][0]["recommender"] = {"status": ""}
        path.write_text(json.dumps(document), encoding="utf-8")

        loaded = JsonFileRecordStore(path).get_by_id(1)
        assert loaded.recommender.status.value == "Pending"

    def test_no_temp_files_left(self, tmp_path, make_submission):
        store = JsonFileRecordStore(tmp_path / "store.json")
        for i in range(3):
            store.upsert(make_submission(i))
        assert [p.name for p in tmp_path.iterdir()] == ["store.json"]


class TestSqlConstraints:
    def test_one_resubmission_per_original(self, sqlite_session_factory, make_submission):
        store = SqlRecordStore(sqlite_session_factory)
        store.upsert(make_submission(1, final="Rejected"))
        store.upsert(make_submission(2, original_submission_id=1))

        with pytest.raises(IntegrityError):
            store.upsert(make_submission(3, original_submission_id=1))
        assert sorted(s.id for s in store.list_all()) == [1, 2]
