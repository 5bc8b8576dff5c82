"""
Race tests for concurrent reviewers acting on one submission.

Two reviewers may open the same record and decide it at the same moment.
Expected behavior:
- Exactly one stage decision is recorded; every other attempt fails with
  InvalidTransitionError (same process) or OptimisticLockError (a writer
  in another process got there first).
- The stored version equals the number of successful writes.
- A final rejection resubmitted through two services at once links
  exactly one new record to the original.
"""

from concurrent.futures import ThreadPoolExecutor
from threading import Barrier

import pytest

from access_review_kernel.domain.submission import ActorIdentity, ReviewField, ReviewStatus
from access_review_kernel.exceptions import (
    InvalidTransitionError,
    OptimisticLockError,
    ResubmissionError,
)
from access_review_kernel.services.review_service import ReviewService
from access_review_kernel.stores.json_file import JsonFileRecordStore
from access_review_kernel.stores.memory import InMemoryRecordStore

pytestmark = pytest.mark.slow

WORKERS = 8
FIELDS = {"factUserId": "U-1001", "entityName": ["Acme Ltd"]}


def _race(calls):
    """Run every call at once; return (successes, failures)."""
    barrier = Barrier(len(calls))

    def run(call):
        barrier.wait()
        try:
            return call(), None
        except (InvalidTransitionError, OptimisticLockError) as exc:
            return None, exc

    with ThreadPoolExecutor(max_workers=len(calls)) as pool:
        outcomes = list(pool.map(run, calls))
    successes = [r for r, e in outcomes if e is None]
    failures = [e for r, e in outcomes if e is not None]
    return successes, failures


class TestSingleServiceRaces:
    def test_one_stage_decision_wins(self, bindings, deterministic_clock, applicant):
        service = ReviewService(InMemoryRecordStore(), bindings, clock=deterministic_clock)
        s = service.submit(applicant, FIELDS)
        validators = [ActorIdentity("Siva", "Normal"), ActorIdentity("HOD", "Normal")]

        calls = []
        for i in range(WORKERS):
            actor = validators[i % 2]
            if i % 2:
                calls.append(lambda a=actor: service.transition(
                    s.id, ReviewField.VALIDATOR_STATUS, ReviewStatus.REJECTED, a,
                    comment="duplicate request",
                ))
            else:
                calls.append(lambda a=actor: service.transition(
                    s.id, ReviewField.VALIDATOR_STATUS, ReviewStatus.APPROVED, a,
                ))

        successes, failures = _race(calls)

        assert len(successes) == 1
        assert len(failures) == WORKERS - 1
        assert all(isinstance(e, InvalidTransitionError) for e in failures)
        stored = service.get(s.id)
        assert stored == successes[0]
        assert stored.version == 2

    def test_concurrent_submits_get_distinct_ids(self, bindings, deterministic_clock, applicant):
        service = ReviewService(InMemoryRecordStore(), bindings, clock=deterministic_clock)
        successes, failures = _race([lambda: service.submit(applicant, FIELDS)] * WORKERS)
        assert not failures
        assert len({s.id for s in successes}) == WORKERS
        assert len(service.list_all()) == WORKERS

    def test_single_resubmission_under_race(self, bindings, deterministic_clock, applicant, approver):
        service = ReviewService(InMemoryRecordStore(), bindings, clock=deterministic_clock)
        s = service.submit(applicant, FIELDS)
        service.transition(s.id, ReviewField.FINAL_STATUS, ReviewStatus.REJECTED, approver)

        outcomes = []

        def attempt():
            try:
                outcomes.append(service.resubmit(s.id, FIELDS, applicant))
            except Exception as exc:
                outcomes.append(exc)

        with ThreadPoolExecutor(max_workers=WORKERS) as pool:
            for _ in range(WORKERS):
                pool.submit(attempt)

        created = [o for o in outcomes if not isinstance(o, Exception)]
        assert len(created) == 1
        linked = [r for r in service.list_all() if r.original_submission_id == s.id]
        assert len(linked) == 1


class _ReadTogetherStore:
    """Wraps a store so every reader of one record waits for the others."""

    def __init__(self, inner, barrier):
        self._inner = inner
        self._barrier = barrier

    def list_all(self):
        return self._inner.list_all()

    def get_by_id(self, submission_id):
        record = self._inner.get_by_id(submission_id)
        self._barrier.wait(timeout=10)
        return record

    def upsert(self, submission, expected_version=None):
        self._inner.upsert(submission, expected_version=expected_version)

    def replace_all(self, submissions):
        self._inner.replace_all(submissions)


class TestCrossServiceRaces:
    @pytest.mark.parametrize("backend", ["memory", "json"])
    def test_resubmission_links_one_record_across_services(
        self, tmp_path, backend, bindings, deterministic_clock, applicant, approver,
    ):
        if backend == "json":
            shared = JsonFileRecordStore(tmp_path / "store.json")
        else:
            shared = InMemoryRecordStore()
        seed = ReviewService(shared, bindings, clock=deterministic_clock)
        s = seed.submit(applicant, FIELDS)
        seed.transition(s.id, ReviewField.FINAL_STATUS, ReviewStatus.REJECTED, approver)

        barrier = Barrier(2)
        services = [
            ReviewService(_ReadTogetherStore(shared, barrier), bindings, clock=deterministic_clock)
            for _ in range(2)
        ]

        def attempt(svc):
            try:
                return svc.resubmit(s.id, FIELDS, applicant)
            except (OptimisticLockError, ResubmissionError) as exc:
                return exc

        with ThreadPoolExecutor(max_workers=2) as pool:
            outcomes = list(pool.map(attempt, services))

        created = [o for o in outcomes if not isinstance(o, Exception)]
        assert len(created) == 1
        linked = [r for r in shared.list_all() if r.original_submission_id == s.id]
        assert [r.id for r in linked] == [created[0].created.id]
        original = shared.get_by_id(s.id)
        assert original.resubmitted is True
        assert original.version == 3

    def test_shared_file_store_keeps_one_decision(
        self, tmp_path, bindings, deterministic_clock, applicant,
    ):
        """Separate service instances stand in for separate processes."""
        path = tmp_path / "store.json"
        seed = ReviewService(JsonFileRecordStore(path), bindings, clock=deterministic_clock)
        s = seed.submit(applicant, FIELDS)

        services = [
            ReviewService(JsonFileRecordStore(path), bindings, clock=deterministic_clock)
            for _ in range(WORKERS)
        ]
        actor = ActorIdentity("Siva", "Normal")
        calls = [
            lambda svc=svc: svc.transition(
                s.id, ReviewField.VALIDATOR_STATUS, ReviewStatus.APPROVED, actor,
            )
            for svc in services
        ]

        successes, failures = _race(calls)

        assert len(successes) == 1
        assert len(failures) == WORKERS - 1
        assert seed.get(s.id).version == 2
