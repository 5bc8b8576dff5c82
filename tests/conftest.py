"""
Pytest fixtures for the access review test suite.

Provides:
- Structured logging setup and a captured_logs fixture
- A deterministic clock
- Reviewer bindings and actor identities matching the default deployment
- Record/summary/user stores for every backend (memory, JSON file, SQLite)
- Submission builders for common review states
"""

import json
import logging
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from io import StringIO

import pytest

from access_review_kernel.db.engine import (
    create_tables,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
)
from access_review_kernel.domain.clock import DeterministicClock
from access_review_kernel.domain.reviewers import ReviewerBindings
from access_review_kernel.domain.submission import (
    ActorIdentity,
    ApprovedStage,
    RejectedStage,
    ReviewStatus,
    new_submission,
)
from access_review_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
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

T0 = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

SAMPLE_FIELDS = {
    "firstName": "Asha",
    "lastName": "Kumar",
    "department": "Finance",
    "designation": "Analyst",
    "employeeCode": "E1001",
    "emailAddress": "asha@example.com",
    "officeLocation": "Chennai",
    "reportedTo": "HOD",
    "factUserId": "U-1001",
    "entityName": ["Acme Ltd", "Beta Corp"],
    "noOfDaysBackdated": "3",
    "year": "2024",
    "securityDept": ["Finance"],
    "securityCat": ["Read"],
    "securityGroupOther": "FIN-READ",
    "moduleName": "GL",
    "featuresName": "Journal",
    "reason": "Month-end close",
}


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture access_review_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, review_service):
            review_service.transition(...)
            logs = captured_logs()
            assert any(r["message"] == "transition_applied" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("access_review_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Clock, bindings, actors
# =============================================================================


@pytest.fixture
def deterministic_clock():
    return DeterministicClock(T0)


@pytest.fixture
def bindings():
    return ReviewerBindings(
        validator_usernames=frozenset({"Siva", "HOD"}),
        recommender_usernames=frozenset({"Gunaseelan"}),
        approver_roles=frozenset({"Admin", "SuperAdmin"}),
        account_admin_roles=frozenset({"SuperAdmin"}),
    )


@pytest.fixture
def applicant():
    return ActorIdentity(username="asha", role="Normal")


@pytest.fixture
def validator():
    return ActorIdentity(username="Siva", role="Normal")


@pytest.fixture
def recommender():
    return ActorIdentity(username="Gunaseelan", role="Normal")


@pytest.fixture
def approver():
    return ActorIdentity(username="admin", role="Admin")


@pytest.fixture
def superadmin():
    return ActorIdentity(username="superadmin", role="SuperAdmin")


@pytest.fixture
def outsider():
    return ActorIdentity(username="mallory", role="Normal")


# =============================================================================
# Submission builders
# =============================================================================


@pytest.fixture
def make_submission():
    """Build submissions in a chosen review state.

    Usage::

        s = make_submission(validator="Approved", recommender="Rejected")
    """

    def _make(
        submission_id: int = 1,
        username: str = "asha",
        validator: str = "Pending",
        recommender: str = "Pending",
        final: str = "Pending",
        approved_file: str | None = None,
        fields: dict | None = None,
        created_at: datetime = T0,
        **overrides,
    ):
        s = new_submission(
            submission_id, username, dict(fields or SAMPLE_FIELDS), created_at,
        )
        decided = created_at + timedelta(minutes=5)
        stages = {}
        for name, status, approver in (
            ("validator", validator, "Siva"),
            ("recommender", recommender, "Gunaseelan"),
        ):
            if status == "Approved":
                stages[name] = ApprovedStage(approver=approver, decided_at=decided)
            elif status == "Rejected":
                stages[name] = RejectedStage(
                    approver=approver, decided_at=decided, comment=f"{name} says no",
                )
        s = replace(
            s,
            final_status=ReviewStatus(final),
            approved_file=approved_file,
            **stages,
        )
        return replace(s, **overrides) if overrides else s

    return _make


# =============================================================================
# Stores
# =============================================================================


@pytest.fixture
def sqlite_session_factory():
    """Fresh in-memory SQLite database with all tables."""
    init_engine_from_url("sqlite://")
    create_tables()
    yield get_session_factory()
    reset_engine()


@pytest.fixture(params=["memory", "json", "sql"])
def store_backend(request):
    """Name of the backend under test; parametrizes dependent fixtures."""
    return request.param


@pytest.fixture
def record_store(store_backend, tmp_path, request):
    if store_backend == "memory":
        return InMemoryRecordStore()
    if store_backend == "json":
        return JsonFileRecordStore(tmp_path / "store.json")
    factory = request.getfixturevalue("sqlite_session_factory")
    return SqlRecordStore(factory)


@pytest.fixture
def summary_store(store_backend, tmp_path, request):
    if store_backend == "memory":
        return InMemorySummaryRowStore()
    if store_backend == "json":
        return JsonFileSummaryRowStore(tmp_path / "store.json")
    factory = request.getfixturevalue("sqlite_session_factory")
    return SqlSummaryRowStore(factory)


@pytest.fixture
def user_store(store_backend, tmp_path, request):
    if store_backend == "memory":
        return InMemoryUserStore()
    if store_backend == "json":
        return JsonFileUserStore(tmp_path / "store.json")
    factory = request.getfixturevalue("sqlite_session_factory")
    return SqlUserStore(factory)
