"""
access_review_kernel.services.review_service -- Review lifecycle management.

Responsibility:
    Loads a submission from the record store, runs the pure state machine
    or resubmission policy against it, and writes the result back.  Owns
    id assignment and the clock; the domain functions own the rules.

Architecture position:
    Kernel > Services.  May import from domain/, stores/.  The store is
    injected; this module never opens a database or file itself.

Invariants enforced:
    - Operations on one submission id are serialized in-process (through a
      fixed pool of striped locks), and every write is a compare-and-set on
      ``version`` so a writer in another process cannot be silently
      overwritten.
    - ``version`` is 1 on creation and increases by one on every
      successful write.
    - A final-rejection resubmission writes the flagged original before the
      new linked record, so at most one linked record is ever stored.
    - Submission ids are strictly increasing millisecond timestamps.

Failure modes:
    - SubmissionNotFoundError if the id is not in the store.
    - Any ReviewError / ResubmissionError from the domain layer (logged at
      WARNING, re-raised unchanged).
    - OptimisticLockError if another process wrote the record between the
      read and the write.
"""

from __future__ import annotations

import threading
from dataclasses import replace
from typing import Any

from access_review_kernel.domain import queues
from access_review_kernel.domain.clock import Clock, SystemClock
from access_review_kernel.domain.resubmission import ResubmissionResult, resubmit
from access_review_kernel.domain.reviewers import ReviewerBindings, fields_for
from access_review_kernel.domain.submission import (
    ActorIdentity,
    ReviewField,
    ReviewStatus,
    Stage,
    Submission,
    new_submission,
)
from access_review_kernel.domain.transitions import apply_transition, can_finalize
from access_review_kernel.exceptions import (
    ResubmissionError,
    ReviewError,
    SubmissionNotFoundError,
)
from access_review_kernel.logging_config import LogContext, get_logger
from access_review_kernel.stores.base import MISSING_VERSION, RecordStore

logger = get_logger("services.review")

# Ids sharing a stripe also share a lock; no operation holds two at once.
LOCK_STRIPES = 64


class ReviewService:
    """Submission, review and resubmission over a record store."""

    def __init__(
        self,
        store: RecordStore,
        bindings: ReviewerBindings,
        clock: Clock | None = None,
    ) -> None:
        self._store = store
        self._bindings = bindings
        self._clock = clock or SystemClock()
        self._locks = tuple(threading.Lock() for _ in range(LOCK_STRIPES))
        self._id_lock = threading.Lock()
        self._last_id = max((s.id for s in store.list_all()), default=0)

    @property
    def bindings(self) -> ReviewerBindings:
        return self._bindings

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _lock_for(self, submission_id: int) -> threading.Lock:
        return self._locks[submission_id % LOCK_STRIPES]

    def _next_id(self) -> int:
        with self._id_lock:
            self._last_id = max(self._clock.now_millis(), self._last_id + 1)
            return self._last_id

    def _write(self, updated: Submission, current: Submission | None) -> Submission:
        if current is None:
            expected, version = MISSING_VERSION, 1
        else:
            expected, version = current.version, current.version + 1
        stored = replace(updated, version=version)
        self._store.upsert(stored, expected_version=expected)
        return stored

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def submit(self, actor: ActorIdentity, fields: dict[str, Any]) -> Submission:
        """Create a new submission for ``actor`` with every status Pending."""
        submission = new_submission(
            self._next_id(), actor.username, fields, self._clock.now(),
        )
        with LogContext.bind(actor=actor.username, submission_id=submission.id):
            stored = self._write(submission, None)
            logger.info("submission_created", extra={"username": actor.username})
        return stored

    def get(self, submission_id: int) -> Submission:
        """Load one submission.

        Raises:
            SubmissionNotFoundError: if no record has this id.
        """
        submission = self._store.get_by_id(submission_id)
        if submission is None:
            raise SubmissionNotFoundError(submission_id)
        return submission

    def transition(
        self,
        submission_id: int,
        field: ReviewField | str,
        new_value: Any,
        actor: ActorIdentity,
        comment: str | None = None,
    ) -> Submission:
        """Apply one reviewer action and persist the result."""
        with LogContext.bind(actor=actor.username, submission_id=submission_id):
            with self._lock_for(submission_id):
                current = self.get(submission_id)
                try:
                    updated = apply_transition(
                        current,
                        field,
                        new_value,
                        actor,
                        self._bindings,
                        self._clock.now(),
                        comment=comment,
                    )
                except ReviewError as exc:
                    logger.warning(
                        "transition_refused",
                        extra={
                            "field": str(getattr(field, "value", field)),
                            "target": str(getattr(new_value, "value", new_value)),
                            "role": actor.role,
                            "code": exc.code,
                        },
                    )
                    raise
                stored = self._write(updated, current)

            logger.info(
                "transition_applied",
                extra={
                    "field": str(getattr(field, "value", field)),
                    "target": str(getattr(new_value, "value", new_value)),
                    "role": actor.role,
                    "version": stored.version,
                },
            )
            return stored

    def attach_file(self, submission_id: int, file_name: str, actor: ActorIdentity) -> Submission:
        """Attach the signed approval file."""
        return self.transition(submission_id, ReviewField.APPROVED_FILE, file_name, actor)

    def remove_file(self, submission_id: int, actor: ActorIdentity) -> Submission:
        """Remove the signed approval file."""
        return self.transition(submission_id, ReviewField.APPROVED_FILE, None, actor)

    def resubmit(
        self,
        submission_id: int,
        fields: dict[str, Any],
        actor: ActorIdentity,
    ) -> ResubmissionResult:
        """Correct a rejected submission.

        A stage-level rejection is reset in place; a final rejection
        produces a new linked submission and flags the original.
        """
        with LogContext.bind(actor=actor.username, submission_id=submission_id):
            with self._lock_for(submission_id):
                current = self.get(submission_id)
                try:
                    result = resubmit(
                        current,
                        fields,
                        actor,
                        self._store.list_all(),
                        self._clock.now(),
                        self._next_id(),
                    )
                except (ReviewError, ResubmissionError) as exc:
                    logger.warning("resubmission_refused", extra={"code": exc.code})
                    raise

                # The flagged original is the compare-and-set point: a writer
                # that loses it never stores a second linked record.
                original = self._write(result.original, current)
                created = None
                if result.created is not None:
                    created = self._write(result.created, None)

            if created is not None:
                logger.info(
                    "resubmission_created",
                    extra={"resubmission_id": created.id},
                )
            else:
                logger.info("resubmission_reset", extra={"version": original.version})
            return ResubmissionResult(original=original, created=created)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_all(self) -> list[Submission]:
        return self._store.list_all()

    def pending_queue(self) -> list[Submission]:
        return queues.pending_queue(self._store.list_all())

    def stage_rejected(self, stage: Stage | None = None, search: str = "") -> list[Submission]:
        return queues.stage_rejected(self._store.list_all(), stage=stage, search=search)

    def decided(self, status: ReviewStatus) -> list[Submission]:
        return queues.decided(self._store.list_all(), status)

    def for_applicant(self, username: str) -> list[Submission]:
        return queues.for_applicant(self._store.list_all(), username)

    def rejection_stats(self) -> queues.RejectionStats:
        return queues.rejection_stats(self._store.list_all())

    def can_resubmit(self, submission_id: int) -> bool:
        return queues.can_resubmit(self.get(submission_id), self._store.list_all())

    def can_finalize(self, submission_id: int) -> bool:
        return can_finalize(self.get(submission_id))

    def fields_for(self, actor: ActorIdentity) -> tuple[ReviewField, ...]:
        """Fields ``actor`` may write; drives which controls a UI shows."""
        return fields_for(self._bindings, actor)
