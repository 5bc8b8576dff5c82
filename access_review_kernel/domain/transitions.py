"""
Approval state machine (``access_review_kernel.domain.transitions``).

Responsibility
--------------
Validates and applies one transition to a ``Submission``: a stage
decision, the final decision, or attaching/removing the signed artifact.
Returns the updated value with approver and dates stamped, or raises.

Architecture position
---------------------
**Kernel domain layer** -- pure function.  ZERO I/O.  The caller loads
the record, passes the current time in, and persists the result.

Invariants enforced
-------------------
* Stage lifecycle -- ``STAGE_TRANSITIONS`` defines the only legal stage
  moves: ``Pending -> Approved`` and ``Pending -> Rejected``.
* Final lifecycle -- ``FINAL_TRANSITIONS``; once the final status is
  terminal no field of the record may change.
* Final approval requires both stages ``Approved`` and an attached file.
* A stage rejection requires a non-blank comment.

Check order
-----------
authorization -> value validity -> rejection reason -> final-approval
preconditions -> state legality.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Any

from access_review_kernel.domain.reviewers import ReviewerBindings, can_act_on
from access_review_kernel.domain.submission import (
    STAGE_FIELDS,
    ActorIdentity,
    ApprovedStage,
    RejectedStage,
    ReviewField,
    ReviewStatus,
    Stage,
    Submission,
)
from access_review_kernel.exceptions import (
    InvalidTransitionError,
    MissingRejectionReasonError,
    PreconditionNotMetError,
    UnauthorizedActorError,
)


STAGE_TRANSITIONS: dict[ReviewStatus, frozenset[ReviewStatus]] = {
    ReviewStatus.PENDING: frozenset({
        ReviewStatus.APPROVED,
        ReviewStatus.REJECTED,
    }),
    ReviewStatus.APPROVED: frozenset(),
    ReviewStatus.REJECTED: frozenset(),
}

FINAL_TRANSITIONS: dict[ReviewStatus, frozenset[ReviewStatus]] = {
    ReviewStatus.PENDING: frozenset({
        ReviewStatus.APPROVED,
        ReviewStatus.REJECTED,
    }),
    ReviewStatus.APPROVED: frozenset(),
    ReviewStatus.REJECTED: frozenset(),
}


def final_approval_gaps(submission: Submission) -> list[str]:
    """List the unmet final-approval preconditions (empty when all hold)."""
    gaps = []
    for stage in Stage:
        if submission.stage(stage).status is not ReviewStatus.APPROVED:
            gaps.append(f"{stage.value} stage is not approved")
    if submission.approved_file is None:
        gaps.append("approved file is not attached")
    return gaps


def can_finalize(submission: Submission) -> bool:
    """True when a final approval would pass its preconditions."""
    return not final_approval_gaps(submission)


def _coerce_status(submission: Submission, field: ReviewField, value: Any) -> ReviewStatus:
    try:
        return ReviewStatus(value)
    except ValueError:
        raise InvalidTransitionError(
            submission.id, field.value, _current(submission, field), str(value),
        ) from None


def _current(submission: Submission, field: ReviewField) -> str:
    if field in STAGE_FIELDS:
        return submission.stage(STAGE_FIELDS[field]).status.value
    if field is ReviewField.FINAL_STATUS:
        return submission.final_status.value
    return str(submission.approved_file)


def apply_transition(
    submission: Submission,
    field: ReviewField | str,
    new_value: Any,
    actor: ActorIdentity,
    bindings: ReviewerBindings,
    now: datetime,
    comment: str | None = None,
) -> Submission:
    """Apply one transition and return the updated submission.

    Args:
        submission: Current record.
        field: Target ``ReviewField`` (or its string value).
        new_value: ``ReviewStatus`` (or its string) for status fields; a
            file name, or ``None`` to remove, for ``approved_file``.
        actor: Acting identity.
        bindings: Field-to-identity bindings.
        now: Timestamp to stamp on the record.
        comment: Rejection reason; required for stage rejections.

    Raises:
        UnauthorizedActorError: actor not bound to ``field``.
        MissingRejectionReasonError: stage rejection with blank comment.
        PreconditionNotMetError: final approval before both stages are
            approved and a file is attached.
        InvalidTransitionError: any other undefined combination.
    """
    try:
        field = ReviewField(field)
    except ValueError:
        raise InvalidTransitionError(
            submission.id, str(field), "-", str(new_value),
        ) from None

    if not can_act_on(bindings, actor, field):
        raise UnauthorizedActorError(actor.username, actor.role, field.value)

    if field is ReviewField.APPROVED_FILE:
        return _apply_file(submission, new_value, now)

    target = _coerce_status(submission, field, new_value)

    if field in STAGE_FIELDS:
        return _apply_stage(
            submission, field, STAGE_FIELDS[field], target, actor, now, comment,
        )
    return _apply_final(submission, target, actor, now)


def _apply_stage(
    submission: Submission,
    field: ReviewField,
    stage: Stage,
    target: ReviewStatus,
    actor: ActorIdentity,
    now: datetime,
    comment: str | None,
) -> Submission:
    if target is ReviewStatus.REJECTED and not (comment or "").strip():
        raise MissingRejectionReasonError(field.value)

    current = submission.stage(stage).status
    if submission.is_final or target not in STAGE_TRANSITIONS[current]:
        raise InvalidTransitionError(
            submission.id, field.value, current.value, target.value,
        )

    if target is ReviewStatus.APPROVED:
        state = ApprovedStage(approver=actor.username, decided_at=now)
    else:
        state = RejectedStage(
            approver=actor.username, decided_at=now, comment=comment.strip(),
        )
    return replace(submission.with_stage(stage, state), updated_at=now)


def _apply_final(
    submission: Submission,
    target: ReviewStatus,
    actor: ActorIdentity,
    now: datetime,
) -> Submission:
    if target is ReviewStatus.APPROVED:
        gaps = final_approval_gaps(submission)
        if gaps:
            raise PreconditionNotMetError(submission.id, gaps)

    current = submission.final_status
    if target not in FINAL_TRANSITIONS[current]:
        raise InvalidTransitionError(
            submission.id, ReviewField.FINAL_STATUS.value,
            current.value, target.value,
        )

    if target is ReviewStatus.APPROVED:
        return replace(
            submission,
            final_status=target,
            final_decided_by=actor.username,
            final_approved_at=now,
            updated_at=now,
        )
    # Rejection overrides stage state: legal from Pending regardless of stages.
    return replace(
        submission,
        final_status=target,
        final_decided_by=actor.username,
        final_rejected_at=now,
        updated_at=now,
    )


def _apply_file(submission: Submission, file_name: Any, now: datetime) -> Submission:
    if file_name is not None and (not isinstance(file_name, str) or not file_name.strip()):
        raise InvalidTransitionError(
            submission.id, ReviewField.APPROVED_FILE.value,
            str(submission.approved_file), repr(file_name),
        )
    if submission.is_final:
        raise InvalidTransitionError(
            submission.id, ReviewField.APPROVED_FILE.value,
            str(submission.approved_file), str(file_name),
        )

    if file_name is None:
        return replace(
            submission,
            approved_file=None,
            approved_file_uploaded_at=None,
            updated_at=now,
        )
    return replace(
        submission,
        approved_file=file_name.strip(),
        approved_file_uploaded_at=now,
        updated_at=now,
    )
