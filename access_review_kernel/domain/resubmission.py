"""
Resubmission policy (``access_review_kernel.domain.resubmission``).

Responsibility
--------------
Decides what an applicant's corrective resubmission produces:

* stage-level rejection (final still Pending) -> the same record is reset
  in place: both stages back to Pending, payload replaced, flagged
  ``resubmitted``;
* final rejection -> a brand-new record linked through
  ``original_submission_id``; the rejected record is flagged
  ``resubmitted``.  Only one such link may exist per rejected record.

Architecture position
---------------------
**Kernel domain layer** -- pure function.  The caller supplies the
existing records (for the link-uniqueness check), the time and the id
of the record to create.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Iterable

from access_review_kernel.domain.submission import (
    PENDING,
    ActorIdentity,
    ReviewStatus,
    Submission,
    new_submission,
)
from access_review_kernel.exceptions import (
    AlreadyResubmittedError,
    NothingToResubmitError,
    UnauthorizedActorError,
)


@dataclass(frozen=True)
class ResubmissionResult:
    """Outcome of a resubmission.

    ``original`` is the rejected record after flagging (or resetting);
    ``created`` is the new linked record for a final rejection, else None.
    """

    original: Submission
    created: Submission | None = None

    @property
    def in_place(self) -> bool:
        return self.created is None


def find_resubmission(
    submission_id: int,
    existing: Iterable[Submission],
) -> Submission | None:
    """Return the record that links back to ``submission_id``, if any."""
    for candidate in existing:
        if candidate.original_submission_id == submission_id:
            return candidate
    return None


def resubmit(
    submission: Submission,
    fields: dict[str, Any],
    actor: ActorIdentity,
    existing: Iterable[Submission],
    now: datetime,
    new_id: int,
) -> ResubmissionResult:
    """Apply the resubmission policy to a rejected submission.

    Raises:
        UnauthorizedActorError: actor is not the applicant.
        AlreadyResubmittedError: final rejection already has a linked record.
        NothingToResubmitError: no rejection on the record.
    """
    if actor.username != submission.username:
        raise UnauthorizedActorError(actor.username, actor.role, "resubmission")

    if submission.final_status is ReviewStatus.REJECTED:
        linked = find_resubmission(submission.id, existing)
        if linked is not None:
            raise AlreadyResubmittedError(submission.id, linked.id)
        created = new_submission(
            new_id,
            submission.username,
            fields,
            now,
            original_submission_id=submission.id,
        )
        flagged = replace(
            submission, resubmitted=True, resubmitted_at=now, updated_at=now,
        )
        return ResubmissionResult(original=flagged, created=created)

    if submission.final_status is ReviewStatus.PENDING and submission.has_stage_rejection:
        reset = replace(
            submission,
            fields=dict(fields),
            validator=PENDING,
            recommender=PENDING,
            final_status=ReviewStatus.PENDING,
            final_decided_by=None,
            resubmitted=True,
            resubmitted_at=now,
            updated_at=now,
        )
        return ResubmissionResult(original=reset)

    raise NothingToResubmitError(submission.id, submission.final_status.value)
