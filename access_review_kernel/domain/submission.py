"""
Submission domain types (``access_review_kernel.domain.submission``).

Responsibility
--------------
Pure value objects for an access request and its review state: the two
reviewer stages (Validator, Recommender), the terminal final status, the
signed-artifact reference and the resubmission links.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.  No imports
from ``db/``, ``models/``, ``stores/``, ``services/`` or outer layers.

Invariants enforced
-------------------
* Stage state is a tagged variant: a stage is exactly one of
  ``PendingStage``, ``ApprovedStage`` or ``RejectedStage``.  Approved and
  rejected stages always carry approver and date; a ``RejectedStage``
  cannot be built without a non-blank comment.
* ``Submission`` is frozen.  Every change produces a new value via
  ``dataclasses.replace``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Union

from access_review_kernel.exceptions import MissingRejectionReasonError


# =========================================================================
# Status and field enums
# =========================================================================


class ReviewStatus(str, Enum):
    """Status values shared by both stages and the final decision."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


TERMINAL_FINAL_STATUSES: frozenset[ReviewStatus] = frozenset({
    ReviewStatus.APPROVED,
    ReviewStatus.REJECTED,
})


class Stage(str, Enum):
    """The two intermediate reviewer checkpoints."""

    VALIDATOR = "validator"
    RECOMMENDER = "recommender"


class ReviewField(str, Enum):
    """Fields a reviewer can target with a transition."""

    VALIDATOR_STATUS = "validator_status"
    RECOMMENDER_STATUS = "recommender_status"
    FINAL_STATUS = "final_status"
    APPROVED_FILE = "approved_file"


STAGE_FIELDS: dict[ReviewField, Stage] = {
    ReviewField.VALIDATOR_STATUS: Stage.VALIDATOR,
    ReviewField.RECOMMENDER_STATUS: Stage.RECOMMENDER,
}


# =========================================================================
# Stage state variant
# =========================================================================


@dataclass(frozen=True)
class PendingStage:
    """Stage not yet decided."""

    @property
    def status(self) -> ReviewStatus:
        return ReviewStatus.PENDING


@dataclass(frozen=True)
class ApprovedStage:
    """Stage approved by ``approver`` at ``decided_at``."""

    approver: str
    decided_at: datetime

    @property
    def status(self) -> ReviewStatus:
        return ReviewStatus.APPROVED


@dataclass(frozen=True)
class RejectedStage:
    """Stage rejected by ``approver`` at ``decided_at`` for ``comment``."""

    approver: str
    decided_at: datetime
    comment: str

    def __post_init__(self) -> None:
        if not self.comment or not self.comment.strip():
            raise MissingRejectionReasonError(field="stage")

    @property
    def status(self) -> ReviewStatus:
        return ReviewStatus.REJECTED


StageState = Union[PendingStage, ApprovedStage, RejectedStage]

PENDING = PendingStage()


# =========================================================================
# Actor
# =========================================================================


@dataclass(frozen=True)
class ActorIdentity:
    """Who is acting: the username and the role string from login."""

    username: str
    role: str


# =========================================================================
# Submission
# =========================================================================


@dataclass(frozen=True)
class Submission:
    """Immutable snapshot of one access request and its review state.

    ``fields`` is the applicant's free-form payload (names, entity
    selections, justification).  The state machine never reads it.
    ``version`` is bumped by the service on every write and used for
    compare-and-set in the stores.
    """

    id: int
    username: str
    fields: dict[str, Any] = field(default_factory=dict)
    validator: StageState = PENDING
    recommender: StageState = PENDING
    final_status: ReviewStatus = ReviewStatus.PENDING
    final_decided_by: str | None = None
    final_approved_at: datetime | None = None
    final_rejected_at: datetime | None = None
    approved_file: str | None = None
    approved_file_uploaded_at: datetime | None = None
    original_submission_id: int | None = None
    resubmitted: bool = False
    resubmitted_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    version: int = 0

    def stage(self, stage: Stage) -> StageState:
        """Return the state of one reviewer stage."""
        if stage is Stage.VALIDATOR:
            return self.validator
        return self.recommender

    def with_stage(self, stage: Stage, state: StageState) -> Submission:
        """Return a copy with one stage replaced."""
        if stage is Stage.VALIDATOR:
            return replace(self, validator=state)
        return replace(self, recommender=state)

    @property
    def is_final(self) -> bool:
        return self.final_status in TERMINAL_FINAL_STATUSES

    @property
    def has_stage_rejection(self) -> bool:
        return any(
            self.stage(s).status is ReviewStatus.REJECTED for s in Stage
        )

    @property
    def both_stages_approved(self) -> bool:
        return all(
            self.stage(s).status is ReviewStatus.APPROVED for s in Stage
        )


def new_submission(
    submission_id: int,
    username: str,
    fields: dict[str, Any],
    now: datetime,
    original_submission_id: int | None = None,
) -> Submission:
    """Build a freshly created submission with every status Pending."""
    return Submission(
        id=submission_id,
        username=username,
        fields=dict(fields),
        original_submission_id=original_submission_id,
        created_at=now,
        updated_at=now,
    )
