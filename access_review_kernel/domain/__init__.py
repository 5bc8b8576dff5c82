"""
Pure domain layer.

This module contains the review workflow value objects and pure
functions, with NO dependencies on:
- ORM (SQLAlchemy)
- Database or files
- Time/clock (the current time is always passed in)

All domain objects are immutable and deterministic.
"""

from access_review_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from access_review_kernel.domain.resubmission import (
    ResubmissionResult,
    find_resubmission,
    resubmit,
)
from access_review_kernel.domain.reviewers import ReviewerBindings, can_act_on, fields_for
from access_review_kernel.domain.submission import (
    PENDING,
    ActorIdentity,
    ApprovedStage,
    PendingStage,
    RejectedStage,
    ReviewField,
    ReviewStatus,
    Stage,
    StageState,
    Submission,
    new_submission,
)
from access_review_kernel.domain.summary import SummaryFieldMap, SummaryRow
from access_review_kernel.domain.transitions import (
    apply_transition,
    can_finalize,
    final_approval_gaps,
)

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "ResubmissionResult",
    "find_resubmission",
    "resubmit",
    "ReviewerBindings",
    "can_act_on",
    "fields_for",
    "PENDING",
    "ActorIdentity",
    "ApprovedStage",
    "PendingStage",
    "RejectedStage",
    "ReviewField",
    "ReviewStatus",
    "Stage",
    "StageState",
    "Submission",
    "new_submission",
    "SummaryFieldMap",
    "SummaryRow",
    "apply_transition",
    "can_finalize",
    "final_approval_gaps",
]
