"""
Reviewer and applicant queues (``access_review_kernel.domain.queues``).

Read-only views over a list of submissions: what is waiting for review,
what was sent back by a stage reviewer, what has been decided, and what
an applicant may still correct.  Nothing here mutates a submission.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable

from access_review_kernel.domain.resubmission import find_resubmission
from access_review_kernel.domain.submission import (
    RejectedStage,
    ReviewStatus,
    Stage,
    Submission,
)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _created_key(s: Submission) -> tuple[datetime, int]:
    return (s.created_at or _EPOCH, s.id)


def pending_queue(submissions: Iterable[Submission]) -> list[Submission]:
    """Final Pending and not sent back by either stage, newest first."""
    return sorted(
        (s for s in submissions
         if s.final_status is ReviewStatus.PENDING and not s.has_stage_rejection),
        key=_created_key,
        reverse=True,
    )


def _latest_rejection(s: Submission) -> datetime:
    dates = [
        s.stage(stage).decided_at
        for stage in Stage
        if isinstance(s.stage(stage), RejectedStage)
    ]
    return max(dates, default=_EPOCH)


def _matches(s: Submission, term: str) -> bool:
    haystack = [s.username, str(s.id)]
    haystack.extend(str(v) for v in s.fields.values())
    for stage in Stage:
        state = s.stage(stage)
        if isinstance(state, RejectedStage):
            haystack.append(state.comment)
    return any(term in item.lower() for item in haystack)


def stage_rejected(
    submissions: Iterable[Submission],
    stage: Stage | None = None,
    search: str = "",
) -> list[Submission]:
    """Records sent back by a stage reviewer and still awaiting a final decision.

    ``stage`` narrows to one reviewer; ``search`` is a case-insensitive
    substring over applicant, payload values and rejection comments.
    Ordered by the latest rejection, newest first.
    """
    term = search.strip().lower()
    result = []
    for s in submissions:
        if s.final_status is not ReviewStatus.PENDING or not s.has_stage_rejection:
            continue
        if stage is not None and s.stage(stage).status is not ReviewStatus.REJECTED:
            continue
        if term and not _matches(s, term):
            continue
        result.append(s)
    return sorted(result, key=_latest_rejection, reverse=True)


def decided(submissions: Iterable[Submission], status: ReviewStatus) -> list[Submission]:
    """Records with the given terminal final status, newest decision first."""
    if status is ReviewStatus.APPROVED:
        key = lambda s: s.final_approved_at or _EPOCH  # noqa: E731
    elif status is ReviewStatus.REJECTED:
        key = lambda s: s.final_rejected_at or _EPOCH  # noqa: E731
    else:
        raise ValueError(f"Not a terminal status: {status}")
    return sorted(
        (s for s in submissions if s.final_status is status),
        key=key,
        reverse=True,
    )


def for_applicant(submissions: Iterable[Submission], username: str) -> list[Submission]:
    """The applicant's own records, newest first."""
    return sorted(
        (s for s in submissions if s.username == username),
        key=_created_key,
        reverse=True,
    )


def rejection_remarks(submission: Submission) -> str:
    """Validator comment, else Recommender comment, else empty."""
    for stage in Stage:
        state = submission.stage(stage)
        if isinstance(state, RejectedStage):
            return state.comment
    return ""


def can_resubmit(submission: Submission, existing: Iterable[Submission]) -> bool:
    """Whether the applicant may still correct this record."""
    if submission.final_status is ReviewStatus.REJECTED:
        return find_resubmission(submission.id, existing) is None
    return submission.final_status is ReviewStatus.PENDING and submission.has_stage_rejection


@dataclass(frozen=True)
class RejectionStats:
    """Counts of stage-level rejections."""

    by_validator: int
    by_recommender: int
    by_both: int


def rejection_stats(submissions: Iterable[Submission]) -> RejectionStats:
    v = r = both = 0
    for s in submissions:
        v_rej = s.validator.status is ReviewStatus.REJECTED
        r_rej = s.recommender.status is ReviewStatus.REJECTED
        v += v_rej
        r += r_rej
        both += v_rej and r_rej
    return RejectionStats(by_validator=v, by_recommender=r, by_both=both)
