"""
Module: access_review_kernel.models.submission
Responsibility: ORM persistence for access request submissions and their
    review state.
Architecture position: Kernel > Models.  May import from db/base.py only
    (domain types are imported lazily inside the DTO converters).
    MUST NOT import from stores/, services/ or outer layers.

Invariants enforced:
    - Each stage is flattened into status/approver/date/comment columns;
      a Pending stage stores NULL for approver, date and comment.
    - original_submission_id is UNIQUE: at most one resubmission links to
      any original (uq_submission_original).
    - version is the compare-and-set token used by the SQL store.

Failure modes:
    - IntegrityError on a second record linking to the same original.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, Boolean, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from access_review_kernel.db.base import Base

if TYPE_CHECKING:
    from access_review_kernel.domain.submission import StageState, Submission


class SubmissionModel(Base):
    """
    One row per submission.

    Contract:
        to_dto()/from_dto() convert losslessly between this row and the
        frozen ``Submission`` value.  apply_dto() overwrites an existing
        row in place for updates.
    """

    __tablename__ = "access_review_submissions"

    __table_args__ = (
        UniqueConstraint("original_submission_id", name="uq_submission_original"),
        Index("idx_submission_username", "username"),
        Index("idx_submission_final_status", "final_status"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)

    username: Mapped[str] = mapped_column(String(150), nullable=False)

    # Applicant payload; never read by the workflow
    fields: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    validator_status: Mapped[str] = mapped_column(String(20), nullable=False)
    validator_approver: Mapped[str | None] = mapped_column(String(150), nullable=True)
    validator_date: Mapped[datetime | None] = mapped_column(nullable=True)
    validator_comment: Mapped[str | None] = mapped_column(Text, nullable=True)

    recommender_status: Mapped[str] = mapped_column(String(20), nullable=False)
    recommender_approver: Mapped[str | None] = mapped_column(String(150), nullable=True)
    recommender_date: Mapped[datetime | None] = mapped_column(nullable=True)
    recommender_comment: Mapped[str | None] = mapped_column(Text, nullable=True)

    final_status: Mapped[str] = mapped_column(String(20), nullable=False)
    final_decided_by: Mapped[str | None] = mapped_column(String(150), nullable=True)
    final_approved_at: Mapped[datetime | None] = mapped_column(nullable=True)
    final_rejected_at: Mapped[datetime | None] = mapped_column(nullable=True)

    approved_file: Mapped[str | None] = mapped_column(String(500), nullable=True)
    approved_file_uploaded_at: Mapped[datetime | None] = mapped_column(nullable=True)

    original_submission_id: Mapped[int | None] = mapped_column(nullable=True)
    resubmitted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    resubmitted_at: Mapped[datetime | None] = mapped_column(nullable=True)

    created_at: Mapped[datetime | None] = mapped_column(nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(nullable=True)

    version: Mapped[int] = mapped_column(nullable=False, default=0)

    def __repr__(self) -> str:
        return (
            f"<SubmissionModel {self.id} {self.username} "
            f"{self.validator_status}/{self.recommender_status}/{self.final_status}>"
        )

    def to_dto(self) -> Submission:
        """Convert ORM model to frozen domain DTO."""
        from access_review_kernel.domain.submission import ReviewStatus, Submission

        return Submission(
            id=self.id,
            username=self.username,
            fields=dict(self.fields or {}),
            validator=_stage_from_columns(
                self.validator_status,
                self.validator_approver,
                self.validator_date,
                self.validator_comment,
            ),
            recommender=_stage_from_columns(
                self.recommender_status,
                self.recommender_approver,
                self.recommender_date,
                self.recommender_comment,
            ),
            final_status=ReviewStatus(self.final_status),
            final_decided_by=self.final_decided_by,
            final_approved_at=self.final_approved_at,
            final_rejected_at=self.final_rejected_at,
            approved_file=self.approved_file,
            approved_file_uploaded_at=self.approved_file_uploaded_at,
            original_submission_id=self.original_submission_id,
            resubmitted=self.resubmitted,
            resubmitted_at=self.resubmitted_at,
            created_at=self.created_at,
            updated_at=self.updated_at,
            version=self.version,
        )

    @classmethod
    def from_dto(cls, dto: Submission) -> SubmissionModel:
        """Create ORM model from domain DTO."""
        model = cls(id=dto.id)
        model.apply_dto(dto)
        return model

    def apply_dto(self, dto: Submission) -> None:
        """Overwrite every mutable column from ``dto``."""
        self.username = dto.username
        self.fields = dict(dto.fields)
        (
            self.validator_status,
            self.validator_approver,
            self.validator_date,
            self.validator_comment,
        ) = _stage_to_columns(dto.validator)
        (
            self.recommender_status,
            self.recommender_approver,
            self.recommender_date,
            self.recommender_comment,
        ) = _stage_to_columns(dto.recommender)
        self.final_status = dto.final_status.value
        self.final_decided_by = dto.final_decided_by
        self.final_approved_at = dto.final_approved_at
        self.final_rejected_at = dto.final_rejected_at
        self.approved_file = dto.approved_file
        self.approved_file_uploaded_at = dto.approved_file_uploaded_at
        self.original_submission_id = dto.original_submission_id
        self.resubmitted = dto.resubmitted
        self.resubmitted_at = dto.resubmitted_at
        self.created_at = dto.created_at
        self.updated_at = dto.updated_at
        self.version = dto.version


def _stage_to_columns(
    state: StageState,
) -> tuple[str, str | None, datetime | None, str | None]:
    from access_review_kernel.domain.submission import ApprovedStage, RejectedStage

    if isinstance(state, RejectedStage):
        return state.status.value, state.approver, state.decided_at, state.comment
    if isinstance(state, ApprovedStage):
        return state.status.value, state.approver, state.decided_at, None
    return state.status.value, None, None, None


def _stage_from_columns(
    status: str,
    approver: str | None,
    decided_at: datetime | None,
    comment: str | None,
) -> StageState:
    from access_review_kernel.domain.submission import (
        PENDING,
        ApprovedStage,
        RejectedStage,
        ReviewStatus,
    )

    value = ReviewStatus(status)
    if value is ReviewStatus.APPROVED:
        return ApprovedStage(approver=approver, decided_at=decided_at)
    if value is ReviewStatus.REJECTED:
        return RejectedStage(approver=approver, decided_at=decided_at, comment=comment)
    return PENDING
