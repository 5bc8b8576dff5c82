"""
JSON wire format (``access_review_kernel.domain.codec``).

The persisted shape of a submission is a flat JSON object; it is also
what the JSON file store writes and what an API would return.  Encoding
then decoding yields a value equal to the original (datetimes are ISO
8601 with offset, stage variants are tagged by ``status``).

Decoding is lenient about legacy blanks: a missing or empty stage
status reads as Pending.  A decided stage must still carry its approver
and date (and a comment when Rejected); anything else is a
CorruptRecordError.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from access_review_kernel.domain.accounts import UserAccount
from access_review_kernel.domain.submission import (
    PENDING,
    ApprovedStage,
    RejectedStage,
    ReviewStatus,
    StageState,
    Submission,
)
from access_review_kernel.domain.summary import SummaryRow
from access_review_kernel.exceptions import CorruptRecordError, MissingRejectionReasonError


def _dt(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse_dt(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value)


def stage_to_dict(state: StageState) -> dict[str, Any]:
    data: dict[str, Any] = {"status": state.status.value}
    if isinstance(state, (ApprovedStage, RejectedStage)):
        data["approver"] = state.approver
        data["date"] = _dt(state.decided_at)
    if isinstance(state, RejectedStage):
        data["comment"] = state.comment
    return data


def stage_from_dict(data: dict[str, Any] | None) -> StageState:
    """Decode a tagged stage dict.

    Raises:
        CorruptRecordError: unknown status, or a decided stage without
            its approver, date or (when Rejected) comment.
    """
    if not data or not data.get("status"):
        return PENDING
    try:
        status = ReviewStatus(data["status"])
    except ValueError:
        raise CorruptRecordError(f"unknown stage status {data['status']!r}") from None
    if status is ReviewStatus.PENDING:
        return PENDING

    approver = data.get("approver")
    decided_at = _parse_dt(data.get("date"))
    if not approver or decided_at is None:
        raise CorruptRecordError(f"{status.value} stage without approver and date")
    if status is ReviewStatus.APPROVED:
        return ApprovedStage(approver=approver, decided_at=decided_at)
    try:
        return RejectedStage(approver=approver, decided_at=decided_at, comment=data.get("comment"))
    except MissingRejectionReasonError:
        raise CorruptRecordError("Rejected stage without comment") from None


def submission_to_dict(s: Submission) -> dict[str, Any]:
    return {
        "id": s.id,
        "username": s.username,
        "fields": dict(s.fields),
        "validator": stage_to_dict(s.validator),
        "recommender": stage_to_dict(s.recommender),
        "final_status": s.final_status.value,
        "final_decided_by": s.final_decided_by,
        "final_approved_at": _dt(s.final_approved_at),
        "final_rejected_at": _dt(s.final_rejected_at),
        "approved_file": s.approved_file,
        "approved_file_uploaded_at": _dt(s.approved_file_uploaded_at),
        "original_submission_id": s.original_submission_id,
        "resubmitted": s.resubmitted,
        "resubmitted_at": _dt(s.resubmitted_at),
        "created_at": _dt(s.created_at),
        "updated_at": _dt(s.updated_at),
        "version": s.version,
    }


def submission_from_dict(data: dict[str, Any]) -> Submission:
    return Submission(
        id=int(data["id"]),
        username=data["username"],
        fields=dict(data.get("fields") or {}),
        validator=stage_from_dict(data.get("validator")),
        recommender=stage_from_dict(data.get("recommender")),
        final_status=ReviewStatus(data.get("final_status") or ReviewStatus.PENDING.value),
        final_decided_by=data.get("final_decided_by"),
        final_approved_at=_parse_dt(data.get("final_approved_at")),
        final_rejected_at=_parse_dt(data.get("final_rejected_at")),
        approved_file=data.get("approved_file"),
        approved_file_uploaded_at=_parse_dt(data.get("approved_file_uploaded_at")),
        original_submission_id=data.get("original_submission_id"),
        resubmitted=bool(data.get("resubmitted", False)),
        resubmitted_at=_parse_dt(data.get("resubmitted_at")),
        created_at=_parse_dt(data.get("created_at")),
        updated_at=_parse_dt(data.get("updated_at")),
        version=int(data.get("version", 0)),
    )


def summary_row_to_dict(row: SummaryRow) -> dict[str, str]:
    return {
        "id": row.user_id,
        "companyList": row.company_list,
        "securityGroup": row.security_group,
    }


def summary_row_from_dict(data: dict[str, Any]) -> SummaryRow:
    return SummaryRow(
        user_id=str(data["id"]),
        company_list=data.get("companyList") or "",
        security_group=data.get("securityGroup") or "",
    )


def user_to_dict(user: UserAccount) -> dict[str, str]:
    return {
        "username": user.username,
        "role": user.role,
        "password_hash": user.password_hash,
        "department": user.department,
    }


def user_from_dict(data: dict[str, Any]) -> UserAccount:
    return UserAccount(
        username=data["username"],
        role=data["role"],
        password_hash=data["password_hash"],
        department=data.get("department") or "",
    )
