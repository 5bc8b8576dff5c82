"""SQLAlchemy ORM models for the SQL-backed stores."""

from access_review_kernel.models.submission import SubmissionModel
from access_review_kernel.models.summary import SummaryRowModel
from access_review_kernel.models.user import UserModel

__all__ = [
    "SubmissionModel",
    "SummaryRowModel",
    "UserModel",
]
