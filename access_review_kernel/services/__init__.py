"""Kernel services: the stateful shell around the pure domain layer."""

from access_review_kernel.services.account_service import AccountService
from access_review_kernel.services.review_service import ReviewService
from access_review_kernel.services.summary_service import SummaryService

__all__ = [
    "AccountService",
    "ReviewService",
    "SummaryService",
]
