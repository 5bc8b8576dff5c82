"""
Typed Exception Hierarchy for the Access Review Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Every refusal the workflow can produce is a user-facing validation failure:
the caller shows it inline and does not retry.  Callers must be able to tell
"you are not the Validator" apart from "a rejection needs a reason" without
parsing message strings, so:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example:
    try:
        updated = apply_transition(submission, field, value, actor, bindings, now)
    except MissingRejectionReasonError as e:
        show_inline(e.code, field=e.field)
    except ReviewError as e:
        show_inline(e.code)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    AccessReviewError (base)
    |
    +-- ReviewError
    |   +-- UnauthorizedActorError
    |   +-- MissingRejectionReasonError
    |   +-- PreconditionNotMetError
    |   +-- InvalidTransitionError
    |
    +-- ResubmissionError
    |   +-- AlreadyResubmittedError
    |   +-- NothingToResubmitError
    |
    +-- StoreError
    |   +-- SubmissionNotFoundError
    |   +-- DuplicateSubmissionError
    |
    +-- ConcurrencyError
    |   +-- OptimisticLockError
    |
    +-- SummaryError
    |   +-- SummaryImportError
    |
    +-- AccountError
        +-- AuthenticationError
        +-- UserAlreadyExistsError
        +-- UserNotFoundError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category     | Code                      | When Raised
-------------|---------------------------|-------------------------------------------
Review       | UNAUTHORIZED              | Actor not bound to the target field
             | MISSING_REJECTION_REASON  | Stage rejection with blank comment
             | PRECONDITION_NOT_MET      | Final approval without both stages + file
             | INVALID_TRANSITION        | Field/value/state combination not defined
-------------|---------------------------|-------------------------------------------
Resubmission | ALREADY_RESUBMITTED       | Second resubmission of a final rejection
             | NOTHING_TO_RESUBMIT       | Record carries no rejection to correct
-------------|---------------------------|-------------------------------------------
Store        | SUBMISSION_NOT_FOUND      | Record ID doesn't exist
             | DUPLICATE_SUBMISSION      | Two records share one ID in replace_all
             | CORRUPT_RECORD            | Stored stage decision lacks approver/date
-------------|---------------------------|-------------------------------------------
Concurrency  | OPTIMISTIC_LOCK_CONFLICT  | Stored version moved since it was read
-------------|---------------------------|-------------------------------------------
Summary      | SUMMARY_IMPORT_FAILED     | Import contained no rows / unreadable
-------------|---------------------------|-------------------------------------------
Account      | AUTHENTICATION_FAILED     | Unknown user or wrong password
             | USER_ALREADY_EXISTS       | Username taken
             | USER_NOT_FOUND            | Username doesn't exist
===============================================================================
"""


class AccessReviewError(Exception):
    """
    Base exception for all access review errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "ACCESS_REVIEW_ERROR"


# Review (state machine) exceptions


class ReviewError(AccessReviewError):
    """Base exception for refused state machine transitions."""

    code: str = "REVIEW_ERROR"


class UnauthorizedActorError(ReviewError):
    """Actor is not bound to the field it tried to change."""

    code: str = "UNAUTHORIZED"

    def __init__(self, username: str, role: str, field: str):
        self.username = username
        self.role = role
        self.field = field
        super().__init__(
            f"User {username!r} (role {role!r}) may not change {field}"
        )


class MissingRejectionReasonError(ReviewError):
    """A stage rejection was attempted without a comment."""

    code: str = "MISSING_REJECTION_REASON"

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Rejecting {field} requires a non-empty comment")


class PreconditionNotMetError(ReviewError):
    """Final approval attempted before its preconditions hold."""

    code: str = "PRECONDITION_NOT_MET"

    def __init__(self, submission_id: int, unmet: list[str]):
        self.submission_id = submission_id
        self.unmet = list(unmet)
        super().__init__(
            f"Cannot approve submission {submission_id}: "
            + "; ".join(self.unmet)
        )


class InvalidTransitionError(ReviewError):
    """The field/value/state combination is not a defined transition."""

    code: str = "INVALID_TRANSITION"

    def __init__(self, submission_id: int, field: str, current: str, target: str):
        self.submission_id = submission_id
        self.field = field
        self.current = current
        self.target = target
        super().__init__(
            f"Invalid transition on submission {submission_id}: "
            f"{field} {current} -> {target}"
        )


# Resubmission exceptions


class ResubmissionError(AccessReviewError):
    """Base exception for resubmission refusals."""

    code: str = "RESUBMISSION_ERROR"


class AlreadyResubmittedError(ResubmissionError):
    """A finally rejected submission already has a linked resubmission."""

    code: str = "ALREADY_RESUBMITTED"

    def __init__(self, submission_id: int, resubmission_id: int):
        self.submission_id = submission_id
        self.resubmission_id = resubmission_id
        super().__init__(
            f"Submission {submission_id} was already resubmitted "
            f"as {resubmission_id}"
        )


class NothingToResubmitError(ResubmissionError):
    """The submission carries no rejection that a resubmission could correct."""

    code: str = "NOTHING_TO_RESUBMIT"

    def __init__(self, submission_id: int, final_status: str):
        self.submission_id = submission_id
        self.final_status = final_status
        super().__init__(
            f"Submission {submission_id} has nothing to resubmit "
            f"(final status {final_status})"
        )


# Store exceptions


class StoreError(AccessReviewError):
    """Base exception for record store errors."""

    code: str = "STORE_ERROR"


class SubmissionNotFoundError(StoreError):
    """Submission with given ID was not found."""

    code: str = "SUBMISSION_NOT_FOUND"

    def __init__(self, submission_id: int):
        self.submission_id = submission_id
        super().__init__(f"Submission not found: {submission_id}")


class DuplicateSubmissionError(StoreError):
    """Two submissions share the same ID."""

    code: str = "DUPLICATE_SUBMISSION"

    def __init__(self, submission_id: int):
        self.submission_id = submission_id
        super().__init__(f"Duplicate submission id: {submission_id}")


class CorruptRecordError(StoreError):
    """A persisted record cannot be decoded into a valid value."""

    code: str = "CORRUPT_RECORD"

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Corrupt record: {detail}")


# Concurrency exceptions


class ConcurrencyError(AccessReviewError):
    """Base exception for concurrency-related errors."""

    code: str = "CONCURRENCY_ERROR"


class OptimisticLockError(ConcurrencyError):
    """Optimistic locking conflict detected."""

    code: str = "OPTIMISTIC_LOCK_CONFLICT"

    def __init__(self, entity_type: str, entity_id: str, expected: int, actual: int):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Optimistic lock conflict on {entity_type} {entity_id}: "
            f"expected version {expected}, found {actual}"
        )


# Summary exceptions


class SummaryError(AccessReviewError):
    """Base exception for summary projection errors."""

    code: str = "SUMMARY_ERROR"


class SummaryImportError(SummaryError):
    """Imported tabular data could not be turned into summary rows."""

    code: str = "SUMMARY_IMPORT_FAILED"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Summary import failed: {reason}")


# Account exceptions


class AccountError(AccessReviewError):
    """Base exception for user account errors."""

    code: str = "ACCOUNT_ERROR"


class AuthenticationError(AccountError):
    """Unknown username or wrong password."""

    code: str = "AUTHENTICATION_FAILED"

    def __init__(self, username: str):
        self.username = username
        super().__init__("Invalid username or password")


class UserAlreadyExistsError(AccountError):
    """Username is already taken."""

    code: str = "USER_ALREADY_EXISTS"

    def __init__(self, username: str):
        self.username = username
        super().__init__(f"User already exists: {username}")


class UserNotFoundError(AccountError):
    """User with given username was not found."""

    code: str = "USER_NOT_FOUND"

    def __init__(self, username: str):
        self.username = username
        super().__init__(f"User not found: {username}")
