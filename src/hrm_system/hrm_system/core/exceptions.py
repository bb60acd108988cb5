from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """Base exception for business rule violations.

    ``code`` is a stable identifier for the error kind; ``context`` holds the
    entity ids and limits needed to render a message to the caller.
    """

    code = "DomainError"

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message, "context": dict(self.context)}


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "ValidationError"


class AuthenticationError(DomainError):
    """Raised when the caller cannot be identified."""

    code = "AuthenticationError"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "AuthorizationError"


class NotFoundError(ValidationError):
    code = "NotFound"


class PolicyNotApplicable(ValidationError):
    code = "PolicyNotApplicable"


class AdvanceNoticeViolation(ValidationError):
    code = "AdvanceNoticeViolation"


class ConsecutiveLimitExceeded(ValidationError):
    code = "ConsecutiveLimitExceeded"


class InsufficientBalance(ValidationError):
    code = "InsufficientBalance"


class OverlappingRequest(ValidationError):
    code = "OverlappingRequest"


class EmptyApprovalChain(ValidationError):
    code = "EmptyApprovalChain"


class NotCurrentApprover(ValidationError):
    code = "NotCurrentApprover"


class RequestNotPending(ValidationError):
    code = "RequestNotPending"


class DuplicateCheckIn(ValidationError):
    code = "DuplicateCheckIn"


class DuplicateCheckOut(ValidationError):
    code = "DuplicateCheckOut"


class NoCheckInFound(ValidationError):
    code = "NoCheckInFound"


class AlreadyCheckedOut(ValidationError):
    code = "AlreadyCheckedOut"


class BreakAlreadyOpen(ValidationError):
    code = "BreakAlreadyOpen"


class NoOpenBreak(ValidationError):
    code = "NoOpenBreak"


class BalanceInconsistency(DomainError):
    """Sequencing defect: a release would push used days below zero.

    Not a user input problem; it is logged on the alerts logger.
    """

    code = "BalanceInconsistency"


class OverlappingAssignment(ValidationError):
    code = "OverlappingAssignment"
