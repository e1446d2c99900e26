"""Error taxonomy shared by the interest workflows."""

from __future__ import annotations

STEP_VALIDATION = "validation"
STEP_INTEREST_CREATION = "interest_creation"
STEP_INTEREST_RESPONSE = "interest_response"
STEP_INTEREST_WITHDRAWAL = "interest_withdrawal"


class InterestHubError(Exception):
    """Base class for failures surfaced to callers of the interest workflows.

    ``step`` names the workflow phase that failed so callers can give precise
    feedback; ``retryable`` tells them whether repeating the call may succeed.
    """

    code = "error"
    retryable = False

    def __init__(self, message: str, *, step: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.step = step

    def with_step(self, step: str) -> "InterestHubError":
        if self.step is None:
            self.step = step
        return self


class ValidationError(InterestHubError):
    code = "validation_error"


class InvalidTargetError(ValidationError):
    code = "invalid_target"


class ConflictError(InterestHubError):
    code = "conflict"


class AlreadyExistsError(ConflictError):
    code = "already_exists"


class AlreadyRespondedError(ConflictError):
    code = "already_responded"


class NotPendingError(ConflictError):
    code = "not_pending"


class LimitExceededError(InterestHubError):
    code = "limit_exceeded"


class DailyLimitExceededError(LimitExceededError):
    code = "daily_limit_exceeded"


class NotFoundError(InterestHubError):
    code = "not_found"


class ExpiredError(InterestHubError):
    code = "expired"


class DependencyError(InterestHubError):
    """A store or channel call failed or timed out; the caller may retry."""

    code = "dependency_unavailable"
    retryable = True


__all__ = [
    "AlreadyExistsError",
    "AlreadyRespondedError",
    "ConflictError",
    "DailyLimitExceededError",
    "DependencyError",
    "ExpiredError",
    "InterestHubError",
    "InvalidTargetError",
    "LimitExceededError",
    "NotFoundError",
    "NotPendingError",
    "STEP_INTEREST_CREATION",
    "STEP_INTEREST_RESPONSE",
    "STEP_INTEREST_WITHDRAWAL",
    "STEP_VALIDATION",
    "ValidationError",
]
