"""Helper utilities shared across API route handlers."""

from __future__ import annotations

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

from interest_hub.application.use_cases.interests import InterestWorkflowResult
from interest_hub.domain.errors import (
    ConflictError,
    DependencyError,
    ExpiredError,
    InterestHubError,
    LimitExceededError,
    NotFoundError,
    ValidationError,
)
from interest_hub.interfaces.api.schemas import (
    InterestRead,
    InterestWorkflowRead,
    MutualMatchRead,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: tuple[tuple[type[InterestHubError], int], ...] = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (ExpiredError, status.HTTP_410_GONE),
    (LimitExceededError, status.HTTP_429_TOO_MANY_REQUESTS),
    (DependencyError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def status_code_for(exc: InterestHubError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def interest_hub_error_handler(request: Request, exc: InterestHubError) -> JSONResponse:
    """Render domain errors as ``{"detail", "code", "step"}`` bodies."""

    status_code = status_code_for(exc)
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    headers = {"Retry-After": "1"} if exc.retryable else None
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "code": exc.code, "step": exc.step},
        headers=headers,
    )


def workflow_result_to_schema(result: InterestWorkflowResult) -> InterestWorkflowRead:
    return InterestWorkflowRead(
        interest=InterestRead.model_validate(result.interest),
        notifications_sent=len(result.notifications),
        is_mutual_match=result.is_mutual_match,
        mutual_match=(
            MutualMatchRead.model_validate(result.mutual_match)
            if result.mutual_match is not None
            else None
        ),
        warnings=list(result.warnings),
    )


__all__ = ["interest_hub_error_handler", "status_code_for", "workflow_result_to_schema"]
