"""Tests for helper utilities shared by the API routes."""

from datetime import datetime, timezone
from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[4]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from interest_hub.application.use_cases.interests import InterestWorkflowResult
from interest_hub.domain.entities import Interest, MutualMatch
from interest_hub.domain.errors import (
    AlreadyExistsError,
    AlreadyRespondedError,
    DailyLimitExceededError,
    DependencyError,
    ExpiredError,
    InterestHubError,
    InvalidTargetError,
    NotFoundError,
    NotPendingError,
    ValidationError,
)
from interest_hub.interfaces.api.routes_helpers import status_code_for, workflow_result_to_schema

SENT_AT = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    ("error", "expected_status"),
    [
        (ValidationError("bad"), 400),
        (InvalidTargetError("self"), 400),
        (NotFoundError("missing"), 404),
        (AlreadyExistsError("dup"), 409),
        (AlreadyRespondedError("done"), 409),
        (NotPendingError("done"), 409),
        (ExpiredError("late"), 410),
        (DailyLimitExceededError("limit"), 429),
        (DependencyError("down"), 503),
        (InterestHubError("unknown"), 500),
    ],
)
def test_status_code_for(error, expected_status):
    """Each domain error maps onto one HTTP status."""

    assert status_code_for(error) == expected_status


def test_workflow_result_to_schema():
    interest = Interest(
        id="interest-1",
        sender_id="alice",
        receiver_id="bob",
        status="accepted",
        sent_at=SENT_AT,
        expires_at=SENT_AT,
        responded_at=SENT_AT,
        is_read=True,
    )
    result = InterestWorkflowResult(
        interest=interest,
        mutual_match=MutualMatch(
            user_a_id="alice",
            user_b_id="bob",
            interest_a_id="interest-1",
            interest_b_id="interest-2",
            matched_at=SENT_AT,
            match_score=75,
        ),
        warnings=["Notification 'interest_accepted' for user alice was not delivered"],
    )

    schema = workflow_result_to_schema(result)

    assert schema.interest.id == "interest-1"
    assert schema.notifications_sent == 0
    assert schema.is_mutual_match is True
    assert schema.mutual_match.match_score == 75
    assert schema.warnings == result.warnings
