"""Use case for withdrawing a pending interest."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from interest_hub.application.use_cases.realtime import (
    ACTIVITY_INTEREST_WITHDRAWN,
    publish_interest_change,
    record_interest_activity,
)
from interest_hub.domain.entities import INTEREST_STATUS_PENDING, INTEREST_STATUS_WITHDRAWN
from interest_hub.domain.errors import (
    STEP_INTEREST_WITHDRAWAL,
    STEP_VALIDATION,
    InterestHubError,
    NotFoundError,
    NotPendingError,
    ValidationError,
)
from interest_hub.infrastructure.database import translate_store_errors
from interest_hub.infrastructure.realtime import PropagationChannel, get_propagation_channel
from interest_hub.infrastructure.repositories import InterestRepository
from interest_hub.utils import Clock, SystemClock

from .expire_interests import expire_interest
from .results import InterestWorkflowResult

logger = logging.getLogger(__name__)


def withdraw_interest(
    session: Session,
    *,
    interest_id: str,
    sender_id: str | None = None,
    clock: Clock | None = None,
    channel: PropagationChannel | None = None,
) -> InterestWorkflowResult:
    """Withdraw a pending interest on behalf of its sender.

    An interest past its deadline is expired instead and reported as no
    longer pending.
    """

    clock = clock or SystemClock()
    channel = channel or get_propagation_channel()
    repository = InterestRepository(session)

    try:
        with translate_store_errors(session, "interest withdrawal"):
            interest = repository.get(interest_id)
            if interest is None:
                raise NotFoundError("Interest not found")
            if sender_id is not None and sender_id != interest.sender_id:
                raise ValidationError(
                    "You can only withdraw interests you sent", step=STEP_VALIDATION
                )
            if interest.status != INTEREST_STATUS_PENDING:
                raise NotPendingError(f"Cannot withdraw an interest that is {interest.status}")

            now = clock.now()
            if interest.is_overdue(now):
                session.rollback()
                expire_interest(session, interest, clock=clock, channel=channel)
                raise NotPendingError("Cannot withdraw an interest that has expired")

            if not repository.transition(
                interest_id,
                expected_status=INTEREST_STATUS_PENDING,
                new_status=INTEREST_STATUS_WITHDRAWN,
                values={"withdrawn_at": now},
            ):
                current = repository.get(interest_id)
                session.rollback()
                raise NotPendingError(
                    f"Cannot withdraw an interest that is {current.status if current else 'gone'}"
                )
            session.commit()
            interest = repository.get(interest_id)
    except InterestHubError as exc:
        exc.with_step(STEP_INTEREST_WITHDRAWAL)
        raise

    logger.info("Interest %s withdrawn by %s", interest.id, interest.sender_id)

    publish_interest_change(channel, interest, timestamp=now)
    record_interest_activity(
        channel,
        interest,
        activities={
            interest.sender_id: ACTIVITY_INTEREST_WITHDRAWN,
            interest.receiver_id: ACTIVITY_INTEREST_WITHDRAWN,
        },
        timestamp=now,
    )
    return InterestWorkflowResult(interest=interest)


__all__ = ["withdraw_interest"]
