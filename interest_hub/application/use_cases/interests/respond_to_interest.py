"""Use case for accepting or declining a received interest."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from interest_hub.application.use_cases.matches import detect_mutual_match
from interest_hub.application.use_cases.notifications import notify_interest_response
from interest_hub.application.use_cases.realtime import (
    ACTIVITY_INTEREST_ACCEPTED,
    ACTIVITY_INTEREST_DECLINED,
    publish_counter_snapshots,
    publish_interest_change,
    record_interest_activity,
)
from interest_hub.config import Settings, get_settings
from interest_hub.domain.entities import (
    INTEREST_RESPONSES,
    INTEREST_STATUS_ACCEPTED,
    INTEREST_STATUS_EXPIRED,
    INTEREST_STATUS_PENDING,
    Interest,
)
from interest_hub.domain.errors import (
    STEP_INTEREST_RESPONSE,
    STEP_VALIDATION,
    AlreadyRespondedError,
    DependencyError,
    ExpiredError,
    InterestHubError,
    NotFoundError,
    ValidationError,
)
from interest_hub.infrastructure.database import translate_store_errors
from interest_hub.infrastructure.realtime import PropagationChannel, get_propagation_channel
from interest_hub.infrastructure.repositories import CounterRepository, InterestRepository
from interest_hub.utils import Clock, SystemClock

from .expire_interests import expire_interest
from .results import InterestWorkflowResult

logger = logging.getLogger(__name__)


def _load_pending(
    session: Session,
    interest_id: str,
    *,
    responder_id: str | None,
    clock: Clock,
    channel: PropagationChannel,
) -> Interest:
    interest = InterestRepository(session).get(interest_id)
    if interest is None:
        raise NotFoundError("Interest not found")
    if responder_id is not None and responder_id != interest.receiver_id:
        raise ValidationError(
            "You can only respond to interests sent to you", step=STEP_VALIDATION
        )
    if interest.status == INTEREST_STATUS_EXPIRED:
        raise ExpiredError("This interest has expired")
    if interest.status != INTEREST_STATUS_PENDING:
        raise AlreadyRespondedError("This interest has already been responded to")
    if interest.is_overdue(clock.now()):
        session.rollback()
        expire_interest(session, interest, clock=clock, channel=channel)
        raise ExpiredError("This interest has expired")
    return interest


def _conflict_for(session: Session, interest_id: str) -> InterestHubError:
    current = InterestRepository(session).get(interest_id)
    session.rollback()
    if current is not None and current.status == INTEREST_STATUS_EXPIRED:
        return ExpiredError("This interest has expired")
    return AlreadyRespondedError("This interest has already been responded to")


def respond_to_interest(
    session: Session,
    *,
    interest_id: str,
    response: str,
    responder_id: str | None = None,
    clock: Clock | None = None,
    channel: PropagationChannel | None = None,
    settings: Settings | None = None,
) -> InterestWorkflowResult:
    """Accept or decline a pending interest.

    The status change is a compare-and-swap on ``pending`` so concurrent
    responses, withdrawals and expiry resolve to exactly one winner. An
    acceptance then runs mutual match detection; a detection outage is
    reported as a warning and repaired by ``reconcile_mutual_matches``.
    """

    if response not in INTEREST_RESPONSES:
        raise ValidationError(
            f"Response must be one of {sorted(INTEREST_RESPONSES)}", step=STEP_VALIDATION
        )

    settings = settings or get_settings()
    clock = clock or SystemClock()
    channel = channel or get_propagation_channel()
    repository = InterestRepository(session)
    counters = CounterRepository(session)

    try:
        with translate_store_errors(session, "interest response"):
            interest = _load_pending(
                session, interest_id, responder_id=responder_id, clock=clock, channel=channel
            )
            counters.ensure_rows([interest.receiver_id])

            now = clock.now()
            values = {"responded_at": now, "is_read": True}
            # The unread flag is part of the swap so the counter drops once.
            was_unread = repository.transition(
                interest_id,
                expected_status=INTEREST_STATUS_PENDING,
                new_status=response,
                values=values,
                only_if_unread=True,
            )
            if was_unread:
                counters.decrement_floor(interest.receiver_id, "unread_count")
            elif not repository.transition(
                interest_id,
                expected_status=INTEREST_STATUS_PENDING,
                new_status=response,
                values=values,
            ):
                raise _conflict_for(session, interest_id)
            session.commit()
            interest = repository.get(interest_id)
    except InterestHubError as exc:
        exc.with_step(STEP_INTEREST_RESPONSE)
        raise

    logger.info("Interest %s %s by %s", interest.id, response, interest.receiver_id)

    result = InterestWorkflowResult(interest=interest)
    dispatch = notify_interest_response(
        session, interest=interest, clock=clock, channel=channel, settings=settings
    )
    if dispatch.notification is not None:
        result.notifications.append(dispatch.notification)
    if dispatch.warning:
        result.warnings.append(dispatch.warning)

    publish_interest_change(channel, interest, timestamp=now)
    activity = (
        ACTIVITY_INTEREST_ACCEPTED
        if interest.status == INTEREST_STATUS_ACCEPTED
        else ACTIVITY_INTEREST_DECLINED
    )
    record_interest_activity(
        channel,
        interest,
        activities={interest.sender_id: activity, interest.receiver_id: activity},
        timestamp=now,
    )
    publish_counter_snapshots(session, channel, [interest.receiver_id], timestamp=now)

    if interest.status == INTEREST_STATUS_ACCEPTED:
        try:
            detection = detect_mutual_match(
                session, interest=interest, clock=clock, channel=channel, settings=settings
            )
        except DependencyError as exc:
            warning = f"Mutual match check for interest {interest.id} was postponed"
            logger.warning("%s: %s", warning, exc)
            result.warnings.append(warning)
        else:
            result.mutual_match = detection.match
            result.notifications.extend(detection.notifications)
            result.warnings.extend(detection.warnings)

    return result


__all__ = ["respond_to_interest"]
