"""Use case for sending an interest to another user."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Protocol

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from interest_hub.application.use_cases.notifications import notify_new_interest
from interest_hub.application.use_cases.realtime import (
    ACTIVITY_INTEREST_RECEIVED,
    ACTIVITY_INTEREST_SENT,
    publish_counter_snapshots,
    publish_interest_change,
    record_interest_activity,
)
from interest_hub.config import Settings, get_settings
from interest_hub.domain.entities import (
    EVENT_ACTION_CREATED,
    INTEREST_STATUS_PENDING,
    INTEREST_TYPE_PROPOSAL,
    INTEREST_TYPES,
    Interest,
)
from interest_hub.domain.errors import (
    STEP_INTEREST_CREATION,
    STEP_VALIDATION,
    AlreadyExistsError,
    DailyLimitExceededError,
    InterestHubError,
    InvalidTargetError,
    ValidationError,
)
from interest_hub.infrastructure.database import translate_store_errors
from interest_hub.infrastructure.realtime import PropagationChannel, get_propagation_channel
from interest_hub.infrastructure.repositories import (
    CounterRepository,
    DailyQuotaRepository,
    InterestRepository,
    UserRepository,
)
from interest_hub.utils import Clock, SystemClock, ensure_app_timezone

from .results import InterestWorkflowResult

logger = logging.getLogger(__name__)


class UserDirectory(Protocol):
    """Lookups the workflows need from the external user directory."""

    def exists(self, user_id: str) -> bool:
        ...

    def is_active(self, user_id: str) -> bool:
        ...


def _validate_request(
    directory: UserDirectory,
    *,
    sender_id: str,
    receiver_id: str,
    interest_type: str,
) -> None:
    if not sender_id or not receiver_id:
        raise ValidationError("Sender and receiver are required", step=STEP_VALIDATION)
    if interest_type not in INTEREST_TYPES:
        raise ValidationError(
            f"Unsupported interest type '{interest_type}'", step=STEP_VALIDATION
        )
    if sender_id == receiver_id:
        raise InvalidTargetError(
            "You cannot send an interest to yourself", step=STEP_VALIDATION
        )
    if not directory.is_active(sender_id):
        raise ValidationError("Sender account is not active", step=STEP_VALIDATION)
    if not directory.exists(receiver_id):
        raise InvalidTargetError("Receiver does not exist", step=STEP_VALIDATION)
    if not directory.is_active(receiver_id):
        raise InvalidTargetError("Receiver is not active", step=STEP_VALIDATION)


def send_interest(
    session: Session,
    *,
    sender_id: str,
    receiver_id: str,
    message: str | None = None,
    interest_type: str = INTEREST_TYPE_PROPOSAL,
    clock: Clock | None = None,
    channel: PropagationChannel | None = None,
    settings: Settings | None = None,
    directory: UserDirectory | None = None,
) -> InterestWorkflowResult:
    """Create a pending interest from ``sender_id`` to ``receiver_id``.

    The interest row, the daily quota slot and the sender/receiver counter
    updates are committed together. The receiver's notification and the
    realtime events follow the commit and never undo it.
    """

    settings = settings or get_settings()
    clock = clock or SystemClock()
    channel = channel or get_propagation_channel()
    message = (message or "").strip() or None

    with translate_store_errors(session, "interest validation"):
        _validate_request(
            directory or UserRepository(session),
            sender_id=sender_id,
            receiver_id=receiver_id,
            interest_type=interest_type,
        )

    now = clock.now()
    day = ensure_app_timezone(now).date()
    interests = InterestRepository(session)
    counters = CounterRepository(session)
    quotas = DailyQuotaRepository(session)

    try:
        with translate_store_errors(session, "interest creation"):
            counters.ensure_rows([sender_id, receiver_id])
            quotas.ensure_row(sender_id, day)

            if interests.find_active(sender_id, receiver_id) is not None:
                session.rollback()
                raise AlreadyExistsError("You have already sent an interest to this user")

            if not quotas.try_consume(sender_id, day, limit=settings.interest_daily_limit):
                session.rollback()
                raise DailyLimitExceededError(
                    f"Daily interest limit of {settings.interest_daily_limit} reached"
                )

            try:
                interest = interests.add(
                    Interest(
                        id=None,
                        sender_id=sender_id,
                        receiver_id=receiver_id,
                        status=INTEREST_STATUS_PENDING,
                        sent_at=now,
                        expires_at=now + timedelta(days=settings.interest_expiry_days),
                        type=interest_type,
                        message=message,
                        is_read=False,
                    )
                )
            except IntegrityError as exc:
                session.rollback()
                raise AlreadyExistsError(
                    "You have already sent an interest to this user"
                ) from exc

            counters.increment(sender_id, sent_count=1)
            counters.increment(receiver_id, received_count=1, unread_count=1)
            session.commit()
    except InterestHubError as exc:
        exc.with_step(STEP_INTEREST_CREATION)
        raise

    logger.info("Interest %s sent from %s to %s", interest.id, sender_id, receiver_id)

    result = InterestWorkflowResult(interest=interest)
    dispatch = notify_new_interest(
        session, interest=interest, clock=clock, channel=channel, settings=settings
    )
    if dispatch.notification is not None:
        result.notifications.append(dispatch.notification)
    if dispatch.warning:
        result.warnings.append(dispatch.warning)

    publish_interest_change(channel, interest, action=EVENT_ACTION_CREATED, timestamp=now)
    record_interest_activity(
        channel,
        interest,
        activities={
            sender_id: ACTIVITY_INTEREST_SENT,
            receiver_id: ACTIVITY_INTEREST_RECEIVED,
        },
        timestamp=now,
    )
    publish_counter_snapshots(session, channel, [sender_id, receiver_id], timestamp=now)
    return result


__all__ = ["UserDirectory", "send_interest"]
