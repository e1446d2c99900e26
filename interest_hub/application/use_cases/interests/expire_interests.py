"""Use cases flipping overdue pending interests to ``expired``."""

from __future__ import annotations

import logging
from dataclasses import replace

from sqlalchemy.orm import Session

from interest_hub.application.use_cases.realtime import (
    ACTIVITY_INTEREST_EXPIRED,
    publish_interest_change,
    record_interest_activity,
)
from interest_hub.domain.entities import (
    INTEREST_STATUS_EXPIRED,
    INTEREST_STATUS_PENDING,
    Interest,
)
from interest_hub.infrastructure.database import translate_store_errors
from interest_hub.infrastructure.realtime import PropagationChannel, get_propagation_channel
from interest_hub.infrastructure.repositories import InterestRepository
from interest_hub.utils import Clock, SystemClock

logger = logging.getLogger(__name__)

DEFAULT_SWEEP_BATCH_SIZE = 100


def expire_interest(
    session: Session,
    interest: Interest,
    *,
    clock: Clock,
    channel: PropagationChannel,
) -> bool:
    """Expire one overdue pending interest.

    Safe to call concurrently with the sweep: only the caller whose
    compare-and-swap succeeds publishes the change and gets ``True``.
    """

    repository = InterestRepository(session)
    with translate_store_errors(session, "interest expiry"):
        flipped = repository.transition(
            interest.id,
            expected_status=INTEREST_STATUS_PENDING,
            new_status=INTEREST_STATUS_EXPIRED,
        )
        session.commit()

    if flipped:
        current = replace(interest, status=INTEREST_STATUS_EXPIRED)
        now = clock.now()
        publish_interest_change(channel, current, timestamp=now)
        record_interest_activity(
            channel,
            current,
            activities={
                current.sender_id: ACTIVITY_INTEREST_EXPIRED,
                current.receiver_id: ACTIVITY_INTEREST_EXPIRED,
            },
            timestamp=now,
        )
    return flipped


def expire_overdue_interests(
    session: Session,
    *,
    batch_size: int = DEFAULT_SWEEP_BATCH_SIZE,
    clock: Clock | None = None,
    channel: PropagationChannel | None = None,
) -> int:
    """Expire every pending interest past its deadline.

    Works in batches of ``batch_size`` and returns how many interests this
    call expired. Interests already expired lazily are skipped.
    """

    if batch_size <= 0:
        raise ValueError("batch_size must be positive")

    clock = clock or SystemClock()
    channel = channel or get_propagation_channel()
    repository = InterestRepository(session)
    now = clock.now()

    expired = 0
    while True:
        with translate_store_errors(session, "expiry sweep"):
            batch = repository.list_overdue_pending(now, limit=batch_size)
            session.rollback()
        for interest in batch:
            if expire_interest(session, interest, clock=clock, channel=channel):
                expired += 1
        if len(batch) < batch_size:
            break

    if expired:
        logger.info("Expired %s overdue interest(s)", expired)
    return expired


__all__ = ["DEFAULT_SWEEP_BATCH_SIZE", "expire_interest", "expire_overdue_interests"]
