"""Use case for acknowledging a received interest."""

from __future__ import annotations

from sqlalchemy.orm import Session

from interest_hub.application.use_cases.realtime import (
    publish_counter_snapshots,
    publish_interest_change,
)
from interest_hub.domain.entities import Interest
from interest_hub.domain.errors import NotFoundError
from interest_hub.infrastructure.database import translate_store_errors
from interest_hub.infrastructure.realtime import PropagationChannel, get_propagation_channel
from interest_hub.infrastructure.repositories import CounterRepository, InterestRepository
from interest_hub.utils import Clock, SystemClock


def mark_interest_as_read(
    session: Session,
    *,
    interest_id: str,
    user_id: str,
    clock: Clock | None = None,
    channel: PropagationChannel | None = None,
) -> Interest:
    """Flag a received interest as read; repeated calls change nothing."""

    clock = clock or SystemClock()
    channel = channel or get_propagation_channel()
    repository = InterestRepository(session)

    with translate_store_errors(session, "mark interest as read"):
        interest = repository.get(interest_id)
        if interest is None or interest.receiver_id != user_id:
            raise NotFoundError("Interest not found")
        if interest.is_read:
            session.rollback()
            return interest

        CounterRepository(session).ensure_rows([user_id])
        if not repository.mark_read(interest_id):
            session.rollback()
            return repository.get(interest_id)
        CounterRepository(session).decrement_floor(user_id, "unread_count")
        session.commit()
        interest = repository.get(interest_id)

    now = clock.now()
    publish_interest_change(channel, interest, timestamp=now)
    publish_counter_snapshots(session, channel, [user_id], timestamp=now)
    return interest


__all__ = ["mark_interest_as_read"]
