"""Administrative recomputation of a user's counter row."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from interest_hub.domain.entities import UserCounters
from interest_hub.infrastructure.database import translate_store_errors
from interest_hub.infrastructure.repositories import (
    DIRECTION_RECEIVED,
    DIRECTION_SENT,
    CounterRepository,
    InterestRepository,
    MutualMatchRepository,
    NotificationRepository,
)

logger = logging.getLogger(__name__)


def rebuild_user_counters(session: Session, *, user_id: str) -> UserCounters:
    """Recount every counter of ``user_id`` from the source tables.

    Scans the user's rows, so it is meant for repairs and maintenance jobs
    rather than request handling.
    """

    interests = InterestRepository(session)
    counters = CounterRepository(session)
    with translate_store_errors(session, "rebuild counters"):
        notification_total, notification_unread = NotificationRepository(
            session
        ).totals_for_user(user_id)
        rebuilt = UserCounters(
            user_id=user_id,
            sent_count=sum(interests.status_breakdown(user_id, DIRECTION_SENT).values()),
            received_count=sum(
                interests.status_breakdown(user_id, DIRECTION_RECEIVED).values()
            ),
            unread_count=interests.count_unread_received(user_id),
            mutual_count=MutualMatchRepository(session).count_for_user(user_id),
            notification_count=notification_total,
            unread_notification_count=notification_unread,
        )
        previous = counters.get(user_id)
        saved = counters.replace(rebuilt)
        session.commit()

    if previous != saved:
        logger.info("Counters of user %s rebuilt: %s -> %s", user_id, previous, saved)
    return saved


__all__ = ["rebuild_user_counters"]
