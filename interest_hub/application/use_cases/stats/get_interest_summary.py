"""Use cases reporting per-user interest figures."""

from __future__ import annotations

from collections.abc import Mapping

from sqlalchemy.orm import Session

from interest_hub.domain.entities import (
    INTEREST_STATUS_ACCEPTED,
    INTEREST_STATUS_DECLINED,
    INTEREST_STATUS_EXPIRED,
    INTEREST_STATUS_PENDING,
    INTEREST_STATUS_WITHDRAWN,
    InterestSummary,
    NotificationTotals,
    StatusBreakdown,
    UserInterestStats,
)
from interest_hub.infrastructure.database import translate_store_errors
from interest_hub.infrastructure.repositories import (
    DIRECTION_RECEIVED,
    DIRECTION_SENT,
    CounterRepository,
    InterestRepository,
    MutualMatchRepository,
)

from .calculate_interest_stats import percentage


def _breakdown(counts: Mapping[str, int]) -> StatusBreakdown:
    return StatusBreakdown(
        total=sum(counts.values()),
        pending=counts.get(INTEREST_STATUS_PENDING, 0),
        accepted=counts.get(INTEREST_STATUS_ACCEPTED, 0),
        declined=counts.get(INTEREST_STATUS_DECLINED, 0),
        withdrawn=counts.get(INTEREST_STATUS_WITHDRAWN, 0),
        expired=counts.get(INTEREST_STATUS_EXPIRED, 0),
    )


def get_interest_summary(session: Session, *, user_id: str) -> InterestSummary:
    """Return status breakdowns per direction plus the user's counters."""

    interests = InterestRepository(session)
    with translate_store_errors(session, "interest summary"):
        sent = interests.status_breakdown(user_id, DIRECTION_SENT)
        received = interests.status_breakdown(user_id, DIRECTION_RECEIVED)
        counters = CounterRepository(session).get(user_id)

    return InterestSummary(
        sent=_breakdown(sent),
        received=_breakdown(received),
        mutual=counters.mutual_count,
        notifications=NotificationTotals(
            total=counters.notification_count,
            unread=counters.unread_notification_count,
        ),
    )


def get_user_interest_stats(session: Session, *, user_id: str) -> UserInterestStats:
    """Return historical analytics for ``user_id``.

    The average response time covers received interests that were answered
    and is expressed in hours.
    """

    interests = InterestRepository(session)
    with translate_store_errors(session, "user interest stats"):
        sent = _breakdown(interests.status_breakdown(user_id, DIRECTION_SENT))
        received = _breakdown(interests.status_breakdown(user_id, DIRECTION_RECEIVED))
        answered = interests.list_by_user(
            user_id,
            DIRECTION_RECEIVED,
            statuses=[INTEREST_STATUS_ACCEPTED, INTEREST_STATUS_DECLINED],
            limit=None,
        )
        mutual = MutualMatchRepository(session).count_for_user(user_id)

    response_hours = [
        (interest.responded_at - interest.sent_at).total_seconds() / 3600
        for interest in answered
        if interest.responded_at is not None
    ]
    average_response_time = (
        round(sum(response_hours) / len(response_hours), 2) if response_hours else 0.0
    )

    return UserInterestStats(
        total_sent=sent.total,
        total_received=received.total,
        accepted_sent=sent.accepted,
        accepted_received=received.accepted,
        pending_sent=sent.pending,
        pending_received=received.pending,
        declined_sent=sent.declined,
        declined_received=received.declined,
        withdrawn_sent=sent.withdrawn,
        mutual_interests=mutual,
        success_rate=percentage(sent.accepted, sent.total),
        response_rate=percentage(received.accepted + received.declined, received.total),
        average_response_time=average_response_time,
    )


__all__ = ["get_interest_summary", "get_user_interest_stats"]
