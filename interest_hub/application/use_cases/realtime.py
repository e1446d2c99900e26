"""Helpers that push committed interest state onto the propagation channel."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Iterable, Mapping

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from interest_hub.domain.entities import (
    ENTITY_INTEREST,
    ENTITY_MATCH,
    ENTITY_NOTIFICATION,
    EVENT_ACTION_CREATED,
    EVENT_ACTION_UPDATED,
    Interest,
    MutualMatch,
    Notification,
)
from interest_hub.infrastructure.realtime import (
    PropagationChannel,
    serialize_dataclass,
    serialize_interest,
    serialize_notification,
)
from interest_hub.infrastructure.repositories import CounterRepository

logger = logging.getLogger(__name__)

ACTIVITY_INTEREST_SENT = "interest_sent"
ACTIVITY_INTEREST_RECEIVED = "interest_received"
ACTIVITY_INTEREST_ACCEPTED = "interest_accepted"
ACTIVITY_INTEREST_DECLINED = "interest_declined"
ACTIVITY_INTEREST_WITHDRAWN = "interest_withdrawn"
ACTIVITY_INTEREST_EXPIRED = "interest_expired"
ACTIVITY_MUTUAL_MATCH = "mutual_match"


def publish_interest_change(
    channel: PropagationChannel,
    interest: Interest,
    *,
    action: str = EVENT_ACTION_UPDATED,
    timestamp: datetime | None = None,
) -> None:
    channel.publish(
        [interest.sender_id, interest.receiver_id],
        entity=ENTITY_INTEREST,
        entity_id=interest.id,
        action=action,
        payload=serialize_interest(interest),
        timestamp=timestamp,
    )


def publish_notification_change(
    channel: PropagationChannel,
    notification: Notification,
    *,
    action: str = EVENT_ACTION_CREATED,
    timestamp: datetime | None = None,
) -> None:
    channel.publish(
        [notification.user_id],
        entity=ENTITY_NOTIFICATION,
        entity_id=notification.id,
        action=action,
        payload=serialize_notification(notification),
        timestamp=timestamp or notification.created_at,
    )


def publish_match_created(channel: PropagationChannel, match: MutualMatch) -> None:
    channel.publish(
        [match.user_a_id, match.user_b_id],
        entity=ENTITY_MATCH,
        entity_id=f"{match.user_a_id}:{match.user_b_id}",
        action=EVENT_ACTION_CREATED,
        payload=serialize_dataclass(match),
        timestamp=match.matched_at,
    )


def record_interest_activity(
    channel: PropagationChannel,
    interest: Interest,
    *,
    activities: Mapping[str, str],
    timestamp: datetime | None = None,
    extra: Mapping[str, Any] | None = None,
) -> None:
    """Add one feed entry per ``{user_id: activity_type}`` pair."""

    for user_id, activity_type in activities.items():
        data = {
            "interest_id": interest.id,
            "other_user_id": interest.counterpart_of(user_id),
            "interest_type": interest.type,
            "interest_status": interest.status,
        }
        data.update(extra or {})
        channel.record_activity(user_id, activity_type, data, timestamp=timestamp)


def publish_counter_snapshots(
    session: Session,
    channel: PropagationChannel,
    user_ids: Iterable[str],
    *,
    timestamp: datetime | None = None,
) -> None:
    """Publish the current counter row of every user; store failures only log."""

    repository = CounterRepository(session)
    for user_id in dict.fromkeys(user_ids):
        try:
            counters = repository.get(user_id)
        except SQLAlchemyError as exc:
            session.rollback()
            logger.warning("Counter snapshot for user %s not published: %s", user_id, exc)
            continue
        channel.publish_counters(counters, timestamp=timestamp)


def relay_match_suggestion(
    channel: PropagationChannel, suggestion: Mapping[str, Any]
) -> None:
    """Forward an externally generated match suggestion unchanged."""

    channel.relay_match_suggestion(suggestion)


__all__ = [
    "ACTIVITY_INTEREST_ACCEPTED",
    "ACTIVITY_INTEREST_DECLINED",
    "ACTIVITY_INTEREST_EXPIRED",
    "ACTIVITY_INTEREST_RECEIVED",
    "ACTIVITY_INTEREST_SENT",
    "ACTIVITY_INTEREST_WITHDRAWN",
    "ACTIVITY_MUTUAL_MATCH",
    "publish_counter_snapshots",
    "publish_interest_change",
    "publish_match_created",
    "publish_notification_change",
    "record_interest_activity",
    "relay_match_suggestion",
]
