"""Utility helpers to generate and dispatch interest notifications."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from interest_hub.application.use_cases.realtime import (
    publish_counter_snapshots,
    publish_notification_change,
)
from interest_hub.config import Settings, get_settings
from interest_hub.domain.entities import (
    INTEREST_STATUS_ACCEPTED,
    Interest,
    MutualMatch,
    Notification,
    NotificationType,
)
from interest_hub.domain.errors import DependencyError
from interest_hub.infrastructure.database import translate_store_errors
from interest_hub.infrastructure.realtime import PropagationChannel, get_propagation_channel
from interest_hub.infrastructure.repositories import (
    CounterRepository,
    NotificationRepository,
    UserRepository,
)
from interest_hub.utils import Clock, SystemClock

from .templates import get_template

logger = logging.getLogger(__name__)

FALLBACK_ACTOR_NAME = "Someone"


@dataclass
class DispatchResult:
    """Outcome of one dispatch; ``warning`` is set when it was abandoned."""

    notification: Notification | None = None
    warning: str | None = None


def _actor_name(session: Session, actor_id: str | None) -> str:
    if not actor_id:
        return FALLBACK_ACTOR_NAME
    try:
        actor = UserRepository(session).get(actor_id)
    except SQLAlchemyError as exc:
        session.rollback()
        logger.warning("Could not resolve name of user %s: %s", actor_id, exc)
        return FALLBACK_ACTOR_NAME
    return actor.name if actor and actor.name else FALLBACK_ACTOR_NAME


def _persist_notification(session: Session, notification: Notification) -> Notification:
    with translate_store_errors(session, "notification dispatch"):
        CounterRepository(session).ensure_rows([notification.user_id])
        saved = NotificationRepository(session).add(notification)
        CounterRepository(session).increment(
            notification.user_id,
            notification_count=1,
            unread_notification_count=1,
        )
        session.commit()
    return saved


def dispatch_notification(
    session: Session,
    *,
    notification_type: NotificationType,
    recipient_id: str,
    actor_id: str | None,
    note: str | None = None,
    metadata: dict[str, Any] | None = None,
    clock: Clock | None = None,
    channel: PropagationChannel | None = None,
    settings: Settings | None = None,
) -> DispatchResult:
    """Persist and publish a notification built from the type's template.

    Runs in its own transaction after the triggering write committed. Store
    outages are retried ``dispatch_retry_attempts`` times; when every attempt
    fails the notification is dropped and a warning is returned instead of an
    exception so the triggering operation still succeeds. The notification
    expires ``notification_expiry_days`` after creation.
    """

    settings = settings or get_settings()
    clock = clock or SystemClock()
    channel = channel or get_propagation_channel()

    template = get_template(notification_type)
    created_at = clock.now()
    notification = Notification(
        id=str(uuid4()),
        user_id=recipient_id,
        type=template.type.value,
        title=template.title,
        message=template.render(actor_name=_actor_name(session, actor_id), note=note),
        priority=template.priority.value,
        is_read=False,
        related_user_id=actor_id,
        action_url=template.action_url,
        metadata=dict(metadata or {}),
        created_at=created_at,
        expires_at=created_at + timedelta(days=settings.notification_expiry_days),
    )

    attempts = settings.dispatch_retry_attempts
    last_error: Exception | None = None
    for attempt in range(1, attempts + 1):
        try:
            saved = _persist_notification(session, notification)
        except DependencyError as exc:
            last_error = exc
            logger.info(
                "Notification %s for user %s failed on attempt %s/%s",
                notification.type,
                recipient_id,
                attempt,
                attempts,
            )
            continue
        except (SQLAlchemyError, LookupError) as exc:
            session.rollback()
            last_error = exc
            break
        else:
            publish_notification_change(channel, saved)
            publish_counter_snapshots(session, channel, [recipient_id], timestamp=saved.created_at)
            return DispatchResult(notification=saved)

    warning = f"Notification '{notification.type}' for user {recipient_id} was not delivered"
    logger.warning("%s: %s", warning, last_error)
    return DispatchResult(warning=warning)


def notify_new_interest(
    session: Session,
    *,
    interest: Interest,
    clock: Clock | None = None,
    channel: PropagationChannel | None = None,
    settings: Settings | None = None,
) -> DispatchResult:
    """Tell the receiver somebody expressed interest in them."""

    return dispatch_notification(
        session,
        notification_type=NotificationType.NEW_INTEREST,
        recipient_id=interest.receiver_id,
        actor_id=interest.sender_id,
        note=interest.message,
        metadata={"interest_id": interest.id, "interest_type": interest.type},
        clock=clock,
        channel=channel,
        settings=settings,
    )


def notify_interest_response(
    session: Session,
    *,
    interest: Interest,
    clock: Clock | None = None,
    channel: PropagationChannel | None = None,
    settings: Settings | None = None,
) -> DispatchResult:
    """Tell the original sender how the receiver answered."""

    notification_type = (
        NotificationType.INTEREST_ACCEPTED
        if interest.status == INTEREST_STATUS_ACCEPTED
        else NotificationType.INTEREST_DECLINED
    )
    return dispatch_notification(
        session,
        notification_type=notification_type,
        recipient_id=interest.sender_id,
        actor_id=interest.receiver_id,
        metadata={"interest_id": interest.id, "response": interest.status},
        clock=clock,
        channel=channel,
        settings=settings,
    )


def notify_mutual_match(
    session: Session,
    *,
    match: MutualMatch,
    clock: Clock | None = None,
    channel: PropagationChannel | None = None,
    settings: Settings | None = None,
) -> list[DispatchResult]:
    """Send the mutual match notification to both participants."""

    results = []
    for user_id in (match.user_a_id, match.user_b_id):
        other_user_id = match.other_user(user_id)
        results.append(
            dispatch_notification(
                session,
                notification_type=NotificationType.MUTUAL_MATCH,
                recipient_id=user_id,
                actor_id=other_user_id,
                metadata={
                    "interest_id": match.interest_sent_by(user_id),
                    "other_user_id": other_user_id,
                    "match_score": match.match_score,
                },
                clock=clock,
                channel=channel,
                settings=settings,
            )
        )
    return results


__all__ = [
    "DispatchResult",
    "dispatch_notification",
    "notify_interest_response",
    "notify_mutual_match",
    "notify_new_interest",
]
