"""Use cases for reading, acknowledging and removing notifications."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy.orm import Session

from interest_hub.application.use_cases.realtime import (
    publish_counter_snapshots,
    publish_notification_change,
)
from interest_hub.domain.entities import (
    EVENT_ACTION_DELETED,
    EVENT_ACTION_UPDATED,
    Notification,
    NotificationPriority,
    NotificationStats,
    NotificationType,
)
from interest_hub.domain.errors import NotFoundError
from interest_hub.infrastructure.database import translate_store_errors
from interest_hub.infrastructure.realtime import PropagationChannel, get_propagation_channel
from interest_hub.infrastructure.repositories import CounterRepository, NotificationRepository
from interest_hub.utils import Clock, SystemClock

logger = logging.getLogger(__name__)

CLEANUP_BATCH_SIZE = 100


def list_notifications(
    session: Session,
    *,
    user_id: str,
    unread_only: bool = False,
    limit: int = 20,
    offset: int = 0,
    clock: Clock | None = None,
) -> Sequence[Notification]:
    """Return the unexpired notifications of ``user_id`` newest first."""

    clock = clock or SystemClock()
    with translate_store_errors(session, "list notifications"):
        return NotificationRepository(session).list_for_user(
            user_id,
            unread_only=unread_only,
            active_at=clock.now(),
            limit=limit,
            offset=offset,
        )


def mark_as_read(
    session: Session,
    *,
    notification_id: str,
    user_id: str,
    clock: Clock | None = None,
    channel: PropagationChannel | None = None,
) -> Notification:
    """Mark one notification read, decrementing the unread counter once."""

    clock = clock or SystemClock()
    channel = channel or get_propagation_channel()
    repository = NotificationRepository(session)

    with translate_store_errors(session, "mark notification as read"):
        notification = repository.get(notification_id)
        if notification is None or notification.user_id != user_id:
            raise NotFoundError("Notification not found")

        now = clock.now()
        changed = repository.mark_as_read(notification_id, user_id=user_id, read_at=now)
        if not changed:
            session.rollback()
            return notification

        CounterRepository(session).decrement_floor(user_id, "unread_notification_count")
        session.commit()
        updated = repository.get(notification_id)

    publish_notification_change(channel, updated, action=EVENT_ACTION_UPDATED, timestamp=now)
    publish_counter_snapshots(session, channel, [user_id], timestamp=now)
    return updated


def mark_all_as_read(
    session: Session,
    *,
    user_id: str,
    clock: Clock | None = None,
    channel: PropagationChannel | None = None,
) -> int:
    """Mark every unread notification of ``user_id`` read and return how many changed."""

    clock = clock or SystemClock()
    channel = channel or get_propagation_channel()

    with translate_store_errors(session, "mark all notifications as read"):
        now = clock.now()
        changed = NotificationRepository(session).mark_all_as_read(user_id, read_at=now)
        if changed:
            CounterRepository(session).decrement_floor(
                user_id, "unread_notification_count", changed
            )
        session.commit()

    if changed:
        publish_counter_snapshots(session, channel, [user_id], timestamp=now)
    return changed


def delete_notification(
    session: Session,
    *,
    notification_id: str,
    user_id: str,
    clock: Clock | None = None,
    channel: PropagationChannel | None = None,
) -> Notification:
    """Delete a notification owned by ``user_id`` and adjust its counters.

    The row is removed only while its read flag matches the value just read,
    so a concurrent acknowledgement cannot make the unread counter drop twice.
    The flag only ever moves from unread to read, so the loop ends after at
    most one retry.
    """

    clock = clock or SystemClock()
    channel = channel or get_propagation_channel()
    repository = NotificationRepository(session)

    with translate_store_errors(session, "delete notification"):
        while True:
            notification = repository.get(notification_id)
            if notification is None or notification.user_id != user_id:
                session.rollback()
                raise NotFoundError("Notification not found")
            if repository.delete(
                notification_id, user_id=user_id, is_read=notification.is_read
            ):
                break
            session.rollback()

        counters = CounterRepository(session)
        counters.decrement_floor(user_id, "notification_count")
        if not notification.is_read:
            counters.decrement_floor(user_id, "unread_notification_count")
        session.commit()

    now = clock.now()
    publish_notification_change(channel, notification, action=EVENT_ACTION_DELETED, timestamp=now)
    publish_counter_snapshots(session, channel, [user_id], timestamp=now)
    return notification


def get_notification_stats(session: Session, *, user_id: str) -> NotificationStats:
    """Count the stored notifications of ``user_id`` by type and priority."""

    repository = NotificationRepository(session)
    with translate_store_errors(session, "notification stats"):
        total, unread = repository.totals_for_user(user_id)
        by_type = repository.count_by(user_id, "type")
        by_priority = repository.count_by(user_id, "priority")

    return NotificationStats(
        total=total,
        unread=unread,
        by_type={kind.value: by_type.get(kind.value, 0) for kind in NotificationType},
        by_priority={
            level.value: by_priority.get(level.value, 0) for level in NotificationPriority
        },
    )


def cleanup_expired_notifications(
    session: Session,
    *,
    batch_size: int = CLEANUP_BATCH_SIZE,
    clock: Clock | None = None,
    channel: PropagationChannel | None = None,
) -> int:
    """Delete notifications whose ``expires_at`` has passed, one batch per transaction.

    Returns how many rows were removed. Unread and read rows are deleted by
    separate conditional statements so the counters lose exactly what went.
    """

    clock = clock or SystemClock()
    channel = channel or get_propagation_channel()
    repository = NotificationRepository(session)
    counters = CounterRepository(session)
    now = clock.now()
    removed = 0
    touched: list[str] = []

    while True:
        with translate_store_errors(session, "clean up notifications"):
            batch = repository.expired_batch(now, limit=batch_size)
            if not batch:
                session.rollback()
                break
            for user_id, notification_ids in batch.items():
                unread = repository.delete_many(notification_ids, user_id=user_id, is_read=False)
                read = repository.delete_many(notification_ids, user_id=user_id, is_read=True)
                if unread + read:
                    counters.decrement_floor(user_id, "notification_count", unread + read)
                if unread:
                    counters.decrement_floor(user_id, "unread_notification_count", unread)
                removed += unread + read
                touched.append(user_id)
            session.commit()
        logger.info("Removed %s expired notifications so far", removed)

    if touched:
        publish_counter_snapshots(session, channel, touched, timestamp=now)
    return removed


__all__ = [
    "CLEANUP_BATCH_SIZE",
    "cleanup_expired_notifications",
    "delete_notification",
    "get_notification_stats",
    "list_notifications",
    "mark_all_as_read",
    "mark_as_read",
]
