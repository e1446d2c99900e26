"""Persistence helpers for notification entities."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from uuid import uuid4

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from interest_hub.domain.entities import Notification
from interest_hub.infrastructure.models import NotificationModel
from interest_hub.utils import ensure_app_naive_datetime, ensure_app_timezone


class NotificationRepository:
    """Provide storage operations for :class:`Notification` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, notification_id: str) -> Notification | None:
        model = self.session.get(NotificationModel, notification_id, populate_existing=True)
        return self._to_entity(model) if model else None

    def list_for_user(
        self,
        user_id: str,
        *,
        unread_only: bool = False,
        types: Sequence[str] | None = None,
        active_at: datetime | None = None,
        limit: int | None = 20,
        offset: int = 0,
    ) -> Sequence[Notification]:
        query = self.session.query(NotificationModel)
        query = query.filter(NotificationModel.user_id == user_id)
        if unread_only:
            query = query.filter(NotificationModel.is_read.is_(False))
        if active_at is not None:
            query = query.filter(
                or_(
                    NotificationModel.expires_at.is_(None),
                    NotificationModel.expires_at > ensure_app_naive_datetime(active_at),
                )
            )
        if types:
            query = query.filter(NotificationModel.type.in_(list(types)))
        query = query.order_by(
            NotificationModel.created_at.desc(), NotificationModel.id.desc()
        )
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def list_for_user_and_type(self, user_id: str, notification_type: str) -> Sequence[Notification]:
        return self.list_for_user(user_id, types=[notification_type], limit=None)

    def add(self, notification: Notification) -> Notification:
        model = NotificationModel(id=notification.id or str(uuid4()))
        self._apply_entity_to_model(model, notification)
        self.session.add(model)
        self.session.flush()
        return self._to_entity(model)

    def mark_as_read(self, notification_id: str, *, user_id: str, read_at: datetime) -> bool:
        """Flag one notification owned by ``user_id``; ``False`` if already read."""

        updated = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.id == notification_id)
            .filter(NotificationModel.user_id == user_id)
            .filter(NotificationModel.is_read.is_(False))
            .update(
                {
                    NotificationModel.is_read: True,
                    NotificationModel.read_at: ensure_app_naive_datetime(read_at),
                },
                synchronize_session="fetch",
            )
        )
        return updated == 1

    def mark_all_as_read(self, user_id: str, *, read_at: datetime) -> int:
        return (
            self.session.query(NotificationModel)
            .filter(NotificationModel.user_id == user_id)
            .filter(NotificationModel.is_read.is_(False))
            .update(
                {
                    NotificationModel.is_read: True,
                    NotificationModel.read_at: ensure_app_naive_datetime(read_at),
                },
                synchronize_session="fetch",
            )
        )

    def delete(self, notification_id: str, *, user_id: str, is_read: bool) -> bool:
        """Delete the row only while its read flag still equals ``is_read``."""

        deleted = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.id == notification_id)
            .filter(NotificationModel.user_id == user_id)
            .filter(NotificationModel.is_read.is_(is_read))
            .delete(synchronize_session="fetch")
        )
        return deleted == 1

    def expired_batch(self, now: datetime, *, limit: int) -> dict[str, list[str]]:
        """Return up to ``limit`` ids of rows expired before ``now``, grouped by owner."""

        rows = (
            self.session.query(NotificationModel.id, NotificationModel.user_id)
            .filter(NotificationModel.expires_at.is_not(None))
            .filter(NotificationModel.expires_at < ensure_app_naive_datetime(now))
            .order_by(NotificationModel.expires_at, NotificationModel.id)
            .limit(limit)
            .all()
        )
        grouped: dict[str, list[str]] = {}
        for notification_id, user_id in rows:
            grouped.setdefault(user_id, []).append(notification_id)
        return grouped

    def delete_many(
        self, notification_ids: Sequence[str], *, user_id: str, is_read: bool
    ) -> int:
        return (
            self.session.query(NotificationModel)
            .filter(NotificationModel.id.in_(list(notification_ids)))
            .filter(NotificationModel.user_id == user_id)
            .filter(NotificationModel.is_read.is_(is_read))
            .delete(synchronize_session="fetch")
        )

    def count_by(self, user_id: str, column_name: str) -> dict[str, int]:
        """Count the rows of ``user_id`` grouped by ``type`` or ``priority``."""

        column = getattr(NotificationModel, column_name)
        rows = (
            self.session.query(column, func.count(NotificationModel.id))
            .filter(NotificationModel.user_id == user_id)
            .group_by(column)
            .all()
        )
        return {str(key): int(count) for key, count in rows}

    def totals_for_user(self, user_id: str) -> tuple[int, int]:
        """Return ``(total, unread)`` counted from the notification rows."""

        total, unread = (
            self.session.query(
                func.count(NotificationModel.id),
                func.count(NotificationModel.id).filter(NotificationModel.is_read.is_(False)),
            )
            .filter(NotificationModel.user_id == user_id)
            .one()
        )
        return int(total or 0), int(unread or 0)

    @staticmethod
    def _apply_entity_to_model(model: NotificationModel, notification: Notification) -> None:
        model.user_id = notification.user_id
        model.type = notification.type
        model.title = notification.title
        model.message = notification.message
        model.priority = notification.priority
        model.is_read = notification.is_read
        model.related_user_id = notification.related_user_id
        model.action_url = notification.action_url
        model.payload = notification.metadata or {}
        model.created_at = ensure_app_naive_datetime(notification.created_at)
        model.read_at = ensure_app_naive_datetime(notification.read_at)
        model.expires_at = ensure_app_naive_datetime(notification.expires_at)

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            user_id=model.user_id,
            type=model.type,
            title=model.title,
            message=model.message,
            priority=model.priority,
            is_read=bool(model.is_read),
            related_user_id=model.related_user_id,
            action_url=model.action_url,
            metadata=model.payload or {},
            created_at=ensure_app_timezone(model.created_at),
            read_at=ensure_app_timezone(model.read_at),
            expires_at=ensure_app_timezone(model.expires_at),
        )


__all__ = ["NotificationRepository"]
