"""Persistence helpers for interest entities."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import func
from sqlalchemy.orm import Session

from interest_hub.domain.entities import (
    ACTIVE_INTEREST_STATUSES,
    INTEREST_STATUS_ACCEPTED,
    INTEREST_STATUS_PENDING,
    Interest,
    active_interest_key,
)
from interest_hub.infrastructure.models import InterestModel
from interest_hub.utils import ensure_app_naive_datetime, ensure_app_timezone

DIRECTION_SENT = "sent"
DIRECTION_RECEIVED = "received"


class InterestRepository:
    """Provide storage operations for :class:`Interest` objects.

    Writes only flush; the calling use case owns the transaction boundary.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, interest_id: str) -> Interest | None:
        model = self.session.get(InterestModel, interest_id, populate_existing=True)
        return self._to_entity(model) if model else None

    def find_active(self, sender_id: str, receiver_id: str) -> Interest | None:
        model = (
            self.session.query(InterestModel)
            .filter(InterestModel.active_key == active_interest_key(sender_id, receiver_id))
            .first()
        )
        return self._to_entity(model) if model else None

    def find_accepted(self, sender_id: str, receiver_id: str) -> Interest | None:
        model = (
            self.session.query(InterestModel)
            .filter(InterestModel.sender_id == sender_id)
            .filter(InterestModel.receiver_id == receiver_id)
            .filter(InterestModel.status == INTEREST_STATUS_ACCEPTED)
            .first()
        )
        return self._to_entity(model) if model else None

    def add(self, interest: Interest) -> Interest:
        """Stage ``interest`` for insertion.

        The unique ``active_key`` column raises ``IntegrityError`` on flush when
        another pending/accepted interest exists for the same ordered pair.
        """

        model = InterestModel(id=interest.id or str(uuid4()))
        self._apply_entity_to_model(model, interest)
        self.session.add(model)
        self.session.flush()
        return self._to_entity(model)

    def transition(
        self,
        interest_id: str,
        *,
        expected_status: str,
        new_status: str,
        values: dict[str, Any] | None = None,
        only_if_unread: bool = False,
    ) -> bool:
        """Compare-and-swap the status of ``interest_id``.

        Returns ``False`` without writing when the stored status no longer
        matches ``expected_status``. With ``only_if_unread`` the swap also
        requires ``is_read`` to still be false, which lets the caller decrement
        unread counters exactly once.
        """

        changes: dict[Any, Any] = {InterestModel.status: new_status}
        if new_status not in ACTIVE_INTEREST_STATUSES:
            changes[InterestModel.active_key] = None
        for key, value in (values or {}).items():
            if isinstance(value, datetime):
                value = ensure_app_naive_datetime(value)
            changes[getattr(InterestModel, key)] = value
        query = (
            self.session.query(InterestModel)
            .filter(InterestModel.id == interest_id)
            .filter(InterestModel.status == expected_status)
        )
        if only_if_unread:
            query = query.filter(InterestModel.is_read.is_(False))
        updated = query.update(changes, synchronize_session="fetch")
        return updated == 1

    def mark_read(self, interest_id: str) -> bool:
        """Flag ``interest_id`` as read; ``False`` when it already was."""

        updated = (
            self.session.query(InterestModel)
            .filter(InterestModel.id == interest_id)
            .filter(InterestModel.is_read.is_(False))
            .update({InterestModel.is_read: True}, synchronize_session="fetch")
        )
        return updated == 1

    def list_by_user(
        self,
        user_id: str,
        direction: str,
        *,
        statuses: Iterable[str] | None = None,
        types: Iterable[str] | None = None,
        sent_from: datetime | None = None,
        sent_to: datetime | None = None,
        limit: int | None = 50,
        offset: int = 0,
    ) -> Sequence[Interest]:
        query = self.session.query(InterestModel).filter(
            self._direction_column(direction) == user_id
        )
        status_list = list(statuses or [])
        if status_list:
            query = query.filter(InterestModel.status.in_(status_list))
        type_list = list(types or [])
        if type_list:
            query = query.filter(InterestModel.type.in_(type_list))
        if sent_from is not None:
            query = query.filter(InterestModel.sent_at >= ensure_app_naive_datetime(sent_from))
        if sent_to is not None:
            query = query.filter(InterestModel.sent_at <= ensure_app_naive_datetime(sent_to))
        query = query.order_by(InterestModel.sent_at.desc(), InterestModel.id.desc())
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def list_overdue_pending(self, now: datetime, *, limit: int = 100) -> Sequence[Interest]:
        query = (
            self.session.query(InterestModel)
            .filter(InterestModel.status == INTEREST_STATUS_PENDING)
            .filter(InterestModel.expires_at < ensure_app_naive_datetime(now))
            .order_by(InterestModel.expires_at.asc())
            .limit(limit)
        )
        return [self._to_entity(model) for model in query.all()]

    def status_breakdown(self, user_id: str, direction: str) -> dict[str, int]:
        rows = (
            self.session.query(InterestModel.status, func.count(InterestModel.id))
            .filter(self._direction_column(direction) == user_id)
            .group_by(InterestModel.status)
            .all()
        )
        return {status: int(count) for status, count in rows}

    def count_unread_received(self, user_id: str) -> int:
        return (
            self.session.query(func.count(InterestModel.id))
            .filter(InterestModel.receiver_id == user_id)
            .filter(InterestModel.is_read.is_(False))
            .scalar()
            or 0
        )

    @staticmethod
    def _direction_column(direction: str):
        if direction == DIRECTION_SENT:
            return InterestModel.sender_id
        if direction == DIRECTION_RECEIVED:
            return InterestModel.receiver_id
        raise ValueError(f"Unknown interest direction '{direction}'")

    @staticmethod
    def _apply_entity_to_model(model: InterestModel, interest: Interest) -> None:
        model.sender_id = interest.sender_id
        model.receiver_id = interest.receiver_id
        model.status = interest.status
        model.active_key = (
            active_interest_key(interest.sender_id, interest.receiver_id)
            if interest.status in ACTIVE_INTEREST_STATUSES
            else None
        )
        model.type = interest.type
        model.message = interest.message
        model.sent_at = ensure_app_naive_datetime(interest.sent_at)
        model.expires_at = ensure_app_naive_datetime(interest.expires_at)
        model.responded_at = ensure_app_naive_datetime(interest.responded_at)
        model.withdrawn_at = ensure_app_naive_datetime(interest.withdrawn_at)
        model.is_read = interest.is_read
        model.ai_match_score = interest.ai_match_score
        model.common_interests = list(interest.common_interests or [])

    @staticmethod
    def _to_entity(model: InterestModel) -> Interest:
        return Interest(
            id=model.id,
            sender_id=model.sender_id,
            receiver_id=model.receiver_id,
            status=model.status,
            type=model.type,
            message=model.message,
            sent_at=ensure_app_timezone(model.sent_at),
            expires_at=ensure_app_timezone(model.expires_at),
            responded_at=ensure_app_timezone(model.responded_at),
            withdrawn_at=ensure_app_timezone(model.withdrawn_at),
            is_read=bool(model.is_read),
            ai_match_score=model.ai_match_score,
            common_interests=list(model.common_interests or []),
        )


__all__ = ["DIRECTION_RECEIVED", "DIRECTION_SENT", "InterestRepository"]
