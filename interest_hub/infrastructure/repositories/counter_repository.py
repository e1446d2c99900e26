"""Persistence helpers for per-user counters and daily quotas."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from sqlalchemy import case
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from interest_hub.domain.entities import UserCounters
from interest_hub.infrastructure.models import DailyQuotaModel, UserCountersModel

_COUNTER_FIELDS: tuple[str, ...] = (
    "sent_count",
    "received_count",
    "unread_count",
    "mutual_count",
    "notification_count",
    "unread_notification_count",
)


class CounterRepository:
    """Apply incremental updates to :class:`UserCounters` projection rows.

    Increments are expressed as ``column = column + delta`` so concurrent
    writers never overwrite each other's updates.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def ensure_rows(self, user_ids: Iterable[str]) -> None:
        """Create missing counter rows in a short transaction of their own."""

        for user_id in dict.fromkeys(user_ids):
            if self.session.get(UserCountersModel, user_id) is not None:
                continue
            self.session.add(UserCountersModel(user_id=user_id, **{name: 0 for name in _COUNTER_FIELDS}))
            try:
                self.session.commit()
            except IntegrityError:
                # Created concurrently by another writer.
                self.session.rollback()

    def get(self, user_id: str) -> UserCounters:
        model = self.session.get(UserCountersModel, user_id, populate_existing=True)
        if model is None:
            return UserCounters(user_id=user_id)
        return self._to_entity(model)

    def increment(self, user_id: str, **deltas: int) -> None:
        changes = {}
        for name, delta in deltas.items():
            if name not in _COUNTER_FIELDS:
                raise ValueError(f"Unknown counter '{name}'")
            if delta:
                column = getattr(UserCountersModel, name)
                changes[column] = column + delta
        if not changes:
            return
        updated = (
            self.session.query(UserCountersModel)
            .filter(UserCountersModel.user_id == user_id)
            .update(changes, synchronize_session="fetch")
        )
        if updated != 1:
            raise LookupError(f"Counter row for user {user_id} is missing")

    def decrement_floor(self, user_id: str, name: str, amount: int = 1) -> None:
        """Decrease ``name`` by ``amount`` without going below zero."""

        if name not in _COUNTER_FIELDS:
            raise ValueError(f"Unknown counter '{name}'")
        column = getattr(UserCountersModel, name)
        (
            self.session.query(UserCountersModel)
            .filter(UserCountersModel.user_id == user_id)
            .update(
                {column: case((column >= amount, column - amount), else_=0)},
                synchronize_session="fetch",
            )
        )

    def replace(self, counters: UserCounters) -> UserCounters:
        model = self.session.get(UserCountersModel, counters.user_id)
        if model is None:
            model = UserCountersModel(user_id=counters.user_id)
            self.session.add(model)
        for name in _COUNTER_FIELDS:
            setattr(model, name, getattr(counters, name))
        self.session.flush()
        return self._to_entity(model)

    @staticmethod
    def _to_entity(model: UserCountersModel) -> UserCounters:
        return UserCounters(
            user_id=model.user_id,
            **{name: int(getattr(model, name) or 0) for name in _COUNTER_FIELDS},
        )


class DailyQuotaRepository:
    """Atomic per-(sender, day) counters gating interest creation."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def ensure_row(self, sender_id: str, day: date) -> None:
        if self.session.get(DailyQuotaModel, (sender_id, day)) is not None:
            return
        self.session.add(DailyQuotaModel(sender_id=sender_id, day=day, count=0))
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()

    def try_consume(self, sender_id: str, day: date, *, limit: int) -> bool:
        """Increment the quota unless it already reached ``limit``.

        The conditional update runs inside the caller's transaction, so a later
        rollback also returns the slot.
        """

        updated = (
            self.session.query(DailyQuotaModel)
            .filter(DailyQuotaModel.sender_id == sender_id)
            .filter(DailyQuotaModel.day == day)
            .filter(DailyQuotaModel.count < limit)
            .update({DailyQuotaModel.count: DailyQuotaModel.count + 1}, synchronize_session="fetch")
        )
        return updated == 1

    def used(self, sender_id: str, day: date) -> int:
        model = self.session.get(DailyQuotaModel, (sender_id, day), populate_existing=True)
        return int(model.count) if model else 0


__all__ = ["CounterRepository", "DailyQuotaRepository"]
