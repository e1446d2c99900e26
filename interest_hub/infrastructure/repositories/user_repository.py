"""Persistence layer for directory users."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from interest_hub.domain.entities import User
from interest_hub.infrastructure.models import UserModel


class UserRepository:
    """Read access to the user directory mirror.

    Besides plain lookups it exposes the ``exists``/``is_active`` pair the
    interest workflows use to validate targets.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: str) -> User | None:
        model = self.session.get(UserModel, user_id)
        return self._to_entity(model) if model else None

    def exists(self, user_id: str) -> bool:
        model = self.session.get(UserModel, user_id)
        return model is not None and not model.deleted

    def is_active(self, user_id: str) -> bool:
        model = self.session.get(UserModel, user_id)
        return model is not None and bool(model.is_active) and not model.deleted

    def get_map_by_ids(self, user_ids: Sequence[str]) -> dict[str, User]:
        if not user_ids:
            return {}
        query = self.session.query(UserModel).filter(UserModel.id.in_(set(user_ids)))
        return {model.id: self._to_entity(model) for model in query.all()}

    def create(self, user: User) -> User:
        model = UserModel(
            id=user.id,
            name=user.name,
            is_active=user.is_active,
            deleted=user.deleted,
        )
        if user.created_at is not None:
            model.created_at = user.created_at
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    @staticmethod
    def _to_entity(model: UserModel) -> User:
        return User(
            id=model.id,
            name=model.name,
            is_active=bool(model.is_active),
            deleted=bool(model.deleted),
            created_at=model.created_at,
        )


__all__ = ["UserRepository"]
