"""Persistence helpers for mutual match claim markers."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from interest_hub.domain.entities import MutualMatch, match_pair
from interest_hub.infrastructure.models import MutualMatchModel
from interest_hub.utils import ensure_app_naive_datetime, ensure_app_timezone


class MutualMatchRepository:
    """Store one marker per unordered user pair."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, first_user_id: str, second_user_id: str) -> MutualMatch | None:
        user_a_id, user_b_id = match_pair(first_user_id, second_user_id)
        model = self.session.get(MutualMatchModel, (user_a_id, user_b_id))
        return self._to_entity(model) if model else None

    def claim(self, match: MutualMatch) -> bool:
        """Insert the marker for ``match``; ``False`` when the pair was already claimed.

        Must be the first write of its transaction: a lost race rolls the
        session back.
        """

        if self.get(match.user_a_id, match.user_b_id) is not None:
            return False
        model = MutualMatchModel(
            user_a_id=match.user_a_id,
            user_b_id=match.user_b_id,
            interest_a_id=match.interest_a_id,
            interest_b_id=match.interest_b_id,
            matched_at=ensure_app_naive_datetime(match.matched_at),
            match_score=match.match_score,
            common_interests=list(match.common_interests),
        )
        self.session.add(model)
        try:
            self.session.flush()
        except IntegrityError:
            self.session.rollback()
            return False
        return True

    def list_for_user(self, user_id: str) -> Sequence[MutualMatch]:
        query = (
            self.session.query(MutualMatchModel)
            .filter(
                or_(
                    MutualMatchModel.user_a_id == user_id,
                    MutualMatchModel.user_b_id == user_id,
                )
            )
            .order_by(MutualMatchModel.matched_at.desc())
        )
        return [self._to_entity(model) for model in query.all()]

    def count_for_user(self, user_id: str) -> int:
        return (
            self.session.query(MutualMatchModel)
            .filter(
                or_(
                    MutualMatchModel.user_a_id == user_id,
                    MutualMatchModel.user_b_id == user_id,
                )
            )
            .count()
        )

    @staticmethod
    def _to_entity(model: MutualMatchModel) -> MutualMatch:
        return MutualMatch(
            user_a_id=model.user_a_id,
            user_b_id=model.user_b_id,
            interest_a_id=model.interest_a_id,
            interest_b_id=model.interest_b_id,
            matched_at=ensure_app_timezone(model.matched_at),
            match_score=model.match_score,
            common_interests=list(model.common_interests or []),
        )


__all__ = ["MutualMatchRepository"]
