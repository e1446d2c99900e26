"""Domain entities describing mutual matches."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


def match_pair(first_user_id: str, second_user_id: str) -> tuple[str, str]:
    """Return the unordered pair of user ids in canonical order."""

    return (
        (first_user_id, second_user_id)
        if first_user_id <= second_user_id
        else (second_user_id, first_user_id)
    )


@dataclass
class MutualMatch:
    """Two users holding accepted interests towards each other."""

    user_a_id: str
    user_b_id: str
    interest_a_id: str
    interest_b_id: str
    matched_at: datetime
    match_score: int | None = None
    common_interests: list[str] = field(default_factory=list)

    def other_user(self, user_id: str) -> str:
        return self.user_b_id if user_id == self.user_a_id else self.user_a_id

    def interest_sent_by(self, user_id: str) -> str:
        return self.interest_a_id if user_id == self.user_a_id else self.interest_b_id


@dataclass
class MutualInterest:
    """A mutual match seen from one participant's point of view."""

    interest_id: str
    other_user_id: str
    matched_at: datetime
    contact_shared: bool = False
    ai_match_score: int | None = None


__all__ = ["MutualInterest", "MutualMatch", "match_pair"]
