"""Domain entity representing an interest sent from one user to another."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

INTEREST_STATUS_PENDING = "pending"
INTEREST_STATUS_ACCEPTED = "accepted"
INTEREST_STATUS_DECLINED = "declined"
INTEREST_STATUS_WITHDRAWN = "withdrawn"
INTEREST_STATUS_EXPIRED = "expired"

INTEREST_STATUSES: tuple[str, ...] = (
    INTEREST_STATUS_PENDING,
    INTEREST_STATUS_ACCEPTED,
    INTEREST_STATUS_DECLINED,
    INTEREST_STATUS_WITHDRAWN,
    INTEREST_STATUS_EXPIRED,
)
ACTIVE_INTEREST_STATUSES: frozenset[str] = frozenset(
    {INTEREST_STATUS_PENDING, INTEREST_STATUS_ACCEPTED}
)
INTEREST_RESPONSES: frozenset[str] = frozenset(
    {INTEREST_STATUS_ACCEPTED, INTEREST_STATUS_DECLINED}
)

INTEREST_TYPE_PROPOSAL = "proposal"
INTEREST_TYPES: tuple[str, ...] = (INTEREST_TYPE_PROPOSAL, "favorite", "contact_request")


def active_interest_key(sender_id: str, receiver_id: str) -> str:
    """Return the uniqueness key held by a pending or accepted interest."""

    return f"{sender_id}->{receiver_id}"


@dataclass
class Interest:
    """A one-directional expression of interest between two users."""

    id: str | None
    sender_id: str
    receiver_id: str
    status: str
    sent_at: datetime
    expires_at: datetime
    type: str = INTEREST_TYPE_PROPOSAL
    message: str | None = None
    responded_at: datetime | None = None
    withdrawn_at: datetime | None = None
    is_read: bool = False
    ai_match_score: int | None = None
    common_interests: list[str] = field(default_factory=list)

    def is_overdue(self, now: datetime) -> bool:
        """Return ``True`` when a pending interest can no longer be answered."""

        return self.status == INTEREST_STATUS_PENDING and now > self.expires_at

    def counterpart_of(self, user_id: str) -> str:
        return self.receiver_id if user_id == self.sender_id else self.sender_id


__all__ = [
    "ACTIVE_INTEREST_STATUSES",
    "INTEREST_RESPONSES",
    "INTEREST_STATUSES",
    "INTEREST_STATUS_ACCEPTED",
    "INTEREST_STATUS_DECLINED",
    "INTEREST_STATUS_EXPIRED",
    "INTEREST_STATUS_PENDING",
    "INTEREST_STATUS_WITHDRAWN",
    "INTEREST_TYPES",
    "INTEREST_TYPE_PROPOSAL",
    "Interest",
    "active_interest_key",
]
