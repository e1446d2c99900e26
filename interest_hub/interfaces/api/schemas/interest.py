"""Schemas for interest endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from interest_hub.domain.entities import INTEREST_TYPE_PROPOSAL


class InterestCreate(BaseModel):
    """Payload required to send an interest."""

    model_config = ConfigDict(extra="forbid")

    receiver_id: str = Field(..., min_length=1, max_length=64)
    message: str | None = Field(default=None, max_length=1000)
    type: str = Field(default=INTEREST_TYPE_PROPOSAL, description="proposal, favorite or contact_request")


class InterestRespond(BaseModel):
    model_config = ConfigDict(extra="forbid")

    response: str = Field(..., description="accepted or declined")


class InterestRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    sender_id: str
    receiver_id: str
    status: str
    type: str
    message: str | None = None
    sent_at: datetime
    expires_at: datetime
    responded_at: datetime | None = None
    withdrawn_at: datetime | None = None
    is_read: bool
    ai_match_score: int | None = None
    common_interests: list[str] = Field(default_factory=list)


class MutualMatchRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_a_id: str
    user_b_id: str
    interest_a_id: str
    interest_b_id: str
    matched_at: datetime
    match_score: int | None = None
    common_interests: list[str] = Field(default_factory=list)


class InterestWorkflowRead(BaseModel):
    """Outcome of a state-changing interest operation."""

    interest: InterestRead
    notifications_sent: int = 0
    is_mutual_match: bool = False
    mutual_match: MutualMatchRead | None = None
    warnings: list[str] = Field(default_factory=list)


class MutualInterestRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    interest_id: str
    other_user_id: str
    matched_at: datetime
    contact_shared: bool = False
    ai_match_score: int | None = None


class StatusBreakdownRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total: int
    pending: int
    accepted: int
    declined: int
    withdrawn: int
    expired: int


class NotificationTotalsRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total: int
    unread: int


class InterestSummaryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    sent: StatusBreakdownRead
    received: StatusBreakdownRead
    mutual: int
    notifications: NotificationTotalsRead


class UserInterestStatsRead(BaseModel):
    """Historical analytics for the authenticated user."""

    model_config = ConfigDict(from_attributes=True)

    total_sent: int
    total_received: int
    accepted_sent: int
    accepted_received: int
    pending_sent: int
    pending_received: int
    declined_sent: int
    declined_received: int
    withdrawn_sent: int
    mutual_interests: int
    success_rate: float
    response_rate: float
    average_response_time: float = Field(..., description="Average response time in hours")


__all__ = [
    "InterestCreate",
    "InterestRead",
    "InterestRespond",
    "InterestSummaryRead",
    "InterestWorkflowRead",
    "MutualInterestRead",
    "MutualMatchRead",
    "NotificationTotalsRead",
    "StatusBreakdownRead",
    "UserInterestStatsRead",
]
