"""Domain entities for derived per-user counters and statistics."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class UserCounters:
    """Projection of interest and notification activity for one user."""

    user_id: str
    sent_count: int = 0
    received_count: int = 0
    unread_count: int = 0
    mutual_count: int = 0
    notification_count: int = 0
    unread_notification_count: int = 0


@dataclass(frozen=True)
class InterestStats:
    """Aggregate figures for an arbitrary collection of interests."""

    total: int = 0
    pending: int = 0
    accepted: int = 0
    declined: int = 0
    withdrawn: int = 0
    success_rate: float = 0.0
    response_rate: float = 0.0


@dataclass(frozen=True)
class StatusBreakdown:
    total: int = 0
    pending: int = 0
    accepted: int = 0
    declined: int = 0
    withdrawn: int = 0
    expired: int = 0


@dataclass(frozen=True)
class NotificationTotals:
    total: int = 0
    unread: int = 0


@dataclass(frozen=True)
class InterestSummary:
    """Per-user overview combining status breakdowns and counters."""

    sent: StatusBreakdown = field(default_factory=StatusBreakdown)
    received: StatusBreakdown = field(default_factory=StatusBreakdown)
    mutual: int = 0
    notifications: NotificationTotals = field(default_factory=NotificationTotals)


@dataclass(frozen=True)
class UserInterestStats:
    """Historical analytics for one user's sent and received interests."""

    total_sent: int = 0
    total_received: int = 0
    accepted_sent: int = 0
    accepted_received: int = 0
    pending_sent: int = 0
    pending_received: int = 0
    declined_sent: int = 0
    declined_received: int = 0
    withdrawn_sent: int = 0
    mutual_interests: int = 0
    success_rate: float = 0.0
    response_rate: float = 0.0
    average_response_time: float = 0.0


__all__ = [
    "InterestStats",
    "InterestSummary",
    "NotificationTotals",
    "StatusBreakdown",
    "UserCounters",
    "UserInterestStats",
]
