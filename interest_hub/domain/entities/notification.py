"""Domain entity representing a user notification."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class NotificationType(str, Enum):
    """Notification kinds produced by interest transitions."""

    NEW_INTEREST = "new_interest"
    INTEREST_ACCEPTED = "interest_accepted"
    INTEREST_DECLINED = "interest_declined"
    MUTUAL_MATCH = "mutual_match"


class NotificationPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass
class Notification:
    """Information message delivered to a specific user."""

    id: str | None
    user_id: str
    type: str
    title: str
    message: str
    priority: str = NotificationPriority.MEDIUM.value
    is_read: bool = False
    related_user_id: str | None = None
    action_url: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
    read_at: datetime | None = None
    expires_at: datetime | None = None


@dataclass(frozen=True)
class NotificationStats:
    """Totals of one user's stored notifications, broken down by kind."""

    total: int = 0
    unread: int = 0
    by_type: dict[str, int] = field(default_factory=dict)
    by_priority: dict[str, int] = field(default_factory=dict)


__all__ = ["Notification", "NotificationPriority", "NotificationStats", "NotificationType"]
