"""Domain entities exposed by the application."""

from .counters import (
    InterestStats,
    InterestSummary,
    NotificationTotals,
    StatusBreakdown,
    UserCounters,
    UserInterestStats,
)
from .interest import (
    ACTIVE_INTEREST_STATUSES,
    INTEREST_RESPONSES,
    INTEREST_STATUSES,
    INTEREST_STATUS_ACCEPTED,
    INTEREST_STATUS_DECLINED,
    INTEREST_STATUS_EXPIRED,
    INTEREST_STATUS_PENDING,
    INTEREST_STATUS_WITHDRAWN,
    INTEREST_TYPES,
    INTEREST_TYPE_PROPOSAL,
    Interest,
    active_interest_key,
)
from .mutual_match import MutualInterest, MutualMatch, match_pair
from .notification import (
    Notification,
    NotificationPriority,
    NotificationStats,
    NotificationType,
)
from .realtime import (
    ENTITY_COUNTERS,
    ENTITY_INTEREST,
    ENTITY_MATCH,
    ENTITY_NOTIFICATION,
    EVENT_ACTIONS,
    EVENT_ACTION_CREATED,
    EVENT_ACTION_DELETED,
    EVENT_ACTION_UPDATED,
    ActivityFeedEntry,
    StateChangeEvent,
)
from .user import User

__all__ = [
    "ACTIVE_INTEREST_STATUSES",
    "ActivityFeedEntry",
    "ENTITY_COUNTERS",
    "ENTITY_INTEREST",
    "ENTITY_MATCH",
    "ENTITY_NOTIFICATION",
    "EVENT_ACTIONS",
    "EVENT_ACTION_CREATED",
    "EVENT_ACTION_DELETED",
    "EVENT_ACTION_UPDATED",
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
    "InterestStats",
    "InterestSummary",
    "MutualInterest",
    "MutualMatch",
    "Notification",
    "NotificationPriority",
    "NotificationStats",
    "NotificationTotals",
    "NotificationType",
    "StateChangeEvent",
    "StatusBreakdown",
    "User",
    "UserCounters",
    "UserInterestStats",
    "active_interest_key",
    "match_pair",
]
