from .interest import (
    InterestCreate,
    InterestRead,
    InterestRespond,
    InterestSummaryRead,
    InterestWorkflowRead,
    MutualInterestRead,
    MutualMatchRead,
    NotificationTotalsRead,
    StatusBreakdownRead,
    UserInterestStatsRead,
)
from .notification import (
    NotificationMarkAllReadResponse,
    NotificationRead,
    NotificationStatsRead,
)
from .realtime import (
    ActivityFeedEntryRead,
    MatchSuggestionRelayResponse,
    StateChangeEventRead,
)

__all__ = [
    "ActivityFeedEntryRead",
    "InterestCreate",
    "InterestRead",
    "InterestRespond",
    "InterestSummaryRead",
    "InterestWorkflowRead",
    "MatchSuggestionRelayResponse",
    "MutualInterestRead",
    "MutualMatchRead",
    "NotificationMarkAllReadResponse",
    "NotificationRead",
    "NotificationStatsRead",
    "NotificationTotalsRead",
    "StateChangeEventRead",
    "StatusBreakdownRead",
    "UserInterestStatsRead",
]
