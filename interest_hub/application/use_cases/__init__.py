"""Aggregate application use cases."""

from .interests import (
    InterestWorkflowResult,
    expire_overdue_interests,
    get_interest,
    get_interests_by_user,
    mark_interest_as_read,
    respond_to_interest,
    send_interest,
    withdraw_interest,
)
from .matches import get_mutual_interests, reconcile_mutual_matches
from .notifications import list_notifications, mark_all_as_read, mark_as_read
from .stats import (
    calculate_interest_stats,
    get_interest_summary,
    get_user_interest_stats,
    rebuild_user_counters,
)

__all__ = [
    "InterestWorkflowResult",
    "calculate_interest_stats",
    "expire_overdue_interests",
    "get_interest",
    "get_interest_summary",
    "get_interests_by_user",
    "get_mutual_interests",
    "get_user_interest_stats",
    "list_notifications",
    "mark_all_as_read",
    "mark_as_read",
    "mark_interest_as_read",
    "rebuild_user_counters",
    "reconcile_mutual_matches",
    "respond_to_interest",
    "send_interest",
    "withdraw_interest",
]
