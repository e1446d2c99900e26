"""Use cases aggregating interest statistics and counters."""

from .calculate_interest_stats import calculate_interest_stats, percentage
from .get_interest_summary import get_interest_summary, get_user_interest_stats
from .rebuild_user_counters import rebuild_user_counters

__all__ = [
    "calculate_interest_stats",
    "get_interest_summary",
    "get_user_interest_stats",
    "percentage",
    "rebuild_user_counters",
]
