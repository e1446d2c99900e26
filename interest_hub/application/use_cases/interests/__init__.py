"""Use cases implementing the interest lifecycle."""

from .expire_interests import (
    DEFAULT_SWEEP_BATCH_SIZE,
    expire_interest,
    expire_overdue_interests,
)
from .get_interests import MAX_PAGE_SIZE, get_interest, get_interests_by_user
from .mark_interest_as_read import mark_interest_as_read
from .respond_to_interest import respond_to_interest
from .results import InterestWorkflowResult
from .send_interest import UserDirectory, send_interest
from .withdraw_interest import withdraw_interest

__all__ = [
    "DEFAULT_SWEEP_BATCH_SIZE",
    "InterestWorkflowResult",
    "MAX_PAGE_SIZE",
    "UserDirectory",
    "expire_interest",
    "expire_overdue_interests",
    "get_interest",
    "get_interests_by_user",
    "mark_interest_as_read",
    "respond_to_interest",
    "send_interest",
    "withdraw_interest",
]
