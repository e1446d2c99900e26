"""Repository implementations for infrastructure layer."""

from .counter_repository import CounterRepository, DailyQuotaRepository
from .interest_repository import DIRECTION_RECEIVED, DIRECTION_SENT, InterestRepository
from .mutual_match_repository import MutualMatchRepository
from .notification_repository import NotificationRepository
from .user_repository import UserRepository

__all__ = [
    "CounterRepository",
    "DIRECTION_RECEIVED",
    "DIRECTION_SENT",
    "DailyQuotaRepository",
    "InterestRepository",
    "MutualMatchRepository",
    "NotificationRepository",
    "UserRepository",
]
