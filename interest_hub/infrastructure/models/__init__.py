"""ORM models used by the application infrastructure."""

from .counters import DailyQuotaModel, UserCountersModel
from .interest import InterestModel
from .mutual_match import MutualMatchModel
from .notification import NotificationModel
from .user import UserModel

__all__ = [
    "DailyQuotaModel",
    "InterestModel",
    "MutualMatchModel",
    "NotificationModel",
    "UserCountersModel",
    "UserModel",
]
