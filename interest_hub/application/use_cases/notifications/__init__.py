"""Public helpers for emitting and managing interest notifications."""

from .events import (
    DispatchResult,
    dispatch_notification,
    notify_interest_response,
    notify_mutual_match,
    notify_new_interest,
)
from .manage import (
    CLEANUP_BATCH_SIZE,
    cleanup_expired_notifications,
    delete_notification,
    get_notification_stats,
    list_notifications,
    mark_all_as_read,
    mark_as_read,
)
from .templates import NOTIFICATION_TEMPLATES, NotificationTemplate, get_template

__all__ = [
    "CLEANUP_BATCH_SIZE",
    "DispatchResult",
    "NOTIFICATION_TEMPLATES",
    "NotificationTemplate",
    "cleanup_expired_notifications",
    "delete_notification",
    "dispatch_notification",
    "get_notification_stats",
    "get_template",
    "list_notifications",
    "mark_all_as_read",
    "mark_as_read",
    "notify_interest_response",
    "notify_mutual_match",
    "notify_new_interest",
]
