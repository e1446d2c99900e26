"""Closed mapping from interest transitions to notification content."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from interest_hub.domain.entities import NotificationPriority, NotificationType

RECIPIENT_RECEIVER = "receiver"
RECIPIENT_SENDER = "sender"
RECIPIENT_BOTH = "both"


@dataclass(frozen=True)
class NotificationTemplate:
    """Static content used to build a notification of one type."""

    type: NotificationType
    recipient: str
    title: str
    message: str
    priority: NotificationPriority
    action_url: str = "/interests"

    def render(self, *, actor_name: str, note: str | None = None) -> str:
        text = self.message.format(actor=actor_name)
        if note:
            text = f'{text}: "{note}"'
        return text


NOTIFICATION_TEMPLATES: Mapping[NotificationType, NotificationTemplate] = MappingProxyType(
    {
        NotificationType.NEW_INTEREST: NotificationTemplate(
            type=NotificationType.NEW_INTEREST,
            recipient=RECIPIENT_RECEIVER,
            title="New Interest Received",
            message="{actor} has expressed interest in your profile",
            priority=NotificationPriority.HIGH,
        ),
        NotificationType.INTEREST_ACCEPTED: NotificationTemplate(
            type=NotificationType.INTEREST_ACCEPTED,
            recipient=RECIPIENT_SENDER,
            title="Interest Accepted!",
            message="{actor} has accepted your interest",
            priority=NotificationPriority.MEDIUM,
        ),
        NotificationType.INTEREST_DECLINED: NotificationTemplate(
            type=NotificationType.INTEREST_DECLINED,
            recipient=RECIPIENT_SENDER,
            title="Interest Declined",
            message="{actor} has declined your interest",
            priority=NotificationPriority.MEDIUM,
        ),
        NotificationType.MUTUAL_MATCH: NotificationTemplate(
            type=NotificationType.MUTUAL_MATCH,
            recipient=RECIPIENT_BOTH,
            title="Mutual Match!",
            message="You and {actor} have both expressed interest in each other",
            priority=NotificationPriority.HIGH,
            action_url="/matches",
        ),
    }
)

_MISSING_TEMPLATES = set(NotificationType) - set(NOTIFICATION_TEMPLATES)
if _MISSING_TEMPLATES:  # pragma: no cover - guarded at import time
    raise RuntimeError(
        "Notification types without template: "
        + ", ".join(sorted(member.value for member in _MISSING_TEMPLATES))
    )


def get_template(notification_type: NotificationType | str) -> NotificationTemplate:
    return NOTIFICATION_TEMPLATES[NotificationType(notification_type)]


__all__ = [
    "NOTIFICATION_TEMPLATES",
    "NotificationTemplate",
    "RECIPIENT_BOTH",
    "RECIPIENT_RECEIVER",
    "RECIPIENT_SENDER",
    "get_template",
]
