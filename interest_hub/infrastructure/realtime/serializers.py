"""JSON-friendly representations of the entities sent over the channel."""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Any

from interest_hub.domain.entities import (
    ActivityFeedEntry,
    Interest,
    MutualMatch,
    Notification,
    StateChangeEvent,
    UserCounters,
)
from interest_hub.utils import iso_or_none


def serialize_interest(interest: Interest) -> dict[str, Any]:
    return {
        "id": interest.id,
        "sender_id": interest.sender_id,
        "receiver_id": interest.receiver_id,
        "status": interest.status,
        "type": interest.type,
        "message": interest.message,
        "sent_at": iso_or_none(interest.sent_at),
        "expires_at": iso_or_none(interest.expires_at),
        "responded_at": iso_or_none(interest.responded_at),
        "withdrawn_at": iso_or_none(interest.withdrawn_at),
        "is_read": interest.is_read,
        "ai_match_score": interest.ai_match_score,
        "common_interests": list(interest.common_interests),
    }


def serialize_notification(notification: Notification) -> dict[str, Any]:
    return {
        "id": notification.id,
        "user_id": notification.user_id,
        "type": notification.type,
        "title": notification.title,
        "message": notification.message,
        "priority": notification.priority,
        "is_read": notification.is_read,
        "related_user_id": notification.related_user_id,
        "action_url": notification.action_url,
        "metadata": notification.metadata or {},
        "created_at": iso_or_none(notification.created_at),
        "read_at": iso_or_none(notification.read_at),
        "expires_at": iso_or_none(notification.expires_at),
    }


def serialize_event(event: StateChangeEvent) -> dict[str, Any]:
    return {
        "entity": event.entity,
        "entity_id": event.entity_id,
        "action": event.action,
        "payload": event.payload,
        "timestamp": event.timestamp.isoformat(),
    }


def serialize_dataclass(value: UserCounters | MutualMatch | ActivityFeedEntry) -> dict[str, Any]:
    """Return a JSON-serializable representation of ``value``."""

    payload = asdict(value)
    _normalize_datetime_values(payload)
    return payload


def _normalize_datetime_values(data: dict[str, Any] | list[Any]) -> None:
    """Convert ``datetime`` instances nested inside ``data`` into ISO strings."""

    if isinstance(data, dict):
        for key, value in data.items():
            if isinstance(value, datetime):
                data[key] = value.isoformat()
            elif isinstance(value, (dict, list)):
                _normalize_datetime_values(value)
    elif isinstance(data, list):
        for index, item in enumerate(data):
            if isinstance(item, datetime):
                data[index] = item.isoformat()
            elif isinstance(item, (dict, list)):
                _normalize_datetime_values(item)


__all__ = [
    "serialize_dataclass",
    "serialize_event",
    "serialize_interest",
    "serialize_notification",
]
