"""Domain entities describing events carried by the realtime channel."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

EVENT_ACTION_CREATED = "created"
EVENT_ACTION_UPDATED = "updated"
EVENT_ACTION_DELETED = "deleted"
EVENT_ACTIONS: frozenset[str] = frozenset(
    {EVENT_ACTION_CREATED, EVENT_ACTION_UPDATED, EVENT_ACTION_DELETED}
)

ENTITY_INTEREST = "interest"
ENTITY_NOTIFICATION = "notification"
ENTITY_COUNTERS = "counters"
ENTITY_MATCH = "mutual_match"


@dataclass(frozen=True)
class StateChangeEvent:
    """A committed state change published on a user's topic."""

    entity: str
    entity_id: str
    action: str
    payload: dict[str, Any]
    timestamp: datetime

    @property
    def dedupe_key(self) -> tuple[str, str, str, str]:
        """Identity of the change; repeated publishes of one change share it."""

        return (self.entity, self.entity_id, self.action, self.timestamp.isoformat())


@dataclass(frozen=True)
class ActivityFeedEntry:
    """Item of a user's live activity feed."""

    user_id: str
    activity_type: str
    activity_data: dict[str, Any]
    timestamp: datetime
    is_public: bool = False


__all__ = [
    "ActivityFeedEntry",
    "ENTITY_COUNTERS",
    "ENTITY_INTEREST",
    "ENTITY_MATCH",
    "ENTITY_NOTIFICATION",
    "EVENT_ACTIONS",
    "EVENT_ACTION_CREATED",
    "EVENT_ACTION_DELETED",
    "EVENT_ACTION_UPDATED",
    "StateChangeEvent",
]
