"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    type: str
    title: str
    message: str
    priority: str
    is_read: bool
    related_user_id: str | None = None
    action_url: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    read_at: datetime | None = None
    expires_at: datetime | None = None


class NotificationMarkAllReadResponse(BaseModel):
    updated: int


class NotificationStatsRead(BaseModel):
    """Counts of the caller's notifications by type and priority."""

    model_config = ConfigDict(from_attributes=True)

    total: int
    unread: int
    by_type: dict[str, int]
    by_priority: dict[str, int]


__all__ = ["NotificationMarkAllReadResponse", "NotificationRead", "NotificationStatsRead"]
