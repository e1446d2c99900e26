"""Schemas for the realtime activity endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ActivityFeedEntryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    activity_type: str
    activity_data: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime
    is_public: bool = False


class StateChangeEventRead(BaseModel):
    """A committed change as published on the user's topic."""

    model_config = ConfigDict(from_attributes=True)

    entity: str
    entity_id: str
    action: str
    payload: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime


class MatchSuggestionRelayResponse(BaseModel):
    status: str = "relayed"
    user_id: str


__all__ = ["ActivityFeedEntryRead", "MatchSuggestionRelayResponse", "StateChangeEventRead"]
