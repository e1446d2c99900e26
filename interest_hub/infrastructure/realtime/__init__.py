"""Realtime propagation helpers for the infrastructure layer."""

from .channel import (
    MESSAGE_ACTIVITY,
    MESSAGE_MATCH_SUGGESTION,
    MESSAGE_REPLAY,
    MESSAGE_STATE_CHANGE,
    PropagationChannel,
    get_propagation_channel,
)
from .manager import Subscriber, TopicConnectionManager
from .serializers import (
    serialize_dataclass,
    serialize_event,
    serialize_interest,
    serialize_notification,
)

__all__ = [
    "MESSAGE_ACTIVITY",
    "MESSAGE_MATCH_SUGGESTION",
    "MESSAGE_REPLAY",
    "MESSAGE_STATE_CHANGE",
    "PropagationChannel",
    "Subscriber",
    "TopicConnectionManager",
    "get_propagation_channel",
    "serialize_dataclass",
    "serialize_event",
    "serialize_interest",
    "serialize_notification",
]
