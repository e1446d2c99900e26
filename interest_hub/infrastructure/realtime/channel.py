"""Per-user publish/subscribe channel for committed state changes."""

from __future__ import annotations

import asyncio
import copy
import logging
import threading
from collections import OrderedDict, deque
from datetime import datetime
from functools import lru_cache
from typing import Any, Callable, Deque, Iterable, Mapping, TypeVar

from anyio import from_thread

from interest_hub.config import get_settings
from interest_hub.domain.entities import (
    ENTITY_COUNTERS,
    EVENT_ACTION_UPDATED,
    EVENT_ACTIONS,
    ActivityFeedEntry,
    StateChangeEvent,
    UserCounters,
)
from interest_hub.utils import ensure_app_timezone, now_in_app_timezone

from .manager import Subscriber, TopicConnectionManager
from .serializers import serialize_dataclass, serialize_event

logger = logging.getLogger(__name__)

_Item = TypeVar("_Item")

MESSAGE_STATE_CHANGE = "state_change"
MESSAGE_ACTIVITY = "activity"
MESSAGE_MATCH_SUGGESTION = "match_suggestion"
MESSAGE_REPLAY = "replay"


class PropagationChannel:
    """Fan committed state changes out to each affected user's topic.

    Publishing never blocks the caller: events are appended to the per-user
    history synchronously and delivered to live subscribers on the event loop.
    Deliveries on one topic are serialized so subscribers observe them in
    publish order. A subscriber that keeps failing is dropped after
    ``retry_attempts`` tries; clients reconcile by re-fetching on reconnect.
    Buffers are kept for at most ``max_topics`` users, evicting the one
    written least recently.
    """

    def __init__(
        self,
        manager: TopicConnectionManager | None = None,
        *,
        activity_capacity: int = 100,
        history_capacity: int = 50,
        retry_attempts: int = 3,
        send_timeout: float = 5.0,
        max_topics: int = 10_000,
        clock: Callable[[], datetime] = now_in_app_timezone,
    ) -> None:
        self._manager = manager or TopicConnectionManager()
        self._activity_capacity = activity_capacity
        self._history_capacity = history_capacity
        self._retry_attempts = max(1, retry_attempts)
        self._send_timeout = send_timeout
        self._max_topics = max(1, max_topics)
        self._clock = clock
        self._history: OrderedDict[str, Deque[StateChangeEvent]] = OrderedDict()
        self._activity: OrderedDict[str, Deque[ActivityFeedEntry]] = OrderedDict()
        self._buffers_lock = threading.Lock()
        self._pending: set[asyncio.Task] = set()

    @property
    def manager(self) -> TopicConnectionManager:
        return self._manager

    def publish(
        self,
        user_ids: Iterable[str | None],
        *,
        entity: str,
        entity_id: str,
        action: str,
        payload: Mapping[str, Any],
        timestamp: datetime | None = None,
    ) -> StateChangeEvent:
        """Publish one state change on the topic of every user in ``user_ids``."""

        if action not in EVENT_ACTIONS:
            raise ValueError(f"Unsupported event action '{action}'")

        event = StateChangeEvent(
            entity=entity,
            entity_id=entity_id,
            action=action,
            payload=copy.deepcopy(dict(payload)),
            timestamp=ensure_app_timezone(timestamp) or self._clock(),
        )
        message = {"type": MESSAGE_STATE_CHANGE, "data": serialize_event(event)}
        for user_id in _unique(user_ids):
            with self._buffers_lock:
                self._buffer(self._history, user_id, self._history_capacity).append(event)
            self._schedule_delivery(user_id, message)
        return event

    def publish_counters(self, counters: UserCounters, *, timestamp: datetime | None = None) -> StateChangeEvent:
        return self.publish(
            [counters.user_id],
            entity=ENTITY_COUNTERS,
            entity_id=counters.user_id,
            action=EVENT_ACTION_UPDATED,
            payload=serialize_dataclass(counters),
            timestamp=timestamp,
        )

    def record_activity(
        self,
        user_id: str,
        activity_type: str,
        activity_data: Mapping[str, Any],
        *,
        is_public: bool = False,
        timestamp: datetime | None = None,
    ) -> ActivityFeedEntry:
        """Append an entry to ``user_id``'s live activity feed and push it."""

        entry = ActivityFeedEntry(
            user_id=user_id,
            activity_type=activity_type,
            activity_data=copy.deepcopy(dict(activity_data)),
            timestamp=ensure_app_timezone(timestamp) or self._clock(),
            is_public=is_public,
        )
        with self._buffers_lock:
            self._buffer(self._activity, user_id, self._activity_capacity).append(entry)
        self._schedule_delivery(
            user_id, {"type": MESSAGE_ACTIVITY, "data": serialize_dataclass(entry)}
        )
        return entry

    def relay_match_suggestion(self, suggestion: Mapping[str, Any]) -> None:
        """Forward a suggestion from the recommendation service untouched."""

        user_id = suggestion.get("user_id") or suggestion.get("userId")
        if not user_id:
            raise ValueError("Match suggestion is missing its target user")
        self._schedule_delivery(
            str(user_id), {"type": MESSAGE_MATCH_SUGGESTION, "data": suggestion}
        )

    def recent_events(
        self, user_id: str, *, since: datetime | None = None, limit: int | None = None
    ) -> list[StateChangeEvent]:
        """Return buffered events of ``user_id`` oldest first.

        ``since`` is inclusive so events sharing the cursor's timestamp are
        replayed as well; repeated publishes of one change (same
        ``dedupe_key``) collapse to the latest of them.
        """

        with self._buffers_lock:
            events = list(self._history.get(user_id, ()))
        if since is not None:
            threshold = ensure_app_timezone(since)
            events = _latest_per_key(event for event in events if event.timestamp >= threshold)
        if limit is not None:
            events = events[-limit:]
        return events

    def activity_feed(self, user_id: str, *, limit: int | None = None) -> list[ActivityFeedEntry]:
        """Return the feed newest first."""

        with self._buffers_lock:
            entries = list(self._activity.get(user_id, ()))
        entries.reverse()
        if limit is not None:
            entries = entries[:limit]
        return entries

    async def subscribe(
        self,
        user_id: str,
        subscriber: Subscriber,
        *,
        replay_since: datetime | None = None,
    ) -> int:
        """Register ``subscriber`` and replay backlog from ``replay_since`` onwards.

        Returns the number of replayed events. The replay holds the topic lock,
        so live events published meanwhile are delivered after it.
        """

        async with self._manager.topic_lock(user_id):
            self._manager.subscribe(user_id, subscriber)
            if replay_since is None:
                return 0
            backlog = self.recent_events(user_id, since=replay_since)
            if not backlog:
                return 0
            message = {
                "type": MESSAGE_REPLAY,
                "data": [serialize_event(event) for event in backlog],
            }
            await self._send_with_retry(user_id, subscriber, message)
            return len(backlog)

    def unsubscribe(self, user_id: str, subscriber: Subscriber) -> None:
        self._manager.disconnect(user_id, subscriber)

    async def flush(self) -> None:
        """Wait until every scheduled delivery has finished."""

        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _buffer(
        self, buffers: OrderedDict[str, Deque[_Item]], user_id: str, capacity: int
    ) -> Deque[_Item]:
        # Callers hold _buffers_lock.
        buffer = buffers.get(user_id)
        if buffer is None:
            buffer = buffers[user_id] = deque(maxlen=capacity)
            while len(buffers) > self._max_topics:
                buffers.popitem(last=False)
        else:
            buffers.move_to_end(user_id)
        return buffer

    def _schedule_delivery(self, user_id: str, message: dict[str, Any]) -> None:
        if not self._manager.has_subscribers(user_id):
            return
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            try:
                from_thread.run_sync(self._spawn_delivery, user_id, message)
            except RuntimeError:
                logger.warning(
                    "No event loop available; realtime message for user %s not delivered",
                    user_id,
                )
            return
        self._spawn_delivery(user_id, message)

    def _spawn_delivery(self, user_id: str, message: dict[str, Any]) -> None:
        loop = asyncio.get_running_loop()
        task = loop.create_task(self._deliver(user_id, message))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _deliver(self, user_id: str, message: dict[str, Any]) -> None:
        async with self._manager.topic_lock(user_id):
            for subscriber in self._manager.subscribers(user_id):
                if not self._manager.is_subscribed(user_id, subscriber):
                    continue
                await self._send_with_retry(user_id, subscriber, message)

    async def _send_with_retry(
        self, user_id: str, subscriber: Subscriber, message: dict[str, Any]
    ) -> bool:
        last_error: BaseException | None = None
        for attempt in range(1, self._retry_attempts + 1):
            try:
                await asyncio.wait_for(subscriber.send_json(message), self._send_timeout)
                return True
            except Exception as exc:
                last_error = exc
                logger.debug(
                    "Delivery attempt %s/%s to user %s failed: %s",
                    attempt,
                    self._retry_attempts,
                    user_id,
                    exc,
                )
        logger.error(
            "Dropping realtime message '%s' for user %s after %s attempts: %s",
            message.get("type"),
            user_id,
            self._retry_attempts,
            last_error,
        )
        self._manager.disconnect(user_id, subscriber)
        return False


def _latest_per_key(events: Iterable[StateChangeEvent]) -> list[StateChangeEvent]:
    latest: dict[tuple[str, str, str, str], StateChangeEvent] = {}
    for event in events:
        latest.pop(event.dedupe_key, None)
        latest[event.dedupe_key] = event
    return list(latest.values())


def _unique(user_ids: Iterable[str | None]) -> list[str]:
    unique: list[str] = []
    for user_id in user_ids:
        if user_id and user_id not in unique:
            unique.append(user_id)
    return unique


@lru_cache
def get_propagation_channel() -> PropagationChannel:
    """Return the process-wide channel configured from settings."""

    settings = get_settings()
    return PropagationChannel(
        TopicConnectionManager(),
        activity_capacity=settings.activity_feed_capacity,
        history_capacity=settings.event_history_capacity,
        retry_attempts=settings.publish_retry_attempts,
        send_timeout=settings.operation_timeout_seconds,
        max_topics=settings.realtime_max_topics,
    )


__all__ = [
    "MESSAGE_ACTIVITY",
    "MESSAGE_MATCH_SUGGESTION",
    "MESSAGE_REPLAY",
    "MESSAGE_STATE_CHANGE",
    "PropagationChannel",
    "get_propagation_channel",
]
