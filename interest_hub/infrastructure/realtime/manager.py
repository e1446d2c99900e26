"""Connection management helpers for realtime websockets."""

from __future__ import annotations

import asyncio
from collections import defaultdict
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, DefaultDict, Protocol, Set


class Subscriber(Protocol):
    """Anything able to receive a JSON message, typically a ``WebSocket``."""

    async def send_json(self, message: Any) -> None:
        ...


class TopicConnectionManager:
    """Manage live subscribers grouped by user topic.

    Topic locks live only while someone holds or awaits them, or while the
    topic has subscribers; idle ones are dropped so the map does not grow
    with every user ever published to.
    """

    def __init__(self) -> None:
        self._connections: DefaultDict[str, Set[Subscriber]] = defaultdict(set)
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    def subscribe(self, user_id: str, subscriber: Subscriber) -> None:
        self._connections[user_id].add(subscriber)

    def disconnect(self, user_id: str, subscriber: Subscriber) -> None:
        """Remove ``subscriber`` from the pool for ``user_id``."""

        connections = self._connections.get(user_id)
        if connections is None:
            return
        connections.discard(subscriber)
        if not connections:
            self._connections.pop(user_id, None)
            self._discard_idle_lock(user_id)

    def has_subscribers(self, user_id: str) -> bool:
        return bool(self._connections.get(user_id))

    def subscribers(self, user_id: str) -> list[Subscriber]:
        return list(self._connections.get(user_id, set()))

    def is_subscribed(self, user_id: str, subscriber: Subscriber) -> bool:
        return subscriber in self._connections.get(user_id, set())

    @asynccontextmanager
    async def topic_lock(self, user_id: str) -> AsyncIterator[None]:
        """Hold the lock serializing deliveries on ``user_id``'s topic."""

        lock = self._locks.get(user_id)
        if lock is None:
            lock = self._locks[user_id] = asyncio.Lock()
        self._lock_users[user_id] = self._lock_users.get(user_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            remaining = self._lock_users[user_id] - 1
            if remaining:
                self._lock_users[user_id] = remaining
            else:
                self._lock_users.pop(user_id, None)
            self._discard_idle_lock(user_id)

    def tracked_locks(self) -> int:
        return len(self._locks)

    def _discard_idle_lock(self, user_id: str) -> None:
        if self._lock_users.get(user_id) or self.has_subscribers(user_id):
            return
        self._locks.pop(user_id, None)


__all__ = ["Subscriber", "TopicConnectionManager"]
