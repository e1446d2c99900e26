"""Tests for the per-user propagation channel."""

from __future__ import annotations

from datetime import timedelta
from functools import partial

import pytest
from anyio import to_thread

from interest_hub.infrastructure.realtime import (
    MESSAGE_ACTIVITY,
    MESSAGE_MATCH_SUGGESTION,
    MESSAGE_REPLAY,
    MESSAGE_STATE_CHANGE,
    PropagationChannel,
)

from conftest import START


class RecordingSubscriber:
    def __init__(self) -> None:
        self.messages: list[dict] = []

    async def send_json(self, message) -> None:
        self.messages.append(message)


class BrokenSubscriber:
    def __init__(self) -> None:
        self.attempts = 0

    async def send_json(self, message) -> None:
        self.attempts += 1
        raise ConnectionError("socket closed")


def _publish(channel: PropagationChannel, user_id: str, entity_id: str, **kwargs):
    return channel.publish(
        [user_id],
        entity="interest",
        entity_id=entity_id,
        action=kwargs.pop("action", "updated"),
        payload=kwargs.pop("payload", {"id": entity_id}),
        **kwargs,
    )


@pytest.mark.anyio
async def test_events_arrive_in_publish_order(channel):
    subscriber = RecordingSubscriber()
    await channel.subscribe("alice", subscriber)

    for index in range(10):
        _publish(channel, "alice", f"interest-{index}")
    await channel.flush()

    assert [m["type"] for m in subscriber.messages] == [MESSAGE_STATE_CHANGE] * 10
    assert [m["data"]["entity_id"] for m in subscriber.messages] == [
        f"interest-{index}" for index in range(10)
    ]


@pytest.mark.anyio
async def test_event_reaches_every_affected_user_once(channel):
    alice, bob = RecordingSubscriber(), RecordingSubscriber()
    await channel.subscribe("alice", alice)
    await channel.subscribe("bob", bob)

    channel.publish(
        ["alice", "bob", "alice", None],
        entity="interest",
        entity_id="interest-1",
        action="created",
        payload={"id": "interest-1"},
    )
    await channel.flush()

    assert len(alice.messages) == 1
    assert len(bob.messages) == 1
    assert len(channel.recent_events("alice")) == 1


@pytest.mark.anyio
async def test_unsubscribed_subscriber_stops_receiving(channel):
    subscriber = RecordingSubscriber()
    await channel.subscribe("alice", subscriber)
    _publish(channel, "alice", "interest-1")
    await channel.flush()

    channel.unsubscribe("alice", subscriber)
    _publish(channel, "alice", "interest-2")
    await channel.flush()

    assert [m["data"]["entity_id"] for m in subscriber.messages] == ["interest-1"]
    assert len(channel.recent_events("alice")) == 2


@pytest.mark.anyio
async def test_failing_subscriber_is_dropped_after_retries(channel):
    broken, healthy = BrokenSubscriber(), RecordingSubscriber()
    await channel.subscribe("alice", broken)
    await channel.subscribe("alice", healthy)

    _publish(channel, "alice", "interest-1")
    await channel.flush()
    _publish(channel, "alice", "interest-2")
    await channel.flush()

    assert broken.attempts == 3
    assert not channel.manager.is_subscribed("alice", broken)
    assert [m["data"]["entity_id"] for m in healthy.messages] == ["interest-1", "interest-2"]


@pytest.mark.anyio
async def test_subscribe_replays_events_after_cursor(channel):
    for index in range(3):
        _publish(channel, "alice", f"interest-{index}", timestamp=START + timedelta(minutes=index))

    subscriber = RecordingSubscriber()
    replayed = await channel.subscribe("alice", subscriber, replay_since=START)

    assert replayed == 3
    [replay] = subscriber.messages
    assert replay["type"] == MESSAGE_REPLAY
    assert [event["entity_id"] for event in replay["data"]] == [
        "interest-0",
        "interest-1",
        "interest-2",
    ]


@pytest.mark.anyio
async def test_replay_keeps_events_sharing_the_cursor_timestamp(channel):
    _publish(channel, "alice", "interest-0", timestamp=START - timedelta(seconds=1))
    _publish(channel, "alice", "interest-1", timestamp=START)
    _publish(channel, "alice", "interest-2", timestamp=START)

    subscriber = RecordingSubscriber()
    replayed = await channel.subscribe("alice", subscriber, replay_since=START)

    assert replayed == 2
    [replay] = subscriber.messages
    assert [event["entity_id"] for event in replay["data"]] == ["interest-1", "interest-2"]


def test_replay_collapses_repeated_publishes_of_one_change(channel):
    _publish(channel, "alice", "interest-1", timestamp=START, payload={"status": "old"})
    _publish(channel, "alice", "interest-2", timestamp=START)
    _publish(channel, "alice", "interest-1", timestamp=START, payload={"status": "new"})

    events = channel.recent_events("alice", since=START)

    assert [event.entity_id for event in events] == ["interest-2", "interest-1"]
    assert events[-1].payload == {"status": "new"}
    assert len(channel.recent_events("alice")) == 3


@pytest.mark.anyio
async def test_suggestion_is_relayed_unmodified(channel):
    subscriber = RecordingSubscriber()
    await channel.subscribe("alice", subscriber)
    suggestion = {
        "user_id": "alice",
        "suggested_user_id": "bob",
        "match_score": 87,
        "common_interests": ["travel"],
        "reason": "Shared hobbies",
        "extra": {"source": "recommender"},
    }

    channel.relay_match_suggestion(suggestion)
    await channel.flush()

    assert subscriber.messages == [{"type": MESSAGE_MATCH_SUGGESTION, "data": suggestion}]
    assert channel.recent_events("alice") == []


@pytest.mark.anyio
async def test_publish_from_worker_thread_is_delivered(channel):
    subscriber = RecordingSubscriber()
    await channel.subscribe("alice", subscriber)

    await to_thread.run_sync(partial(_publish, channel, "alice", "interest-1"))
    await channel.flush()

    assert [m["data"]["entity_id"] for m in subscriber.messages] == ["interest-1"]


@pytest.mark.anyio
async def test_activity_is_pushed_to_subscribers(channel):
    subscriber = RecordingSubscriber()
    await channel.subscribe("bob", subscriber)

    channel.record_activity("bob", "interest_received", {"interest_id": "interest-1"})
    await channel.flush()

    [message] = subscriber.messages
    assert message["type"] == MESSAGE_ACTIVITY
    assert message["data"]["activity_type"] == "interest_received"
    assert message["data"]["timestamp"] == START.isoformat()


@pytest.mark.anyio
async def test_topic_lock_is_dropped_once_nobody_listens(channel):
    subscriber = RecordingSubscriber()
    await channel.subscribe("alice", subscriber)
    _publish(channel, "alice", "interest-1")
    await channel.flush()
    assert channel.manager.tracked_locks() == 1

    channel.unsubscribe("alice", subscriber)

    assert channel.manager.tracked_locks() == 0


@pytest.mark.anyio
async def test_topic_lock_of_dropped_subscriber_is_released(channel):
    broken = BrokenSubscriber()
    await channel.subscribe("alice", broken)

    _publish(channel, "alice", "interest-1")
    await channel.flush()

    assert not channel.manager.has_subscribers("alice")
    assert channel.manager.tracked_locks() == 0


def test_buffers_evict_the_least_recently_written_user(clock):
    channel = PropagationChannel(history_capacity=5, max_topics=2, clock=clock.now)
    _publish(channel, "alice", "interest-1")
    _publish(channel, "bob", "interest-2")
    _publish(channel, "alice", "interest-3")
    _publish(channel, "carol", "interest-4")
    channel.record_activity("alice", "interest_sent", {})
    channel.record_activity("bob", "interest_sent", {})
    channel.record_activity("carol", "interest_sent", {})

    assert channel.recent_events("bob") == []
    assert [event.entity_id for event in channel.recent_events("alice")] == [
        "interest-1",
        "interest-3",
    ]
    assert len(channel.recent_events("carol")) == 1
    assert channel.activity_feed("alice") == []
    assert len(channel.activity_feed("carol")) == 1


def test_history_keeps_the_most_recent_events(channel):
    for index in range(60):
        _publish(channel, "alice", f"interest-{index}")

    events = channel.recent_events("alice")
    assert len(events) == 50
    assert events[0].entity_id == "interest-10"
    assert events[-1].entity_id == "interest-59"
    assert len(channel.recent_events("alice", limit=5)) == 5


def test_activity_feed_is_capped_and_newest_first(channel):
    for index in range(120):
        channel.record_activity("alice", "interest_sent", {"index": index})

    feed = channel.activity_feed("alice")
    assert len(feed) == 100
    assert feed[0].activity_data == {"index": 119}
    assert feed[-1].activity_data == {"index": 20}
    assert len(channel.activity_feed("alice", limit=3)) == 3


def test_published_payload_is_copied(channel):
    payload = {"tags": ["travel"]}
    _publish(channel, "alice", "interest-1", payload=payload)
    payload["tags"].append("music")

    assert channel.recent_events("alice")[0].payload == {"tags": ["travel"]}


def test_publish_without_subscribers_only_records_history(channel):
    event = _publish(channel, "alice", "interest-1", action="created")

    assert event.timestamp == START
    assert channel.recent_events("alice") == [event]
    assert channel.recent_events("bob") == []


def test_publish_rejects_unknown_action(channel):
    with pytest.raises(ValueError):
        _publish(channel, "alice", "interest-1", action="archived")


def test_suggestion_needs_a_target_user(channel):
    with pytest.raises(ValueError):
        channel.relay_match_suggestion({"suggested_user_id": "bob"})
