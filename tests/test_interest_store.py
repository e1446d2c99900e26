"""Tests for the interest lifecycle workflows."""

from __future__ import annotations

import threading
from datetime import timedelta

import pytest

from interest_hub.application.use_cases.interests import (
    get_interest,
    get_interests_by_user,
    mark_interest_as_read,
    respond_to_interest,
    send_interest,
    withdraw_interest,
)
from interest_hub.domain.entities import User
from interest_hub.domain.errors import (
    AlreadyExistsError,
    AlreadyRespondedError,
    DailyLimitExceededError,
    ExpiredError,
    InvalidTargetError,
    NotFoundError,
    NotPendingError,
    ValidationError,
)
from interest_hub.infrastructure.database import build_session_factory
from interest_hub.infrastructure.repositories import (
    CounterRepository,
    DailyQuotaRepository,
    InterestRepository,
    NotificationRepository,
    UserRepository,
)

from conftest import START, run_concurrently, seed_users


def _send(session, clock, channel, settings, sender_id, receiver_id, **kwargs):
    return send_interest(
        session,
        sender_id=sender_id,
        receiver_id=receiver_id,
        clock=clock,
        channel=channel,
        settings=settings,
        **kwargs,
    )


def _respond(session, clock, channel, settings, interest_id, response, **kwargs):
    return respond_to_interest(
        session,
        interest_id=interest_id,
        response=response,
        clock=clock,
        channel=channel,
        settings=settings,
        **kwargs,
    )


def test_send_interest_creates_pending_interest(session, users, clock, channel, settings):
    result = _send(session, clock, channel, settings, "alice", "bob", message="Hello Bob")

    interest = result.interest
    assert interest.status == "pending"
    assert interest.type == "proposal"
    assert interest.message == "Hello Bob"
    assert interest.sent_at == START
    assert interest.expires_at == START + timedelta(days=30)
    assert interest.is_read is False
    assert result.warnings == []

    counters = CounterRepository(session)
    assert counters.get("alice").sent_count == 1
    bob = counters.get("bob")
    assert (bob.received_count, bob.unread_count, bob.notification_count) == (1, 1, 1)

    [notification] = NotificationRepository(session).list_for_user("bob")
    assert notification.type == "new_interest"
    assert notification.title == "New Interest Received"
    assert notification.priority == "high"
    assert notification.related_user_id == "alice"
    assert "Alice" in notification.message
    assert notification.metadata["interest_id"] == interest.id
    assert result.notifications == [notification]


def test_send_interest_to_self_is_rejected(session, users, clock, channel, settings):
    with pytest.raises(InvalidTargetError) as excinfo:
        _send(session, clock, channel, settings, "alice", "alice")

    assert excinfo.value.step == "validation"
    assert CounterRepository(session).get("alice").sent_count == 0


@pytest.mark.parametrize("receiver_id", ["nobody", "erin"])
def test_send_interest_requires_existing_active_receiver(
    session, users, clock, channel, settings, receiver_id
):
    with pytest.raises(InvalidTargetError) as excinfo:
        _send(session, clock, channel, settings, "alice", receiver_id)

    assert isinstance(excinfo.value, ValidationError)
    assert excinfo.value.step == "validation"


def test_send_interest_rejects_unknown_type(session, users, clock, channel, settings):
    with pytest.raises(ValidationError):
        _send(session, clock, channel, settings, "alice", "bob", interest_type="wink")


def test_duplicate_active_interest_is_rejected(session, users, clock, channel, settings):
    _send(session, clock, channel, settings, "alice", "bob")

    with pytest.raises(AlreadyExistsError) as excinfo:
        _send(session, clock, channel, settings, "alice", "bob")

    assert excinfo.value.step == "interest_creation"
    assert CounterRepository(session).get("alice").sent_count == 1
    assert CounterRepository(session).get("bob").received_count == 1
    # The rejected attempt did not use a quota slot.
    assert DailyQuotaRepository(session).used("alice", START.date()) == 1


def test_reverse_direction_is_a_separate_interest(session, users, clock, channel, settings):
    _send(session, clock, channel, settings, "alice", "bob")
    result = _send(session, clock, channel, settings, "bob", "alice")

    assert result.interest.sender_id == "bob"


def test_declined_interest_can_be_sent_again(session, users, clock, channel, settings):
    first = _send(session, clock, channel, settings, "alice", "bob")
    _respond(session, clock, channel, settings, first.interest.id, "declined")

    second = _send(session, clock, channel, settings, "alice", "bob")

    assert second.interest.id != first.interest.id
    assert second.interest.status == "pending"


def test_accepted_interest_blocks_a_new_one(session, users, clock, channel, settings):
    first = _send(session, clock, channel, settings, "alice", "bob")
    _respond(session, clock, channel, settings, first.interest.id, "accepted")

    with pytest.raises(AlreadyExistsError):
        _send(session, clock, channel, settings, "alice", "bob")


def test_daily_limit_is_enforced_per_local_day(session, users, clock, channel, settings):
    repository = UserRepository(session)
    for index in range(6):
        repository.create(User(id=f"user-{index}", name=f"User {index}"))

    for index in range(5):
        _send(session, clock, channel, settings, "alice", f"user-{index}")

    with pytest.raises(DailyLimitExceededError) as excinfo:
        _send(session, clock, channel, settings, "alice", "user-5")

    assert excinfo.value.step == "interest_creation"
    assert CounterRepository(session).get("alice").sent_count == 5
    assert InterestRepository(session).find_active("alice", "user-5") is None

    clock.set(START.replace(hour=0) + timedelta(days=1))
    result = _send(session, clock, channel, settings, "alice", "user-5")
    assert result.interest.status == "pending"


def test_respond_accepts_and_notifies_sender(session, users, clock, channel, settings):
    sent = _send(session, clock, channel, settings, "alice", "bob")
    clock.advance(hours=2)

    result = _respond(
        session, clock, channel, settings, sent.interest.id, "accepted", responder_id="bob"
    )

    interest = result.interest
    assert interest.status == "accepted"
    assert interest.responded_at == START + timedelta(hours=2)
    assert interest.is_read is True
    assert CounterRepository(session).get("bob").unread_count == 0
    assert result.is_mutual_match is False

    [notification] = NotificationRepository(session).list_for_user("alice")
    assert notification.type == "interest_accepted"
    assert notification.title == "Interest Accepted!"
    assert notification.priority == "medium"


def test_respond_declines_and_notifies_sender(session, users, clock, channel, settings):
    sent = _send(session, clock, channel, settings, "alice", "bob")

    result = _respond(session, clock, channel, settings, sent.interest.id, "declined")

    assert result.interest.status == "declined"
    [notification] = NotificationRepository(session).list_for_user("alice")
    assert notification.type == "interest_declined"
    assert notification.title == "Interest Declined"


def test_respond_validates_input(session, users, clock, channel, settings):
    sent = _send(session, clock, channel, settings, "alice", "bob")

    with pytest.raises(ValidationError):
        _respond(session, clock, channel, settings, sent.interest.id, "maybe")
    with pytest.raises(ValidationError):
        _respond(
            session, clock, channel, settings, sent.interest.id, "accepted", responder_id="carol"
        )
    with pytest.raises(NotFoundError):
        _respond(session, clock, channel, settings, "missing", "accepted")

    assert InterestRepository(session).get(sent.interest.id).status == "pending"


def test_second_response_is_rejected(session, users, clock, channel, settings):
    sent = _send(session, clock, channel, settings, "alice", "bob")
    _respond(session, clock, channel, settings, sent.interest.id, "accepted")

    with pytest.raises(AlreadyRespondedError) as excinfo:
        _respond(session, clock, channel, settings, sent.interest.id, "declined")

    assert excinfo.value.step == "interest_response"
    assert InterestRepository(session).get(sent.interest.id).status == "accepted"


def test_respond_after_deadline_expires_interest(session, users, clock, channel, settings):
    sent = _send(session, clock, channel, settings, "alice", "bob")
    clock.advance(days=30, seconds=1)

    with pytest.raises(ExpiredError):
        _respond(session, clock, channel, settings, sent.interest.id, "accepted")

    stored = InterestRepository(session).get(sent.interest.id)
    assert stored.status == "expired"

    with pytest.raises(ExpiredError):
        _respond(session, clock, channel, settings, sent.interest.id, "accepted")

    # Expiry releases the pair for a new interest.
    again = _send(session, clock, channel, settings, "alice", "bob")
    assert again.interest.status == "pending"


def test_respond_exactly_at_deadline_is_allowed(session, users, clock, channel, settings):
    sent = _send(session, clock, channel, settings, "alice", "bob")
    clock.advance(days=30)

    result = _respond(session, clock, channel, settings, sent.interest.id, "declined")

    assert result.interest.status == "declined"


def test_withdraw_pending_interest(session, users, clock, channel, settings):
    sent = _send(session, clock, channel, settings, "alice", "bob")
    clock.advance(minutes=5)

    result = withdraw_interest(
        session, interest_id=sent.interest.id, sender_id="alice", clock=clock, channel=channel
    )

    assert result.interest.status == "withdrawn"
    assert result.interest.withdrawn_at == START + timedelta(minutes=5)

    with pytest.raises(NotPendingError) as excinfo:
        withdraw_interest(session, interest_id=sent.interest.id, clock=clock, channel=channel)
    assert excinfo.value.step == "interest_withdrawal"

    with pytest.raises(AlreadyRespondedError):
        _respond(session, clock, channel, settings, sent.interest.id, "accepted")


def test_withdraw_rejects_other_users_and_answered_interests(
    session, users, clock, channel, settings
):
    sent = _send(session, clock, channel, settings, "alice", "bob")

    with pytest.raises(ValidationError):
        withdraw_interest(
            session, interest_id=sent.interest.id, sender_id="bob", clock=clock, channel=channel
        )

    _respond(session, clock, channel, settings, sent.interest.id, "accepted")
    with pytest.raises(NotPendingError):
        withdraw_interest(
            session, interest_id=sent.interest.id, sender_id="alice", clock=clock, channel=channel
        )


def test_withdraw_overdue_interest_expires_it(session, users, clock, channel, settings):
    sent = _send(session, clock, channel, settings, "alice", "bob")
    clock.advance(days=31)

    with pytest.raises(NotPendingError):
        withdraw_interest(
            session, interest_id=sent.interest.id, sender_id="alice", clock=clock, channel=channel
        )

    assert InterestRepository(session).get(sent.interest.id).status == "expired"


def test_unread_counter_drops_once_per_interest(session, users, clock, channel, settings):
    first = _send(session, clock, channel, settings, "alice", "bob")
    second = _send(session, clock, channel, settings, "carol", "bob")
    counters = CounterRepository(session)
    assert counters.get("bob").unread_count == 2

    read = mark_interest_as_read(
        session, interest_id=first.interest.id, user_id="bob", clock=clock, channel=channel
    )
    assert read.is_read is True
    mark_interest_as_read(
        session, interest_id=first.interest.id, user_id="bob", clock=clock, channel=channel
    )
    assert counters.get("bob").unread_count == 1

    _respond(session, clock, channel, settings, first.interest.id, "accepted")
    assert counters.get("bob").unread_count == 1

    _respond(session, clock, channel, settings, second.interest.id, "declined")
    assert counters.get("bob").unread_count == 0


def test_only_receiver_can_mark_interest_read(session, users, clock, channel, settings):
    sent = _send(session, clock, channel, settings, "alice", "bob")

    with pytest.raises(NotFoundError):
        mark_interest_as_read(
            session, interest_id=sent.interest.id, user_id="alice", clock=clock, channel=channel
        )


def test_get_interest_is_limited_to_participants(session, users, clock, channel, settings):
    sent = _send(session, clock, channel, settings, "alice", "bob")

    assert get_interest(session, interest_id=sent.interest.id, user_id="bob").id == sent.interest.id
    with pytest.raises(NotFoundError):
        get_interest(session, interest_id=sent.interest.id, user_id="carol")


def test_list_interests_by_direction_and_status(session, users, clock, channel, settings):
    to_bob = _send(session, clock, channel, settings, "alice", "bob", interest_type="favorite")
    clock.advance(minutes=1)
    _send(session, clock, channel, settings, "alice", "carol")
    clock.advance(minutes=1)
    _send(session, clock, channel, settings, "dave", "alice")
    _respond(session, clock, channel, settings, to_bob.interest.id, "declined")

    sent = get_interests_by_user(session, user_id="alice", direction="sent")
    assert [interest.receiver_id for interest in sent] == ["carol", "bob"]

    received = get_interests_by_user(session, user_id="alice", direction="received")
    assert [interest.sender_id for interest in received] == ["dave"]

    declined = get_interests_by_user(
        session, user_id="alice", direction="sent", statuses=["declined"]
    )
    assert [interest.id for interest in declined] == [to_bob.interest.id]

    favorites = get_interests_by_user(
        session, user_id="alice", direction="sent", types=["favorite"]
    )
    assert len(favorites) == 1

    page = get_interests_by_user(session, user_id="alice", direction="sent", limit=1, offset=1)
    assert [interest.receiver_id for interest in page] == ["bob"]

    with pytest.raises(ValidationError):
        get_interests_by_user(session, user_id="alice", direction="both")
    with pytest.raises(ValidationError):
        get_interests_by_user(session, user_id="alice", direction="sent", statuses=["lost"])


def test_concurrent_duplicate_sends_create_one_interest(file_engine, clock, channel, settings):
    factory = build_session_factory(file_engine)
    setup = factory()
    seed_users(setup)
    setup.close()

    barrier = threading.Barrier(4)
    outcomes: list[object] = []
    lock = threading.Lock()

    def worker() -> None:
        db = factory()
        try:
            barrier.wait()
            result = _send(db, clock, channel, settings, "alice", "bob")
            outcome: object = result.interest.id
        except AlreadyExistsError as exc:
            outcome = exc
        finally:
            db.close()
        with lock:
            outcomes.append(outcome)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    created = [outcome for outcome in outcomes if isinstance(outcome, str)]
    assert len(created) == 1
    assert len(outcomes) == 4

    check = factory()
    try:
        counters = CounterRepository(check)
        assert counters.get("alice").sent_count == 1
        assert counters.get("bob").received_count == 1
        assert DailyQuotaRepository(check).used("alice", START.date()) == 1
    finally:
        check.close()


def test_concurrent_sends_respect_the_daily_limit(file_engine, clock, channel, settings):
    factory = build_session_factory(file_engine)
    setup = factory()
    seed_users(setup)
    receivers = [f"member-{index}" for index in range(8)]
    for receiver_id in receivers:
        UserRepository(setup).create(User(id=receiver_id, name=receiver_id.title()))
    setup.close()

    outcomes = run_concurrently(
        factory,
        [
            lambda db, receiver_id=receiver_id: _send(
                db, clock, channel, settings, "alice", receiver_id
            )
            for receiver_id in receivers
        ],
    )

    failures = [outcome for outcome in outcomes if isinstance(outcome, Exception)]
    assert len(outcomes) - len(failures) == settings.interest_daily_limit
    assert all(isinstance(failure, DailyLimitExceededError) for failure in failures)
    assert len(failures) == len(receivers) - settings.interest_daily_limit

    check = factory()
    try:
        assert DailyQuotaRepository(check).used("alice", START.date()) == 5
        assert CounterRepository(check).get("alice").sent_count == 5
        sent = InterestRepository(check).list_by_user("alice", "sent", limit=None)
        assert len(sent) == 5
    finally:
        check.close()


def test_respond_and_withdraw_race_has_one_winner(file_engine, clock, channel, settings):
    factory = build_session_factory(file_engine)
    setup = factory()
    seed_users(setup)
    interest = _send(setup, clock, channel, settings, "alice", "bob").interest
    setup.close()

    accepted, withdrawn = run_concurrently(
        factory,
        [
            lambda db: _respond(db, clock, channel, settings, interest.id, "accepted"),
            lambda db: withdraw_interest(
                db, interest_id=interest.id, sender_id="alice", clock=clock, channel=channel
            ),
        ],
    )

    winners = [outcome for outcome in (accepted, withdrawn) if not isinstance(outcome, Exception)]
    losers = [outcome for outcome in (accepted, withdrawn) if isinstance(outcome, Exception)]
    assert len(winners) == 1
    [loser] = losers
    assert isinstance(loser, (AlreadyRespondedError, NotPendingError))

    check = factory()
    try:
        stored = InterestRepository(check).get(interest.id)
        assert stored.status == winners[0].interest.status
        expected_unread = 0 if stored.status == "accepted" else 1
        assert CounterRepository(check).get("bob").unread_count == expected_unread
    finally:
        check.close()
