"""Shared fixtures: isolated SQLite databases, a frozen clock and seeded users."""

from __future__ import annotations

import os
import threading
from datetime import datetime, timezone
from pathlib import Path
import sys

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("APP_TIMEZONE", "UTC")

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from interest_hub.config import Settings
from interest_hub.domain.entities import User
from interest_hub.domain.errors import InterestHubError
from interest_hub.infrastructure.database import (
    build_engine,
    build_session_factory,
    initialize_database,
)
from interest_hub.infrastructure.realtime import PropagationChannel
from interest_hub.infrastructure.repositories import UserRepository
from interest_hub.utils import FrozenClock

START = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)

USERS = {
    "alice": "Alice",
    "bob": "Bob",
    "carol": "Carol",
    "dave": "Dave",
}


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        database_url="sqlite://",
        app_timezone="UTC",
        interest_daily_limit=5,
        interest_expiry_days=30,
        dispatch_retry_attempts=3,
        publish_retry_attempts=3,
        operation_timeout_seconds=1.0,
        activity_feed_capacity=100,
        event_history_capacity=50,
        realtime_max_topics=10_000,
        notification_expiry_days=30,
    )


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", timeout=1.0)
    initialize_database(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def file_engine(tmp_path):
    """Engine on a file database, for tests that open sessions from several threads."""

    engine = build_engine(f"sqlite:///{tmp_path / 'interest_hub.db'}", timeout=10.0)
    initialize_database(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(START)


@pytest.fixture
def channel(clock) -> PropagationChannel:
    return PropagationChannel(
        activity_capacity=100,
        history_capacity=50,
        retry_attempts=3,
        send_timeout=1.0,
        clock=clock.now,
    )


def seed_users(session, *, inactive: tuple[str, ...] = ("erin",)) -> None:
    repository = UserRepository(session)
    for user_id, name in USERS.items():
        repository.create(User(id=user_id, name=name))
    for user_id in inactive:
        repository.create(User(id=user_id, name=user_id.title(), is_active=False))


@pytest.fixture
def users(session) -> dict[str, str]:
    seed_users(session)
    return dict(USERS)



def run_concurrently(session_factory, actions) -> list[object]:
    """Run every ``action(session)`` on its own thread, all released at once.

    Returns one outcome per action in order: its result, or the
    :class:`InterestHubError` it raised.
    """

    barrier = threading.Barrier(len(actions))
    outcomes: list[object] = [None] * len(actions)

    def worker(index: int, action) -> None:
        db = session_factory()
        try:
            barrier.wait()
            outcomes[index] = action(db)
        except InterestHubError as exc:
            outcomes[index] = exc
        finally:
            db.close()

    threads = [
        threading.Thread(target=worker, args=(index, action))
        for index, action in enumerate(actions)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    return outcomes
