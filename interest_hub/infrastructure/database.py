"""Database configuration and session management."""

from __future__ import annotations

from collections.abc import Generator, Iterator
from contextlib import contextmanager

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from interest_hub.config import Settings, get_settings
from interest_hub.domain.errors import DependencyError


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""


settings = get_settings()

logger = logging.getLogger(__name__)


def _connect_args(database_url: str, timeout: float) -> dict[str, object]:
    """Return driver arguments bounding how long a statement may block."""

    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        return {"timeout": timeout, "check_same_thread": False}
    if url.get_backend_name() == "postgresql":
        return {"options": f"-c statement_timeout={int(timeout * 1000)}"}
    return {}


def build_engine(database_url: str, *, timeout: float) -> Engine:
    """Create an engine for ``database_url`` with bounded waits."""

    url = make_url(database_url)
    connect_args = _connect_args(database_url, timeout)
    if url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:"):
        # A single shared connection keeps the in-memory database alive.
        return create_engine(
            database_url, connect_args=connect_args, poolclass=StaticPool
        )
    return create_engine(
        database_url,
        connect_args=connect_args,
        pool_pre_ping=True,
        pool_timeout=timeout,
    )


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def _engine_from_settings(settings: Settings) -> Engine:
    return build_engine(settings.database_url, timeout=settings.operation_timeout_seconds)


engine = _engine_from_settings(settings)
SessionLocal = build_session_factory(engine)


def initialize_database(bind: Engine | None = None) -> None:
    """Ensure all ORM models have corresponding database tables."""

    from interest_hub.infrastructure import models  # noqa: F401  # ensure models are imported

    Base.metadata.create_all(bind=bind or engine, checkfirst=True)


def get_db() -> Generator:
    """Yield a database session and close it afterwards."""

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def translate_store_errors(session: Session, operation: str) -> Iterator[None]:
    """Roll back and raise :class:`DependencyError` on driver failures.

    Lock waits, statement timeouts and dropped connections all surface as
    retryable errors; integrity errors are left to the caller.
    """

    try:
        yield
    except (OperationalError, PoolTimeoutError) as exc:
        session.rollback()
        logger.warning("Store call '%s' failed: %s", operation, exc)
        raise DependencyError(f"Store unavailable during {operation}") from exc
    except DBAPIError as exc:
        if not exc.connection_invalidated:
            raise
        session.rollback()
        logger.warning("Store connection lost during '%s': %s", operation, exc)
        raise DependencyError(f"Store unavailable during {operation}") from exc


__all__ = [
    "Base",
    "SessionLocal",
    "build_engine",
    "build_session_factory",
    "engine",
    "get_db",
    "initialize_database",
    "translate_store_errors",
]
