"""FastAPI dependency utilities."""

from fastapi import Header, HTTPException, status
from sqlalchemy.orm import Session, sessionmaker

from interest_hub.infrastructure.database import SessionLocal
from interest_hub.infrastructure.realtime import PropagationChannel, get_propagation_channel
from interest_hub.utils import Clock, SystemClock

USER_ID_HEADER = "X-User-Id"


def get_current_user_id(
    x_user_id: str | None = Header(default=None, alias=USER_ID_HEADER),
) -> str:
    """Return the caller identity forwarded by the authentication gateway."""

    user_id = (x_user_id or "").strip()
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing {USER_ID_HEADER} header",
        )
    return user_id


def get_clock() -> Clock:
    return SystemClock()


def get_channel() -> PropagationChannel:
    """Return the process-wide realtime channel."""

    return get_propagation_channel()


def get_session_factory() -> sessionmaker[Session]:
    """Return the factory websocket handlers use for short-lived sessions."""

    return SessionLocal


__all__ = [
    "USER_ID_HEADER",
    "get_channel",
    "get_clock",
    "get_current_user_id",
    "get_session_factory",
]
