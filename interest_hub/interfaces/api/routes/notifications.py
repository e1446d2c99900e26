"""Endpoints and websocket handler for realtime notifications."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from fastapi import APIRouter, Depends, Query, Response, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session, sessionmaker
from starlette.concurrency import run_in_threadpool

from interest_hub.application.use_cases.notifications import (
    delete_notification,
    get_notification_stats,
    list_notifications,
    mark_all_as_read,
    mark_as_read,
)
from interest_hub.domain.entities import Notification
from interest_hub.domain.errors import InterestHubError, NotFoundError
from interest_hub.infrastructure.database import get_db
from interest_hub.infrastructure.realtime import PropagationChannel, serialize_notification
from interest_hub.interfaces.api.dependencies import (
    USER_ID_HEADER,
    get_channel,
    get_clock,
    get_current_user_id,
    get_session_factory,
)
from interest_hub.interfaces.api.schemas import (
    NotificationMarkAllReadResponse,
    NotificationRead,
    NotificationStatsRead,
)
from interest_hub.utils import Clock

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])

INITIAL_BATCH_SIZE = 50


@router.get("", response_model=list[NotificationRead])
def read_notifications(
    unread_only: bool = Query(False),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    clock: Clock = Depends(get_clock),
) -> list[NotificationRead]:
    """Return the most recent unexpired notifications for the caller."""

    notifications = list_notifications(
        db,
        user_id=user_id,
        unread_only=unread_only,
        limit=limit,
        offset=offset,
        clock=clock,
    )
    return [NotificationRead.model_validate(notification) for notification in notifications]


@router.get("/stats", response_model=NotificationStatsRead)
def read_notification_stats(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> NotificationStatsRead:
    stats = get_notification_stats(db, user_id=user_id)
    return NotificationStatsRead.model_validate(stats)


@router.post("/read-all", response_model=NotificationMarkAllReadResponse)
def read_all_notifications(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    clock: Clock = Depends(get_clock),
    channel: PropagationChannel = Depends(get_channel),
) -> NotificationMarkAllReadResponse:
    updated = mark_all_as_read(db, user_id=user_id, clock=clock, channel=channel)
    return NotificationMarkAllReadResponse(updated=updated)


@router.post("/{notification_id}/read", response_model=NotificationRead)
def read_notification(
    notification_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    clock: Clock = Depends(get_clock),
    channel: PropagationChannel = Depends(get_channel),
) -> NotificationRead:
    notification = mark_as_read(
        db,
        notification_id=notification_id,
        user_id=user_id,
        clock=clock,
        channel=channel,
    )
    return NotificationRead.model_validate(notification)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_notification(
    notification_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    clock: Clock = Depends(get_clock),
    channel: PropagationChannel = Depends(get_channel),
):
    """Delete one of the caller's notifications."""

    delete_notification(
        db,
        notification_id=notification_id,
        user_id=user_id,
        clock=clock,
        channel=channel,
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def _websocket_user_id(websocket: WebSocket) -> str:
    return (
        websocket.query_params.get("user_id") or websocket.headers.get(USER_ID_HEADER) or ""
    ).strip()


def _load_unread(
    session_factory: sessionmaker[Session], user_id: str, clock: Clock
) -> Sequence[Notification]:
    session = session_factory()
    try:
        return list_notifications(
            session, user_id=user_id, unread_only=True, limit=INITIAL_BATCH_SIZE, clock=clock
        )
    finally:
        session.close()


def _acknowledge(
    session_factory: sessionmaker[Session],
    user_id: str,
    notification_ids: Sequence[str],
    channel: PropagationChannel,
    clock: Clock,
) -> None:
    session = session_factory()
    try:
        for notification_id in dict.fromkeys(notification_ids):
            try:
                mark_as_read(
                    session,
                    notification_id=str(notification_id),
                    user_id=user_id,
                    clock=clock,
                    channel=channel,
                )
            except NotFoundError:
                continue
    finally:
        session.close()


@router.websocket("/ws")
async def notifications_websocket(
    websocket: WebSocket,
    channel: PropagationChannel = Depends(get_channel),
    session_factory: sessionmaker[Session] = Depends(get_session_factory),
    clock: Clock = Depends(get_clock),
) -> None:
    """Stream notifications and other state changes to the connected user."""

    user_id = _websocket_user_id(websocket)
    if not user_id:
        await websocket.close(code=1008)
        return

    try:
        pending_notifications = await run_in_threadpool(
            _load_unread, session_factory, user_id, clock
        )
    except InterestHubError as exc:
        logger.warning("Could not load notifications for user %s: %s", user_id, exc)
        await websocket.close(code=1011)
        return

    await websocket.accept()
    await channel.subscribe(user_id, websocket)
    try:
        if pending_notifications:
            await websocket.send_json(
                {
                    "type": "init",
                    "data": [serialize_notification(n) for n in pending_notifications],
                }
            )
        while True:
            try:
                message = await websocket.receive_json()
            except ValueError:
                continue
            if not isinstance(message, dict):
                continue

            message_type = message.get("type")
            if message_type == "ping":
                await websocket.send_json({"type": "pong"})
                continue

            if message_type == "ack":
                ids = message.get("ids", [])
                if isinstance(ids, list) and ids:
                    try:
                        await run_in_threadpool(
                            _acknowledge, session_factory, user_id, ids, channel, clock
                        )
                    except InterestHubError as exc:
                        logger.warning("Ack from user %s failed: %s", user_id, exc)
                continue
    except WebSocketDisconnect:
        pass
    finally:
        channel.unsubscribe(user_id, websocket)


__all__ = ["router"]
