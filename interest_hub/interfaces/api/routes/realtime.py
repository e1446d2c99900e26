"""Endpoints exposing the realtime propagation channel."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect, status

from interest_hub.application.use_cases.realtime import relay_match_suggestion
from interest_hub.infrastructure.realtime import PropagationChannel
from interest_hub.interfaces.api.dependencies import (
    USER_ID_HEADER,
    get_channel,
    get_current_user_id,
)
from interest_hub.interfaces.api.schemas import (
    ActivityFeedEntryRead,
    MatchSuggestionRelayResponse,
    StateChangeEventRead,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/realtime", tags=["realtime"])


@router.get("/activity", response_model=list[ActivityFeedEntryRead])
def read_activity_feed(
    limit: int = Query(20, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
    channel: PropagationChannel = Depends(get_channel),
) -> list[ActivityFeedEntryRead]:
    """Return the caller's live activity feed, newest first."""

    return [
        ActivityFeedEntryRead.model_validate(entry)
        for entry in channel.activity_feed(user_id, limit=limit)
    ]


@router.get("/events", response_model=list[StateChangeEventRead])
def read_recent_events(
    since: datetime | None = Query(None, description="Only return events at or after this timestamp"),
    limit: int = Query(50, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
    channel: PropagationChannel = Depends(get_channel),
) -> list[StateChangeEventRead]:
    return [
        StateChangeEventRead.model_validate(event)
        for event in channel.recent_events(user_id, since=since, limit=limit)
    ]


@router.post(
    "/match-suggestions",
    response_model=MatchSuggestionRelayResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
def relay_suggestion(
    suggestion: dict[str, Any] = Body(...),
    channel: PropagationChannel = Depends(get_channel),
) -> MatchSuggestionRelayResponse:
    """Forward a suggestion from the recommendation service to its user."""

    try:
        relay_match_suggestion(channel, suggestion)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    user_id = suggestion.get("user_id") or suggestion.get("userId")
    return MatchSuggestionRelayResponse(user_id=str(user_id))


def _parse_since(raw: str | None) -> datetime | None:
    if not raw:
        return None
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        return None


@router.websocket("/ws")
async def realtime_websocket(
    websocket: WebSocket,
    channel: PropagationChannel = Depends(get_channel),
) -> None:
    """Subscribe to the caller's topic, replaying events from ``since`` onwards."""

    user_id = (
        websocket.query_params.get("user_id") or websocket.headers.get(USER_ID_HEADER) or ""
    ).strip()
    if not user_id:
        await websocket.close(code=1008)
        return

    await websocket.accept()
    replayed = await channel.subscribe(
        user_id, websocket, replay_since=_parse_since(websocket.query_params.get("since"))
    )
    logger.debug("User %s subscribed; %s event(s) replayed", user_id, replayed)
    try:
        while True:
            try:
                message = await websocket.receive_json()
            except ValueError:
                continue
            if isinstance(message, dict) and message.get("type") == "ping":
                await websocket.send_json({"type": "pong"})
    except WebSocketDisconnect:
        pass
    finally:
        channel.unsubscribe(user_id, websocket)


__all__ = ["router"]
