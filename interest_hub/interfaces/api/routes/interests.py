"""Endpoints implementing the interest lifecycle."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from interest_hub.application.use_cases.interests import (
    get_interest,
    get_interests_by_user,
    mark_interest_as_read,
    respond_to_interest,
    send_interest,
    withdraw_interest,
)
from interest_hub.application.use_cases.matches import get_mutual_interests
from interest_hub.application.use_cases.stats import (
    get_interest_summary,
    get_user_interest_stats,
)
from interest_hub.config import Settings, get_settings
from interest_hub.infrastructure.database import get_db
from interest_hub.infrastructure.realtime import PropagationChannel
from interest_hub.infrastructure.repositories import DIRECTION_RECEIVED
from interest_hub.interfaces.api.dependencies import (
    get_channel,
    get_clock,
    get_current_user_id,
)
from interest_hub.interfaces.api.routes_helpers import workflow_result_to_schema
from interest_hub.interfaces.api.schemas import (
    InterestCreate,
    InterestRead,
    InterestRespond,
    InterestSummaryRead,
    InterestWorkflowRead,
    MutualInterestRead,
    UserInterestStatsRead,
)
from interest_hub.utils import Clock

router = APIRouter(prefix="/interests", tags=["interests"])


@router.post("", response_model=InterestWorkflowRead, status_code=status.HTTP_201_CREATED)
def create_interest(
    payload: InterestCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    clock: Clock = Depends(get_clock),
    channel: PropagationChannel = Depends(get_channel),
    settings: Settings = Depends(get_settings),
) -> InterestWorkflowRead:
    """Send an interest from the caller to ``receiver_id``."""

    result = send_interest(
        db,
        sender_id=user_id,
        receiver_id=payload.receiver_id,
        message=payload.message,
        interest_type=payload.type,
        clock=clock,
        channel=channel,
        settings=settings,
    )
    return workflow_result_to_schema(result)


@router.get("", response_model=list[InterestRead])
def list_interests(
    direction: str = Query(DIRECTION_RECEIVED, description="sent or received"),
    status_filter: list[str] | None = Query(None, alias="status"),
    type_filter: list[str] | None = Query(None, alias="type"),
    sent_from: datetime | None = Query(None),
    sent_to: datetime | None = Query(None),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> list[InterestRead]:
    interests = get_interests_by_user(
        db,
        user_id=user_id,
        direction=direction,
        statuses=status_filter,
        types=type_filter,
        sent_from=sent_from,
        sent_to=sent_to,
        limit=limit,
        offset=offset,
    )
    return [InterestRead.model_validate(interest) for interest in interests]


@router.get("/mutual", response_model=list[MutualInterestRead])
def list_mutual_interests(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> list[MutualInterestRead]:
    return [
        MutualInterestRead.model_validate(mutual)
        for mutual in get_mutual_interests(db, user_id=user_id)
    ]


@router.get("/summary", response_model=InterestSummaryRead)
def read_interest_summary(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> InterestSummaryRead:
    return InterestSummaryRead.model_validate(get_interest_summary(db, user_id=user_id))


@router.get("/stats", response_model=UserInterestStatsRead)
def read_interest_stats(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> UserInterestStatsRead:
    return UserInterestStatsRead.model_validate(get_user_interest_stats(db, user_id=user_id))


@router.get("/{interest_id}", response_model=InterestRead)
def read_interest(
    interest_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> InterestRead:
    return InterestRead.model_validate(get_interest(db, interest_id=interest_id, user_id=user_id))


@router.post("/{interest_id}/respond", response_model=InterestWorkflowRead)
def respond(
    interest_id: str,
    payload: InterestRespond,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    clock: Clock = Depends(get_clock),
    channel: PropagationChannel = Depends(get_channel),
    settings: Settings = Depends(get_settings),
) -> InterestWorkflowRead:
    """Accept or decline an interest received by the caller."""

    result = respond_to_interest(
        db,
        interest_id=interest_id,
        response=payload.response,
        responder_id=user_id,
        clock=clock,
        channel=channel,
        settings=settings,
    )
    return workflow_result_to_schema(result)


@router.post("/{interest_id}/withdraw", response_model=InterestWorkflowRead)
def withdraw(
    interest_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    clock: Clock = Depends(get_clock),
    channel: PropagationChannel = Depends(get_channel),
) -> InterestWorkflowRead:
    result = withdraw_interest(
        db, interest_id=interest_id, sender_id=user_id, clock=clock, channel=channel
    )
    return workflow_result_to_schema(result)


@router.post("/{interest_id}/read", response_model=InterestRead)
def mark_read(
    interest_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    clock: Clock = Depends(get_clock),
    channel: PropagationChannel = Depends(get_channel),
) -> InterestRead:
    interest = mark_interest_as_read(
        db, interest_id=interest_id, user_id=user_id, clock=clock, channel=channel
    )
    return InterestRead.model_validate(interest)


__all__ = ["router"]
