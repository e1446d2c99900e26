"""Read-only use cases over stored interests."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime

from sqlalchemy.orm import Session

from interest_hub.domain.entities import INTEREST_STATUSES, INTEREST_TYPES, Interest
from interest_hub.domain.errors import STEP_VALIDATION, NotFoundError, ValidationError
from interest_hub.infrastructure.database import translate_store_errors
from interest_hub.infrastructure.repositories import (
    DIRECTION_RECEIVED,
    DIRECTION_SENT,
    InterestRepository,
)

MAX_PAGE_SIZE = 100


def get_interest(session: Session, *, interest_id: str, user_id: str) -> Interest:
    """Return ``interest_id`` if ``user_id`` is its sender or receiver."""

    with translate_store_errors(session, "get interest"):
        interest = InterestRepository(session).get(interest_id)
    if interest is None or user_id not in (interest.sender_id, interest.receiver_id):
        raise NotFoundError("Interest not found")
    return interest


def get_interests_by_user(
    session: Session,
    *,
    user_id: str,
    direction: str,
    statuses: Iterable[str] | None = None,
    types: Iterable[str] | None = None,
    sent_from: datetime | None = None,
    sent_to: datetime | None = None,
    limit: int = 50,
    offset: int = 0,
) -> Sequence[Interest]:
    """List interests sent or received by ``user_id``, newest first."""

    if direction not in (DIRECTION_SENT, DIRECTION_RECEIVED):
        raise ValidationError(
            f"Direction must be '{DIRECTION_SENT}' or '{DIRECTION_RECEIVED}'",
            step=STEP_VALIDATION,
        )
    status_list = list(statuses or [])
    unknown = set(status_list) - set(INTEREST_STATUSES)
    if unknown:
        raise ValidationError(
            f"Unknown interest status: {', '.join(sorted(unknown))}", step=STEP_VALIDATION
        )
    type_list = list(types or [])
    unknown = set(type_list) - set(INTEREST_TYPES)
    if unknown:
        raise ValidationError(
            f"Unknown interest type: {', '.join(sorted(unknown))}", step=STEP_VALIDATION
        )
    if limit <= 0 or offset < 0:
        raise ValidationError("Invalid pagination parameters", step=STEP_VALIDATION)

    with translate_store_errors(session, "list interests"):
        return InterestRepository(session).list_by_user(
            user_id,
            direction,
            statuses=status_list,
            types=type_list,
            sent_from=sent_from,
            sent_to=sent_to,
            limit=min(limit, MAX_PAGE_SIZE),
            offset=offset,
        )


__all__ = ["MAX_PAGE_SIZE", "get_interest", "get_interests_by_user"]
