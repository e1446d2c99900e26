"""Detect reciprocal accepted interests and claim mutual matches."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from interest_hub.application.use_cases.notifications import notify_mutual_match
from interest_hub.application.use_cases.realtime import (
    ACTIVITY_MUTUAL_MATCH,
    publish_counter_snapshots,
    publish_match_created,
)
from interest_hub.config import Settings, get_settings
from interest_hub.domain.entities import (
    INTEREST_STATUS_ACCEPTED,
    Interest,
    MutualInterest,
    MutualMatch,
    Notification,
    match_pair,
)
from interest_hub.infrastructure.database import translate_store_errors
from interest_hub.infrastructure.realtime import PropagationChannel, get_propagation_channel
from interest_hub.infrastructure.repositories import (
    DIRECTION_RECEIVED,
    CounterRepository,
    InterestRepository,
    MutualMatchRepository,
)
from interest_hub.utils import Clock, SystemClock

from .compatibility import calculate_compatibility_score, find_common_interests

logger = logging.getLogger(__name__)


@dataclass
class MatchDetectionResult:
    """Outcome of one detection pass for an accepted interest."""

    match: MutualMatch | None = None
    notifications: list[Notification] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def claimed(self) -> bool:
        return self.match is not None


def _build_match(interest: Interest, reciprocal: Interest, clock: Clock) -> MutualMatch:
    user_a_id, _ = match_pair(interest.sender_id, interest.receiver_id)
    sent_by_a, sent_by_b = (
        (interest, reciprocal) if interest.sender_id == user_a_id else (reciprocal, interest)
    )
    return MutualMatch(
        user_a_id=sent_by_a.sender_id,
        user_b_id=sent_by_b.sender_id,
        interest_a_id=sent_by_a.id,
        interest_b_id=sent_by_b.id,
        matched_at=clock.now(),
        match_score=calculate_compatibility_score(sent_by_a, sent_by_b),
        common_interests=find_common_interests(sent_by_a, sent_by_b),
    )


def _claim(session: Session, interest: Interest, clock: Clock) -> MutualMatch | None:
    """Claim the marker for the pair and bump both mutual counters.

    The marker insert is the first write of the transaction; the losing side
    of a race gets ``None`` and writes nothing.
    """

    interests = InterestRepository(session)
    reciprocal = interests.find_accepted(interest.receiver_id, interest.sender_id)
    if reciprocal is None:
        session.rollback()
        return None

    counters = CounterRepository(session)
    counters.ensure_rows([interest.sender_id, interest.receiver_id])

    match = _build_match(interest, reciprocal, clock)
    if not MutualMatchRepository(session).claim(match):
        session.rollback()
        return None

    counters.increment(match.user_a_id, mutual_count=1)
    counters.increment(match.user_b_id, mutual_count=1)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        return None
    return match


def detect_mutual_match(
    session: Session,
    *,
    interest: Interest,
    clock: Clock | None = None,
    channel: PropagationChannel | None = None,
    settings: Settings | None = None,
) -> MatchDetectionResult:
    """Form a mutual match if the receiver already holds an accepted interest back.

    Only the caller that claims the pair marker notifies both users, so
    concurrent or repeated detections for the same pair emit one match.
    Store failures propagate as :class:`DependencyError`.
    """

    if interest.status != INTEREST_STATUS_ACCEPTED:
        return MatchDetectionResult()

    settings = settings or get_settings()
    clock = clock or SystemClock()
    channel = channel or get_propagation_channel()

    with translate_store_errors(session, "mutual match detection"):
        match = _claim(session, interest, clock)
    if match is None:
        return MatchDetectionResult()

    logger.info("Mutual match formed between %s and %s", match.user_a_id, match.user_b_id)
    result = MatchDetectionResult(match=match)
    for dispatch in notify_mutual_match(
        session, match=match, clock=clock, channel=channel, settings=settings
    ):
        if dispatch.notification is not None:
            result.notifications.append(dispatch.notification)
        if dispatch.warning:
            result.warnings.append(dispatch.warning)

    publish_match_created(channel, match)
    for user_id in (match.user_a_id, match.user_b_id):
        channel.record_activity(
            user_id,
            ACTIVITY_MUTUAL_MATCH,
            {
                "other_user_id": match.other_user(user_id),
                "interest_id": match.interest_sent_by(user_id),
                "match_score": match.match_score,
                "common_interests": list(match.common_interests),
            },
            timestamp=match.matched_at,
        )
    publish_counter_snapshots(
        session, channel, [match.user_a_id, match.user_b_id], timestamp=match.matched_at
    )
    return result


def reconcile_mutual_matches(
    session: Session,
    *,
    user_id: str,
    clock: Clock | None = None,
    channel: PropagationChannel | None = None,
    settings: Settings | None = None,
) -> list[MutualMatch]:
    """Re-run detection for every accepted interest ``user_id`` received.

    Repairs matches whose detection failed after the accepting write
    committed. Returns the matches claimed by this pass.
    """

    with translate_store_errors(session, "mutual match reconciliation"):
        accepted = InterestRepository(session).list_by_user(
            user_id,
            DIRECTION_RECEIVED,
            statuses=[INTEREST_STATUS_ACCEPTED],
            limit=None,
        )

    claimed: list[MutualMatch] = []
    for interest in accepted:
        result = detect_mutual_match(
            session, interest=interest, clock=clock, channel=channel, settings=settings
        )
        if result.match is not None:
            claimed.append(result.match)
    if claimed:
        logger.info("Reconciled %s mutual match(es) for user %s", len(claimed), user_id)
    return claimed


def get_mutual_interests(session: Session, *, user_id: str) -> list[MutualInterest]:
    """Return the user's mutual matches seen from their side."""

    with translate_store_errors(session, "list mutual interests"):
        matches = MutualMatchRepository(session).list_for_user(user_id)
    return [
        MutualInterest(
            interest_id=match.interest_sent_by(user_id),
            other_user_id=match.other_user(user_id),
            matched_at=match.matched_at,
            ai_match_score=match.match_score,
        )
        for match in matches
    ]


__all__ = [
    "MatchDetectionResult",
    "detect_mutual_match",
    "get_mutual_interests",
    "reconcile_mutual_matches",
]
