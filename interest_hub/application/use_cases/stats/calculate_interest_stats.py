"""Pure aggregation helpers over collections of interests."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from interest_hub.domain.entities import (
    INTEREST_STATUS_ACCEPTED,
    INTEREST_STATUS_DECLINED,
    INTEREST_STATUS_PENDING,
    INTEREST_STATUS_WITHDRAWN,
    Interest,
    InterestStats,
)


def percentage(part: int, whole: int) -> float:
    """Return ``part`` as a percentage of ``whole`` rounded to two decimals."""

    if whole <= 0:
        return 0.0
    return round(part / whole * 100, 2)


def calculate_interest_stats(interests: Iterable[Interest]) -> InterestStats:
    """Summarize ``interests`` by status with success and response rates."""

    statuses = Counter(interest.status for interest in interests)
    total = sum(statuses.values())
    if total == 0:
        return InterestStats()

    accepted = statuses[INTEREST_STATUS_ACCEPTED]
    declined = statuses[INTEREST_STATUS_DECLINED]
    return InterestStats(
        total=total,
        pending=statuses[INTEREST_STATUS_PENDING],
        accepted=accepted,
        declined=declined,
        withdrawn=statuses[INTEREST_STATUS_WITHDRAWN],
        success_rate=percentage(accepted, total),
        response_rate=percentage(accepted + declined, total),
    )


__all__ = ["calculate_interest_stats", "percentage"]
