"""Compatibility scoring for reciprocal interests."""

from __future__ import annotations

from datetime import timedelta

from interest_hub.domain.entities import Interest

BASE_MATCH_SCORE = 70
COMMON_INTEREST_BONUS = 5
MESSAGE_BONUS = 10
QUICK_RESPONSE_BONUS = 10
QUICK_RESPONSE_WINDOW = timedelta(hours=24)
MAX_MATCH_SCORE = 100

INTEREST_KEYWORDS: tuple[str, ...] = (
    "reading",
    "books",
    "travel",
    "cooking",
    "music",
    "sports",
    "movies",
    "photography",
    "art",
    "technology",
    "fitness",
    "yoga",
    "meditation",
    "gardening",
    "dancing",
    "singing",
    "writing",
    "painting",
    "hiking",
    "swimming",
    "cycling",
    "cricket",
    "football",
    "badminton",
    "chess",
)


def extract_interests(interest: Interest) -> list[str]:
    """Return the hobbies attached to ``interest`` or mentioned in its message."""

    found: list[str] = []
    for item in interest.common_interests or []:
        if item not in found:
            found.append(item)
    if interest.message:
        message = interest.message.lower()
        for keyword in INTEREST_KEYWORDS:
            if keyword in message and keyword not in found:
                found.append(keyword)
    return found


def find_common_interests(first: Interest, second: Interest) -> list[str]:
    other = set(extract_interests(second))
    return [item for item in extract_interests(first) if item in other]


def _answered_quickly(interest: Interest) -> bool:
    if interest.responded_at is None:
        return False
    return interest.responded_at - interest.sent_at < QUICK_RESPONSE_WINDOW


def calculate_compatibility_score(first: Interest, second: Interest) -> int:
    """Score a mutual match between 70 and 100."""

    score = BASE_MATCH_SCORE
    score += len(find_common_interests(first, second)) * COMMON_INTEREST_BONUS
    if first.message and second.message:
        score += MESSAGE_BONUS
    if _answered_quickly(first) and _answered_quickly(second):
        score += QUICK_RESPONSE_BONUS
    return min(score, MAX_MATCH_SCORE)


__all__ = [
    "INTEREST_KEYWORDS",
    "calculate_compatibility_score",
    "extract_interests",
    "find_common_interests",
]
