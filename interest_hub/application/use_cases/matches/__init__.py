"""Use cases detecting and listing mutual matches."""

from .compatibility import (
    calculate_compatibility_score,
    extract_interests,
    find_common_interests,
)
from .detector import (
    MatchDetectionResult,
    detect_mutual_match,
    get_mutual_interests,
    reconcile_mutual_matches,
)

__all__ = [
    "MatchDetectionResult",
    "calculate_compatibility_score",
    "detect_mutual_match",
    "extract_interests",
    "find_common_interests",
    "get_mutual_interests",
    "reconcile_mutual_matches",
]
