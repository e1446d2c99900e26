"""Result objects returned by the interest workflows."""

from __future__ import annotations

from dataclasses import dataclass, field

from interest_hub.domain.entities import Interest, MutualMatch, Notification


@dataclass
class InterestWorkflowResult:
    """Committed interest plus the side effects that ran after the commit.

    ``warnings`` lists side effects that were abandoned (for example a
    notification that could not be stored); the interest change itself
    succeeded regardless.
    """

    interest: Interest
    notifications: list[Notification] = field(default_factory=list)
    mutual_match: MutualMatch | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def is_mutual_match(self) -> bool:
        return self.mutual_match is not None


__all__ = ["InterestWorkflowResult"]
