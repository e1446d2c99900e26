"""Domain entity representing a directory user."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class User:
    """Minimal view of a profile owned by the external user directory."""

    id: str
    name: str
    is_active: bool = True
    deleted: bool = False
    created_at: datetime | None = None

    def can_receive_interest(self) -> bool:
        return self.is_active and not self.deleted
