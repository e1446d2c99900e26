"""SQLAlchemy model for persisted interests."""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
    Text,
)

from interest_hub.infrastructure.database import Base


class InterestModel(Base):
    """Database representation of an interest between two users."""

    __tablename__ = "interest"
    __table_args__ = (
        CheckConstraint("sender_id <> receiver_id", name="ck_interest_distinct_users"),
        Index("ix_interest_sender_sent_at", "sender_id", "sent_at"),
        Index("ix_interest_receiver_status", "receiver_id", "status"),
        Index("ix_interest_status_expires_at", "status", "expires_at"),
    )

    id = Column(String(36), primary_key=True)
    sender_id = Column(String(64), ForeignKey("user.id"), nullable=False, index=True)
    receiver_id = Column(String(64), ForeignKey("user.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False)
    # Populated while pending/accepted, NULL once the interest is closed.
    active_key = Column(String(140), nullable=True, unique=True)
    type = Column(String(30), nullable=False)
    message = Column(Text, nullable=True)
    sent_at = Column(DateTime, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    responded_at = Column(DateTime, nullable=True)
    withdrawn_at = Column(DateTime, nullable=True)
    is_read = Column(Boolean, nullable=False, default=False)
    ai_match_score = Column(Integer, nullable=True)
    common_interests = Column(JSON, nullable=False, default=list)


__all__ = ["InterestModel"]
