"""SQLAlchemy model for persisted notifications."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, JSON, String, Text

from interest_hub.infrastructure.database import Base


class NotificationModel(Base):
    """Database representation for user notifications."""

    __tablename__ = "notification"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(64), ForeignKey("user.id"), nullable=False, index=True)
    type = Column(String(50), nullable=False)
    title = Column(String(120), nullable=False)
    message = Column(Text, nullable=False)
    priority = Column(String(10), nullable=False, default="medium")
    is_read = Column(Boolean, nullable=False, default=False)
    related_user_id = Column(String(64), nullable=True)
    action_url = Column(String(255), nullable=True)
    payload = Column("metadata", JSON, nullable=False, default=dict)
    created_at = Column(DateTime(), nullable=False)
    read_at = Column(DateTime(), nullable=True)
    expires_at = Column(DateTime(), nullable=True)


__all__ = ["NotificationModel"]
