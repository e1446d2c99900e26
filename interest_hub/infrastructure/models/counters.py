"""SQLAlchemy models for derived counters and daily quotas."""

from sqlalchemy import Column, Date, Integer, String

from interest_hub.infrastructure.database import Base


class UserCountersModel(Base):
    """Per-user projection updated alongside every interest write."""

    __tablename__ = "user_counters"

    user_id = Column(String(64), primary_key=True)
    sent_count = Column(Integer, nullable=False, default=0)
    received_count = Column(Integer, nullable=False, default=0)
    unread_count = Column(Integer, nullable=False, default=0)
    mutual_count = Column(Integer, nullable=False, default=0)
    notification_count = Column(Integer, nullable=False, default=0)
    unread_notification_count = Column(Integer, nullable=False, default=0)


class DailyQuotaModel(Base):
    """Interests created by a sender on one local calendar day."""

    __tablename__ = "interest_daily_quota"

    sender_id = Column(String(64), primary_key=True)
    day = Column(Date, primary_key=True)
    count = Column(Integer, nullable=False, default=0)


__all__ = ["DailyQuotaModel", "UserCountersModel"]
