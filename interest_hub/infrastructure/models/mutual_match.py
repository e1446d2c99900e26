"""SQLAlchemy model for mutual match claim markers."""

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, JSON, String

from interest_hub.infrastructure.database import Base


class MutualMatchModel(Base):
    """One row per unordered user pair; the primary key is the claim."""

    __tablename__ = "mutual_match"
    __table_args__ = (
        CheckConstraint("user_a_id < user_b_id", name="ck_mutual_match_pair_order"),
    )

    user_a_id = Column(String(64), primary_key=True)
    user_b_id = Column(String(64), primary_key=True, index=True)
    interest_a_id = Column(String(36), nullable=False)
    interest_b_id = Column(String(36), nullable=False)
    matched_at = Column(DateTime, nullable=False)
    match_score = Column(Integer, nullable=True)
    common_interests = Column(JSON, nullable=False, default=list)


__all__ = ["MutualMatchModel"]
