"""SQLAlchemy model for the directory user table."""

from sqlalchemy import Boolean, Column, DateTime, String, func
from sqlalchemy.sql import expression

from interest_hub.infrastructure.database import Base


class UserModel(Base):
    """Local mirror of the profiles exposed by the user directory."""

    __tablename__ = "user"

    id = Column(String(64), primary_key=True)
    name = Column(String(120), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    deleted = Column(
        Boolean,
        nullable=False,
        default=False,
        server_default=expression.false(),
    )
    created_at = Column(DateTime, nullable=False, server_default=func.now())
