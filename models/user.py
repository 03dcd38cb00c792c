"""SQLAlchemy model for registered accounts."""

from sqlalchemy import Column, DateTime, String
from sqlalchemy.sql import func

from database import Base


class User(Base):
    __tablename__ = "users"
    __table_args__ = {"extend_existing": True}

    # Subject issued by the identity provider, not generated here.
    id = Column(String(64), primary_key=True)
    email = Column(String(320), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=True)
    email_verified_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


__all__ = ["User"]
