"""SQLAlchemy model for uploaded videos."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Video(Base):
    """Metadata for a video whose bytes live in object storage."""

    __tablename__ = "videos"
    __table_args__ = {"extend_existing": True}

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    file_name = Column(String(512), nullable=False, default="Untitled Video")
    file_url = Column(Text, nullable=False)
    file_size = Column(BigInteger, nullable=False, default=0)
    thumbnail_url = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False, index=True)


__all__ = ["Video"]
