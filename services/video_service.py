"""Video library persistence helpers."""

from __future__ import annotations

import uuid
from typing import List, Optional

from sqlalchemy.orm import Session

from core.logging import get_logger
from models.video import Video
from services.id_utils import normalize_uuid

logger = get_logger(__name__)

DEFAULT_FILE_NAME = "Untitled Video"


def save_video(
    db: Session,
    *,
    owner_id: str,
    file_url: str,
    file_name: Optional[str] = None,
    file_size: Optional[int] = None,
    thumbnail_url: Optional[str] = None,
) -> Video:
    """Record metadata for a video already stored in object storage."""
    video = Video(
        user_id=owner_id,
        file_name=file_name or DEFAULT_FILE_NAME,
        file_url=file_url,
        file_size=file_size or 0,
        thumbnail_url=thumbnail_url or None,
    )
    db.add(video)
    db.commit()
    db.refresh(video)
    logger.info("Saved video %s for user %s.", video.id, owner_id)
    return video


def list_videos(db: Session, owner_id: str) -> List[Video]:
    return (
        db.query(Video)
        .filter(Video.user_id == owner_id)
        .order_by(Video.created_at.desc())
        .all()
    )


def get_video(db: Session, video_id: uuid.UUID) -> Optional[Video]:
    return db.query(Video).filter(Video.id == video_id).first()


def get_owned_video(db: Session, video_id: object, owner_id: str) -> Optional[Video]:
    """Return the video only when it exists and belongs to ``owner_id``.

    Malformed identifiers are treated the same as unknown ones.
    """
    parsed = normalize_uuid(video_id)
    if parsed is None:
        return None
    return (
        db.query(Video)
        .filter(Video.id == parsed, Video.user_id == owner_id)
        .first()
    )


__all__ = ["DEFAULT_FILE_NAME", "get_owned_video", "get_video", "list_videos", "save_video"]
