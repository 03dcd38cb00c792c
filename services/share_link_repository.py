"""Persistence helpers for shareable links."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import update
from sqlalchemy.orm import Session

from models.share_link import ShareableLink
from models.video import Video


def insert_link(
    db: Session,
    *,
    video_id: uuid.UUID,
    owner_id: str,
    public: bool,
    access_emails: Sequence[str],
    expires_at: Optional[datetime],
) -> ShareableLink:
    """Persist a new link with zeroed usage counters and commit it."""
    link = ShareableLink(
        video_id=video_id,
        user_id=owner_id,
        public=public,
        access_emails=list(access_emails),
        expires_at=expires_at,
        click_count=0,
        last_accessed_at=None,
    )
    db.add(link)
    db.commit()
    db.refresh(link)
    return link


def get_link(db: Session, link_id: uuid.UUID) -> Optional[ShareableLink]:
    return db.query(ShareableLink).filter(ShareableLink.id == link_id).first()


def get_owned_link(db: Session, link_id: uuid.UUID, owner_id: str) -> Optional[ShareableLink]:
    return (
        db.query(ShareableLink)
        .filter(ShareableLink.id == link_id, ShareableLink.user_id == owner_id)
        .first()
    )


def list_links_for_owner(db: Session, owner_id: str) -> List[Tuple[ShareableLink, str]]:
    """Return ``(link, video file name)`` pairs, newest link first."""
    rows = (
        db.query(ShareableLink, Video.file_name)
        .join(Video, Video.id == ShareableLink.video_id)
        .filter(ShareableLink.user_id == owner_id)
        .order_by(ShareableLink.created_at.desc())
        .all()
    )
    return [(link, file_name) for link, file_name in rows]


def record_access(db: Session, link_id: uuid.UUID, accessed_at: datetime) -> bool:
    """Bump ``click_count`` and stamp ``last_accessed_at`` in one UPDATE.

    The increment is evaluated by the database (``click_count + 1``) so
    concurrent resolutions of the same link never lose a count.
    """
    result = db.execute(
        update(ShareableLink)
        .where(ShareableLink.id == link_id)
        .values(
            click_count=ShareableLink.click_count + 1,
            last_accessed_at=accessed_at,
        )
        .execution_options(synchronize_session="fetch")
    )
    db.commit()
    return bool(result.rowcount)


def mark_revoked(db: Session, link: ShareableLink, revoked_at: datetime) -> ShareableLink:
    if link.revoked_at is None:
        link.revoked_at = revoked_at
        db.commit()
        db.refresh(link)
    return link


__all__ = [
    "get_link",
    "get_owned_link",
    "insert_link",
    "list_links_for_owner",
    "mark_revoked",
    "record_access",
]
