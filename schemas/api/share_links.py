"""Schemas for shareable link APIs."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ShareLinkCreateRequest(BaseModel):
    # videoId stays optional so a missing value maps to 400 rather than 422.
    videoId: Optional[str] = Field(default=None, description="Identifier of the video to share.")
    isPublic: bool = Field(default=False, description="Anyone with the URL may watch when true.")
    accessEmails: Optional[List[str]] = Field(
        default=None,
        description="Invited viewer emails for private links. Ignored for public links.",
    )
    expiryDate: Optional[str] = Field(
        default=None,
        description="ISO-8601 date or datetime after which the link stops working.",
    )


class ShareLinkResponse(BaseModel):
    id: UUID
    videoId: UUID
    userId: str
    public: bool
    accessEmails: List[str] = Field(default_factory=list)
    expiresAt: Optional[datetime] = None
    clickCount: int = 0
    lastAccessedAt: Optional[datetime] = None
    revokedAt: Optional[datetime] = None
    createdAt: Optional[datetime] = None
    url: str
    videoTitle: Optional[str] = Field(default=None, description="File name of the shared video (list view only).")
    invitationQueued: Optional[bool] = Field(
        default=None,
        description="Whether the invitation job reached the queue (private links only).",
    )

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_link(
        cls,
        link,
        *,
        url: str,
        video_title: Optional[str] = None,
        invitation_queued: Optional[bool] = None,
    ) -> "ShareLinkResponse":
        return cls(
            id=link.id,
            videoId=link.video_id,
            userId=link.user_id,
            public=bool(link.public),
            accessEmails=list(link.access_emails or []),
            expiresAt=link.expires_at,
            clickCount=link.click_count or 0,
            lastAccessedAt=link.last_accessed_at,
            revokedAt=link.revoked_at,
            createdAt=link.created_at,
            url=url,
            videoTitle=video_title,
            invitationQueued=invitation_queued,
        )


class SharedVideoResponse(BaseModel):
    id: UUID
    videoId: UUID
    fileName: str
    fileUrl: str
    thumbnailUrl: Optional[str] = None
    public: bool


__all__ = ["ShareLinkCreateRequest", "ShareLinkResponse", "SharedVideoResponse"]
