"""Schemas for the video library APIs."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class VideoSaveRequest(BaseModel):
    name: Optional[str] = Field(default=None, description="Display file name. Defaults to 'Untitled Video'.")
    url: Optional[str] = Field(default=None, description="Playable URL of the stored object.")
    thumbnailUrl: Optional[str] = Field(default=None, description="Thumbnail URL when the storage provider made one.")
    size: Optional[int] = Field(default=None, ge=0, description="File size in bytes.")


class VideoResponse(BaseModel):
    id: UUID
    userId: str
    fileName: str
    fileUrl: str
    fileSize: int = 0
    thumbnailUrl: Optional[str] = None
    createdAt: Optional[datetime] = None

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_video(cls, video) -> "VideoResponse":
        return cls(
            id=video.id,
            userId=video.user_id,
            fileName=video.file_name,
            fileUrl=video.file_url,
            fileSize=video.file_size or 0,
            thumbnailUrl=video.thumbnail_url,
            createdAt=video.created_at,
        )


class UploadAuthResponse(BaseModel):
    objectName: str = Field(..., description="Object key the client must upload to.")
    uploadUrl: str = Field(..., description="Presigned PUT URL.")
    fileUrl: str = Field(..., description="URL the object will be served from once uploaded.")
    expiresAt: datetime = Field(..., description="When the presigned URL stops working.")


__all__ = [
    "UploadAuthResponse",
    "VideoResponse",
    "VideoSaveRequest",
]
