"""Video library and upload credential endpoints."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.logging import get_logger
from database import get_db
from schemas.api.videos import UploadAuthResponse, VideoResponse, VideoSaveRequest
from services import storage_service, video_service
from web.deps import get_current_user
from web.middleware.auth_context import AuthenticatedUser

logger = get_logger(__name__)

router = APIRouter(tags=["Videos"])


def _internal_error(db: Session, exc: Exception, operation: str) -> HTTPException:
    db.rollback()
    logger.error("Video %s failed: %s", operation, exc, exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"code": "videos.internal", "error": "Internal server error"},
    )


@router.get("/videos", response_model=List[VideoResponse], summary="List the caller's videos")
def list_videos(
    user: AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        videos = video_service.list_videos(db, user.id)
    except SQLAlchemyError as exc:
        raise _internal_error(db, exc, "list") from exc
    return [VideoResponse.from_video(video) for video in videos]


@router.post("/videos/save", response_model=VideoResponse, summary="Record an uploaded video")
def save_video(
    payload: VideoSaveRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Store metadata once the client has finished uploading the bytes."""
    if not payload.url:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "videos.url_required", "error": "Missing required fields"},
        )
    try:
        video = video_service.save_video(
            db,
            owner_id=user.id,
            file_url=payload.url,
            file_name=payload.name,
            file_size=payload.size,
            thumbnail_url=payload.thumbnailUrl,
        )
    except SQLAlchemyError as exc:
        raise _internal_error(db, exc, "save") from exc
    return VideoResponse.from_video(video)


@router.get("/upload-auth", response_model=UploadAuthResponse, summary="Issue presigned upload parameters")
def upload_auth(
    file_name: Optional[str] = Query(default=None, alias="fileName"),
    user: AuthenticatedUser = Depends(get_current_user),
):
    ticket = storage_service.issue_upload_ticket(user.id, file_name)
    if ticket is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"code": "storage.unavailable", "error": "Object storage is not configured"},
        )
    return UploadAuthResponse(
        objectName=ticket.object_name,
        uploadUrl=ticket.upload_url,
        fileUrl=ticket.file_url,
        expiresAt=ticket.expires_at,
    )


__all__ = ["router"]
