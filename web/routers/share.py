"""API endpoints for shareable video links."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.logging import get_logger
from database import get_db
from schemas.api.share_links import ShareLinkCreateRequest, ShareLinkResponse, SharedVideoResponse
from services import share_link_service
from services.share_link_service import ShareLinkError
from web.deps import get_current_user, get_optional_user
from web.middleware.auth_context import AuthenticatedUser

logger = get_logger(__name__)

router = APIRouter(tags=["Share"])


def _http_error(exc: ShareLinkError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.to_detail())


def _internal_error(db: Session, exc: Exception, operation: str) -> HTTPException:
    db.rollback()
    logger.error("Share link %s failed: %s", operation, exc, exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"code": "share.internal", "error": "Internal server error"},
    )


@router.post(
    "/shareable-links/create",
    response_model=ShareLinkResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a shareable link",
)
def create_shareable_link(
    payload: ShareLinkCreateRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a public or private link to one of the caller's videos."""
    try:
        created = share_link_service.create_share_link(
            db,
            owner_id=user.id,
            video_id=payload.videoId,
            is_public=payload.isPublic,
            access_emails=payload.accessEmails,
            expiry_date=payload.expiryDate,
            inviter_name=user.display_name,
        )
    except ShareLinkError as exc:
        raise _http_error(exc) from exc
    except SQLAlchemyError as exc:
        raise _internal_error(db, exc, "create") from exc

    invitation_queued = created.invitation.success if created.invitation else None
    return ShareLinkResponse.from_link(created.link, url=created.url, invitation_queued=invitation_queued)


@router.get(
    "/shareable-links",
    response_model=List[ShareLinkResponse],
    summary="List the caller's shareable links",
)
def list_shareable_links(
    user: AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        owned = share_link_service.list_share_links(db, user.id)
    except SQLAlchemyError as exc:
        raise _internal_error(db, exc, "list") from exc
    return [ShareLinkResponse.from_link(item.link, url=item.url, video_title=item.video_title) for item in owned]


@router.post(
    "/shareable-links/{link_id}/revoke",
    response_model=ShareLinkResponse,
    summary="Revoke a shareable link",
)
def revoke_shareable_link(
    link_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Stop a link from resolving before its expiry date."""
    try:
        link = share_link_service.revoke_share_link(db, owner_id=user.id, link_id=link_id)
    except ShareLinkError as exc:
        raise _http_error(exc) from exc
    except SQLAlchemyError as exc:
        raise _internal_error(db, exc, "revoke") from exc
    return ShareLinkResponse.from_link(link, url=share_link_service.build_share_url(link.id))


# Public endpoint: the caller's identity is optional.
@router.get(
    "/share/{link_id}",
    response_model=SharedVideoResponse,
    summary="Resolve a shareable link",
)
def resolve_shared_video(
    link_id: str,
    user: Optional[AuthenticatedUser] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    """Return the shared video's metadata when the caller may watch it.

    403 responses carry ``requiresAuth`` so clients can prompt sign-in
    instead of showing a hard denial.
    """
    try:
        resolved = share_link_service.resolve_share_link(db, link_id, user)
    except ShareLinkError as exc:
        raise _http_error(exc) from exc
    except SQLAlchemyError as exc:
        raise _internal_error(db, exc, "resolve") from exc

    return SharedVideoResponse(
        id=resolved.id,
        videoId=resolved.video_id,
        fileName=resolved.file_name,
        fileUrl=resolved.file_url,
        thumbnailUrl=resolved.thumbnail_url,
        public=resolved.public,
    )


__all__ = ["router"]
