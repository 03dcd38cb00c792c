"""Service layer for shareable video links.

Creation checks that the caller owns the video, normalizes the visibility
inputs, persists the link and, for private links, queues an invitation for
the listed viewers. Resolution loads the link, asks
:func:`services.link_access.evaluate_access` for a decision and only counts
the view when access is granted.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Any, Dict, Iterable, List, Optional, Union

from sqlalchemy.orm import Session

from core.env import env_str
from core.logging import get_logger
from models.share_link import ShareableLink
from services import invitation_queue, share_link_metrics, share_link_repository, video_service
from services.id_utils import normalize_uuid
from services.invitation_queue import EnqueueResult
from services.link_access import AccessDecision, as_utc, evaluate_access

logger = get_logger(__name__)

APP_BASE_URL = env_str("APP_BASE_URL", "") or ""

ExpiryInput = Union[str, date, datetime, None]


class ShareLinkError(RuntimeError):
    """Base error carrying the HTTP status and a structured detail payload."""

    status_code = 500
    default_code = "share.internal"

    def __init__(self, message: str, *, code: Optional[str] = None, extra: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.extra = dict(extra or {})

    def to_detail(self) -> Dict[str, Any]:
        detail: Dict[str, Any] = {"code": self.code, "error": self.message}
        detail.update(self.extra)
        return detail


class ShareLinkValidationError(ShareLinkError):
    status_code = 400
    default_code = "share.validation"


class ShareLinkNotFoundError(ShareLinkError):
    status_code = 404
    default_code = "share.not_found"


class ShareLinkForbiddenError(ShareLinkError):
    status_code = 403
    default_code = "share.access_denied"


@dataclass(frozen=True)
class CreatedShareLink:
    link: ShareableLink
    url: str
    invitation: Optional[EnqueueResult] = None


@dataclass(frozen=True)
class OwnedShareLink:
    link: ShareableLink
    url: str
    video_title: str


@dataclass(frozen=True)
class ResolvedVideo:
    id: uuid.UUID
    video_id: uuid.UUID
    file_name: str
    file_url: str
    thumbnail_url: Optional[str]
    public: bool


def build_share_url(link_id: Any) -> str:
    return f"{APP_BASE_URL.rstrip('/')}/share/{link_id}"


def parse_expiry(value: ExpiryInput) -> Optional[datetime]:
    """Turn an ISO-8601 date/datetime into an aware UTC timestamp.

    Date-only input means midnight UTC of that day. Empty input means the
    link never expires.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    raw = str(value).strip()
    if not raw:
        return None
    try:
        return as_utc(datetime.fromisoformat(raw.replace("Z", "+00:00")))
    except (ValueError, OverflowError) as exc:
        raise ShareLinkValidationError(
            "Invalid expiry date",
            code="share.invalid_expiry",
            extra={"field": "expiryDate"},
        ) from exc


def normalize_access_emails(is_public: bool, access_emails: Optional[Iterable[str]]) -> List[str]:
    """Public links never carry an access list; private lists drop blanks and exact repeats."""
    if is_public:
        return []
    normalized: List[str] = []
    for email in access_emails or ():
        if not isinstance(email, str) or not email.strip():
            continue
        if email in normalized:
            continue
        normalized.append(email)
    return normalized


def requester_email(requester: Any) -> Optional[str]:
    """Email used for membership checks: the account email, once verified."""
    if requester is None or not getattr(requester, "email_verified", False):
        return None
    return getattr(requester, "email", None) or None


def _invitation_message(inviter: str, file_name: str, url: str) -> str:
    return f'{inviter} shared the video "{file_name}" with you. Watch it here: {url}'


def create_share_link(
    db: Session,
    *,
    owner_id: str,
    video_id: Any,
    is_public: bool,
    access_emails: Optional[Iterable[str]] = None,
    expiry_date: ExpiryInput = None,
    inviter_name: Optional[str] = None,
) -> CreatedShareLink:
    """Create a shareable link for one of the owner's videos.

    Raises:
        ShareLinkValidationError: ``video_id`` missing or ``expiry_date`` unparseable.
        ShareLinkNotFoundError: the video does not exist or belongs to someone else.
    """
    if video_id is None or not str(video_id).strip():
        raise ShareLinkValidationError("Missing required fields", code="share.video_id_required")

    expires_at = parse_expiry(expiry_date)

    video = video_service.get_owned_video(db, video_id, owner_id)
    if video is None:
        raise ShareLinkNotFoundError("Video not found or access denied", code="share.video_not_found")

    public = bool(is_public)
    emails = normalize_access_emails(public, access_emails)
    link = share_link_repository.insert_link(
        db,
        video_id=video.id,
        owner_id=owner_id,
        public=public,
        access_emails=emails,
        expires_at=expires_at,
    )
    url = build_share_url(link.id)
    share_link_metrics.record_link_created(public)
    logger.info("Created %s share link %s for video %s.", "public" if public else "private", link.id, video.id)

    invitation: Optional[EnqueueResult] = None
    if not public and emails:
        message = _invitation_message(inviter_name or "Someone", video.file_name, url)
        try:
            invitation = invitation_queue.dispatch_invitation(emails, message)
        except Exception as exc:
            logger.warning("Invitation dispatch for link %s failed: %s", link.id, exc, exc_info=True)
            invitation = EnqueueResult(success=False, error=str(exc))

    return CreatedShareLink(link=link, url=url, invitation=invitation)


def _denial(link: ShareableLink, decision: AccessDecision) -> ShareLinkForbiddenError:
    if decision is AccessDecision.REVOKED:
        return ShareLinkForbiddenError("Link has been revoked", code="share.revoked", extra={"revoked": True})
    if decision is AccessDecision.EXPIRED:
        return ShareLinkForbiddenError("Link has expired", code="share.expired", extra={"expired": True})
    if decision is AccessDecision.NEED_AUTH:
        return ShareLinkForbiddenError(
            "Access denied",
            code="share.auth_required",
            extra={"requiresAuth": True, "videoId": str(link.video_id)},
        )
    logger.debug("Denied share link %s for a signed-in viewer outside the access list.", link.id)
    return ShareLinkForbiddenError(
        "Access denied",
        code="share.access_denied",
        extra={"requiresAuth": False, "videoId": str(link.video_id)},
    )


def resolve_share_link(
    db: Session,
    link_id: Any,
    requester: Any = None,
    *,
    now: Optional[datetime] = None,
) -> ResolvedVideo:
    """Resolve ``link_id`` for ``requester`` and count the view when allowed.

    Raises:
        ShareLinkValidationError: ``link_id`` is blank.
        ShareLinkNotFoundError: unknown link, or the video is gone.
        ShareLinkForbiddenError: expired, revoked, sign-in required or not invited.
    """
    if link_id is None or not str(link_id).strip():
        raise ShareLinkValidationError("Missing link ID", code="share.link_id_required")

    parsed = normalize_uuid(link_id)
    link = share_link_repository.get_link(db, parsed) if parsed else None
    if link is None:
        raise ShareLinkNotFoundError("Link not found", code="share.link_not_found")

    current = as_utc(now) if now else datetime.now(timezone.utc)
    decision = evaluate_access(link, requester_email(requester), current)
    share_link_metrics.record_resolution(decision.value)
    if not decision.allowed:
        raise _denial(link, decision)

    video = video_service.get_video(db, link.video_id)
    if video is None:
        logger.warning("Share link %s points at missing video %s.", link.id, link.video_id)
        raise ShareLinkNotFoundError("Video not found", code="share.video_missing")

    share_link_repository.record_access(db, link.id, current)
    return ResolvedVideo(
        id=link.id,
        video_id=link.video_id,
        file_name=video.file_name,
        file_url=video.file_url,
        thumbnail_url=video.thumbnail_url,
        public=bool(link.public),
    )


def list_share_links(db: Session, owner_id: str) -> List[OwnedShareLink]:
    """List the owner's links, newest first, with the video's file name as title."""
    return [
        OwnedShareLink(link=link, url=build_share_url(link.id), video_title=file_name)
        for link, file_name in share_link_repository.list_links_for_owner(db, owner_id)
    ]


def revoke_share_link(
    db: Session,
    *,
    owner_id: str,
    link_id: Any,
    now: Optional[datetime] = None,
) -> ShareableLink:
    """Stamp ``revoked_at`` on one of the owner's links; repeated calls keep the first stamp."""
    parsed = normalize_uuid(link_id)
    link = share_link_repository.get_owned_link(db, parsed, owner_id) if parsed else None
    if link is None:
        raise ShareLinkNotFoundError("Share link not found or access denied", code="share.link_not_found")
    link = share_link_repository.mark_revoked(db, link, as_utc(now) if now else datetime.now(timezone.utc))
    logger.info("Revoked share link %s.", link.id)
    return link


__all__ = [
    "CreatedShareLink",
    "OwnedShareLink",
    "ResolvedVideo",
    "ShareLinkError",
    "ShareLinkForbiddenError",
    "ShareLinkNotFoundError",
    "ShareLinkValidationError",
    "build_share_url",
    "create_share_link",
    "list_share_links",
    "normalize_access_emails",
    "parse_expiry",
    "requester_email",
    "resolve_share_link",
    "revoke_share_link",
]
