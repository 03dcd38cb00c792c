"""Account lookup endpoints used while composing private share links."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.logging import get_logger
from database import get_db
from schemas.api.account import CheckEmailRequest, CheckEmailResponse
from services.user_service import email_exists
from web.deps import get_current_user
from web.middleware.auth_context import AuthenticatedUser

logger = get_logger(__name__)

router = APIRouter(tags=["Account"])


@router.post("/check-email", response_model=CheckEmailResponse, summary="Check whether an email is registered")
def check_email(
    payload: CheckEmailRequest,
    _user: AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not payload.email:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "account.email_required", "error": "Email is required"},
        )
    try:
        exists = email_exists(db, payload.email)
    except SQLAlchemyError as exc:
        logger.error("Email lookup failed: %s", exc, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"code": "account.internal", "error": "Internal server error"},
        ) from exc
    return CheckEmailResponse(exists=exists)


__all__ = ["router"]
