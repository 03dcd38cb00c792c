"""Shared FastAPI dependencies."""

from __future__ import annotations

from typing import Optional

from fastapi import HTTPException, Request, status

from web.middleware.auth_context import AuthenticatedUser


def get_optional_user(request: Request) -> Optional[AuthenticatedUser]:
    return getattr(request.state, "user", None)


def get_current_user(request: Request) -> AuthenticatedUser:
    user = getattr(request.state, "user", None)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "auth.required", "error": "Unauthorized"},
        )
    return user
