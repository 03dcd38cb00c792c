"""Attach authenticated user information from Authorization headers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse

from core.auth.constants import BEARER_PREFIX
from core.logging import get_logger
from services.auth_tokens import AuthTokenError, decode_token
from services.user_service import fetch_user_by_id

logger = get_logger(__name__)

_BYPASS_PREFIXES = (
    "/docs",
    "/openapi",
    "/health",
    "/api/v1/health",
    "/metrics",
)


@dataclass(frozen=True)
class AuthenticatedUser:
    id: str
    email: str
    name: Optional[str]
    email_verified: bool

    @property
    def display_name(self) -> str:
        return self.name or self.email


def _should_bypass(path: str) -> bool:
    path = path or ""
    return any(path.startswith(prefix) for prefix in _BYPASS_PREFIXES)


def _extract_bearer(header_value: Optional[str]) -> Optional[str]:
    if not header_value:
        return None
    value = header_value.strip()
    if not value:
        return None
    if value.lower().startswith(BEARER_PREFIX):
        token = value[len(BEARER_PREFIX):].strip()
        return token or None
    return None


def _unauthorized(code: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=401, content={"detail": {"code": code, "error": message}})


async def auth_context_middleware(request: Request, call_next):
    """Resolve the bearer token, when present, into ``request.state.user``.

    Requests without a token continue anonymously; routes decide whether a
    user is required. A token that is present but invalid is rejected.
    """
    request.state.user = None
    path = request.url.path if request.url else ""
    if request.method == "OPTIONS" or _should_bypass(path):
        return await call_next(request)

    token = _extract_bearer(request.headers.get("authorization"))
    if not token:
        return await call_next(request)

    try:
        payload = decode_token(token, scope="access")
    except AuthTokenError as exc:
        return _unauthorized(exc.code, str(exc))

    user_id = payload.get("sub")
    if not user_id:
        return _unauthorized("auth.token_invalid", "Access token is invalid.")

    record = fetch_user_by_id(str(user_id))
    if not record:
        logger.info("Rejected token for unknown user %s.", user_id)
        return _unauthorized("auth.user_not_found", "User not found.")

    request.state.user = AuthenticatedUser(
        id=record.id,
        email=record.email,
        name=record.name,
        email_verified=record.email_verified,
    )
    return await call_next(request)


__all__ = ["AuthenticatedUser", "auth_context_middleware"]
