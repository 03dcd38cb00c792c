"""Access decisions for shareable links.

``evaluate_access`` is a pure function of the link, the requester's verified
email and the evaluation time. Precedence is fixed:

1. ``REVOKED`` when the link carries a revocation stamp at or before ``now``.
2. ``EXPIRED`` when ``now`` is strictly after ``expires_at``.
3. Public links are ``ALLOW`` for everybody, signed in or not.
4. Private links are ``NEED_AUTH`` without an email, ``ALLOW`` when the email
   is listed, ``DENY`` otherwise.

Membership is an exact, case-sensitive string comparison against the stored
list. Addresses are never lowercased or trimmed here: ``"A@x.com"`` does not
match ``"a@x.com"``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Sequence


class AccessDecision(str, Enum):
    ALLOW = "allow"
    DENY = "deny"
    EXPIRED = "expired"
    NEED_AUTH = "need_auth"
    REVOKED = "revoked"

    @property
    def allowed(self) -> bool:
        return self is AccessDecision.ALLOW


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Return ``value`` as an aware UTC datetime; naive values are read as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_member(access_emails: Optional[Sequence[str]], email: str) -> bool:
    return email in (access_emails or ())


def evaluate_access(link: Any, requester_email: Optional[str], now: datetime) -> AccessDecision:
    """Decide whether ``requester_email`` may view ``link`` at ``now``.

    ``link`` only needs ``public``, ``access_emails``, ``expires_at`` and
    (optionally) ``revoked_at`` attributes, so ORM rows and plain objects both
    work.
    """
    current = as_utc(now)

    revoked_at = as_utc(getattr(link, "revoked_at", None))
    if revoked_at is not None and revoked_at <= current:
        return AccessDecision.REVOKED

    expires_at = as_utc(link.expires_at)
    if expires_at is not None and current > expires_at:
        return AccessDecision.EXPIRED

    if link.public:
        return AccessDecision.ALLOW
    if not requester_email:
        return AccessDecision.NEED_AUTH
    if is_member(link.access_emails, requester_email):
        return AccessDecision.ALLOW
    return AccessDecision.DENY


__all__ = ["AccessDecision", "as_utc", "evaluate_access", "is_member"]
