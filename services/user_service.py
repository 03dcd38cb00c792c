"""User data access helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import text
from sqlalchemy.orm import Session

from database import session_scope


@dataclass(frozen=True)
class UserRecord:
    id: str
    email: str
    name: Optional[str]
    email_verified: bool


def fetch_user_by_id(user_id: str) -> Optional[UserRecord]:
    """Load a user row by identifier."""

    with session_scope() as db:
        row = (
            db.execute(
                text(
                    """
                    SELECT id, email, name, email_verified_at
                    FROM "users"
                    WHERE id = :id
                    """
                ),
                {"id": user_id},
            )
            .mappings()
            .first()
        )

    if not row:
        return None

    return UserRecord(
        id=str(row["id"]),
        email=row["email"],
        name=row.get("name"),
        email_verified=bool(row.get("email_verified_at")),
    )


def email_exists(db: Session, email: str) -> bool:
    """Return True when ``email`` belongs to a registered account (exact match)."""

    row = db.execute(
        text('SELECT 1 FROM "users" WHERE email = :email LIMIT 1'),
        {"email": email},
    ).first()
    return row is not None


__all__ = ["UserRecord", "email_exists", "fetch_user_by_id"]
