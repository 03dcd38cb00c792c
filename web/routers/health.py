"""Health-related API endpoints."""

from __future__ import annotations

from typing import Optional, Tuple

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from database import session_scope
from services import invitation_queue, storage_service

router = APIRouter(prefix="/health", tags=["Health"])


def ping_database() -> Tuple[bool, Optional[str]]:
    """Return database connectivity status and optional error message."""
    try:
        with session_scope() as db:
            db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        return False, str(exc)
    return True, None


@router.get(
    "/status",
    summary="Service runtime status",
    description="Reachability of the database, the invitation queue and object storage.",
)
def read_service_status():
    db_ok, db_error = ping_database()
    payload = {
        "status": "ok" if db_ok else "degraded",
        "database": {"ok": db_ok},
        "queue": {"ok": invitation_queue.ping()},
        "storage": {"configured": storage_service.is_enabled()},
    }
    if db_error:
        payload["database"]["error"] = db_error
    return payload


__all__ = ["router", "ping_database"]
