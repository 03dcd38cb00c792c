"""Redis-backed job queue for share invitations.

Jobs are JSON objects pushed onto the head of ``REDIS_QUEUE_KEY`` with
``LPUSH``; the mail worker pops from the tail, so delivery order is FIFO.
Enqueueing is fire-and-forget: failures are logged and reported through
``EnqueueResult`` instead of raising.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional

import redis

from core.env import env_str
from core.logging import get_logger
from services import share_link_metrics

logger = get_logger(__name__)

_REDIS_URL = env_str("REDIS_URL")
QUEUE_KEY = env_str("REDIS_QUEUE_KEY") or "vidshare:invitations"
_CLIENT: Optional["redis.Redis"] = None
_CLIENT_ERROR_LOGGED = False


@dataclass(frozen=True)
class EnqueueResult:
    success: bool
    job_id: Optional[str] = None
    error: Optional[str] = None


def _get_client() -> Optional["redis.Redis"]:
    global _CLIENT, _CLIENT_ERROR_LOGGED  # pylint: disable=global-statement
    if _CLIENT is not None:
        return _CLIENT
    if not _REDIS_URL:
        logger.debug("Invitation queue redis_url missing; enqueue disabled.")
        return None
    try:
        _CLIENT = redis.Redis.from_url(_REDIS_URL, decode_responses=True)
    except Exception as exc:
        if not _CLIENT_ERROR_LOGGED:
            logger.warning("Invitation queue Redis init failed: %s", exc)
            _CLIENT_ERROR_LOGGED = True
        _CLIENT = None
    return _CLIENT


def build_job(job_data: Dict[str, Any]) -> Dict[str, Any]:
    """Wrap ``job_data`` with a generated id and creation timestamp."""
    return {
        "id": str(uuid.uuid4()),
        "createdAt": datetime.now(timezone.utc).isoformat(),
        **job_data,
    }


def push_job(job_data: Dict[str, Any]) -> EnqueueResult:
    client = _get_client()
    if client is None:
        return EnqueueResult(success=False, error="Invitation queue is not configured.")

    job = build_job(job_data)
    try:
        client.lpush(QUEUE_KEY, json.dumps(job, ensure_ascii=False))
    except Exception as exc:
        logger.warning("Failed to push job %s onto %s: %s", job["id"], QUEUE_KEY, exc, exc_info=True)
        return EnqueueResult(success=False, error=str(exc))
    return EnqueueResult(success=True, job_id=job["id"])


def dispatch_invitation(emails: Iterable[str], message: str) -> EnqueueResult:
    """Enqueue one notification job covering every invited address."""
    recipients = list(emails)
    result = push_job({"emails": recipients, "message": message})
    share_link_metrics.record_invitation(result.success)
    if result.success:
        logger.info("Queued invitation job %s for %d recipient(s).", result.job_id, len(recipients))
    else:
        logger.warning("Invitation for %d recipient(s) not queued: %s", len(recipients), result.error)
    return result


def ping() -> bool:
    client = _get_client()
    if client is None:
        return False
    try:
        return bool(client.ping())
    except Exception as exc:
        logger.warning("Invitation queue ping failed: %s", exc)
        return False


__all__ = ["EnqueueResult", "QUEUE_KEY", "build_job", "dispatch_invitation", "ping", "push_job"]
