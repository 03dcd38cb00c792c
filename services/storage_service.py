"""Helpers for issuing upload credentials against S3-compatible storage (MinIO)."""

from __future__ import annotations

import logging
import mimetypes
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import PurePosixPath
from typing import Optional, Protocol, Union, cast

from minio import Minio

from core.env import env_bool, env_int, env_str

logger = logging.getLogger(__name__)


class MinioClientProtocol(Protocol):
    """Subset of MinIO client methods used within the project."""

    def bucket_exists(self, bucket_name: str) -> bool:
        ...

    def make_bucket(self, bucket_name: str) -> None:
        ...

    def presigned_put_object(
        self,
        bucket_name: str,
        object_name: str,
        expires: timedelta = ...,
    ) -> str:
        ...


MINIO_ENDPOINT = env_str("MINIO_ENDPOINT")
MINIO_ACCESS_KEY = env_str("MINIO_ACCESS_KEY")
MINIO_SECRET_KEY = env_str("MINIO_SECRET_KEY")
MINIO_BUCKET = env_str("MINIO_BUCKET", "vidshare-media") or "vidshare-media"
MINIO_SECURE = env_bool("MINIO_SECURE", True)
MEDIA_CDN_BASE_URL = env_str("MEDIA_CDN_BASE_URL")
UPLOAD_URL_TTL_SECONDS = env_int("UPLOAD_URL_TTL_SECONDS", 1800, minimum=60)

_MAX_PRESIGN_SECONDS = 604800
_client: Optional[MinioClientProtocol] = None


@dataclass(frozen=True)
class UploadTicket:
    """Everything a browser needs to PUT one object straight into the bucket."""

    object_name: str
    upload_url: str
    file_url: str
    expires_at: datetime


def _init_client() -> Optional[MinioClientProtocol]:
    if not (MINIO_ENDPOINT and MINIO_ACCESS_KEY and MINIO_SECRET_KEY):
        return None
    try:
        client = cast(
            MinioClientProtocol,
            Minio(
                MINIO_ENDPOINT,
                access_key=MINIO_ACCESS_KEY,
                secret_key=MINIO_SECRET_KEY,
                secure=MINIO_SECURE,
            ),
        )
        logger.info("MinIO client initialised for %s.", MINIO_ENDPOINT)
        return client
    except Exception as exc:  # pragma: no cover - network/socket failures are logged
        logger.error("Failed to initialise MinIO client: %s", exc, exc_info=True)
        return None


def _client_instance() -> Optional[MinioClientProtocol]:
    global _client
    if _client is None:
        _client = _init_client()
    return _client


def is_enabled() -> bool:
    return _client_instance() is not None


def _ensure_bucket(client: MinioClientProtocol) -> None:
    try:
        if not client.bucket_exists(MINIO_BUCKET):
            client.make_bucket(MINIO_BUCKET)
    except Exception as exc:  # pragma: no cover - propagated as log for ops review
        logger.error("Failed to ensure MinIO bucket '%s': %s", MINIO_BUCKET, exc, exc_info=True)


def _normalize_expiry(value: Union[int, float, timedelta]) -> timedelta:
    if isinstance(value, timedelta):
        seconds = int(value.total_seconds())
    else:
        try:
            seconds = int(float(value))
        except (TypeError, ValueError) as exc:
            raise ValueError("expiry must be seconds as number or datetime.timedelta") from exc
    bound_seconds = max(1, min(seconds, _MAX_PRESIGN_SECONDS))
    return timedelta(seconds=bound_seconds)


def build_object_name(owner_id: str, file_name: Optional[str] = None) -> str:
    """Place each upload under the owner's prefix with a collision-free name."""
    suffix = PurePosixPath(file_name or "").suffix.lower()
    if not suffix and file_name:
        guessed = mimetypes.guess_extension(mimetypes.guess_type(file_name)[0] or "")
        suffix = guessed or ""
    return f"videos/{owner_id}/{uuid.uuid4().hex}{suffix}"


def public_url(object_name: str) -> str:
    """Return the CDN (or direct bucket) URL served for ``object_name``."""
    if MEDIA_CDN_BASE_URL:
        return f"{MEDIA_CDN_BASE_URL.rstrip('/')}/{object_name}"
    scheme = "https" if MINIO_SECURE else "http"
    return f"{scheme}://{MINIO_ENDPOINT}/{MINIO_BUCKET}/{object_name}"


def issue_upload_ticket(
    owner_id: str,
    file_name: Optional[str] = None,
    *,
    expiry_seconds: Union[int, float, timedelta, None] = None,
) -> Optional[UploadTicket]:
    client = _client_instance()
    if not client:
        return None

    _ensure_bucket(client)
    object_name = build_object_name(owner_id, file_name)
    expires = _normalize_expiry(expiry_seconds if expiry_seconds is not None else UPLOAD_URL_TTL_SECONDS)
    try:
        upload_url = client.presigned_put_object(MINIO_BUCKET, object_name, expires=expires)
    except Exception as exc:
        logger.error("Failed to create MinIO upload URL for %s: %s", object_name, exc, exc_info=True)
        return None
    return UploadTicket(
        object_name=object_name,
        upload_url=upload_url,
        file_url=public_url(object_name),
        expires_at=datetime.now(timezone.utc) + expires,
    )


__all__ = [
    "UploadTicket",
    "build_object_name",
    "is_enabled",
    "issue_upload_ticket",
    "public_url",
]
