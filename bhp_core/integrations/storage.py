# bhp_core/integrations/storage.py
"""S3/MinIO object storage for uploaded credentials and documents.

Only object keys are persisted in the database; bytes live in the bucket and
are handed out through short-lived presigned URLs.
"""
from __future__ import annotations

import logging
import re
import time
from datetime import timedelta
from functools import lru_cache
from io import BytesIO

from django.conf import settings
from minio import Minio
from minio.error import S3Error
from rest_framework.exceptions import ValidationError

from bhp_core.common.result import Outcome

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9.\-]")


class S3Storage:
    """S3-compatible storage client."""

    def __init__(self):
        self.client = Minio(
            settings.MINIO_ENDPOINT,
            access_key=settings.MINIO_ACCESS_KEY,
            secret_key=settings.MINIO_SECRET_KEY,
            secure=settings.MINIO_USE_SSL,
            region=settings.MINIO_REGION,
        )
        self.bucket = settings.MINIO_BUCKET
        self._bucket_checked = False

    def _ensure_bucket(self) -> None:
        if self._bucket_checked:
            return
        if not self.client.bucket_exists(self.bucket):
            self.client.make_bucket(self.bucket)
        self._bucket_checked = True

    def put_object(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        self._ensure_bucket()
        self.client.put_object(
            self.bucket,
            key,
            BytesIO(data),
            len(data),
            content_type=content_type,
        )
        return key

    def signed_url(self, key: str, expires_in: int | None = None) -> str:
        ttl = expires_in or settings.SIGNED_URL_TTL_SECONDS
        return self.client.presigned_get_object(self.bucket, key, expires=timedelta(seconds=ttl))

    def delete_object(self, key: str) -> Outcome[None]:
        """
        Best-effort removal used by cleanup paths; never raises.
        """
        try:
            self.client.remove_object(self.bucket, key)
        except (S3Error, OSError) as exc:
            logger.exception("Failed to delete object %s from bucket %s", key, self.bucket)
            return Outcome.failure(exc)
        return Outcome.success()


@lru_cache(maxsize=1)
def get_storage() -> S3Storage:
    return S3Storage()


# -------------------------
# Key + upload helpers
# -------------------------

def sanitize_filename(filename: str) -> str:
    return _UNSAFE_CHARS.sub("_", filename or "file")


def generate_file_key(kind: str, user_id: int, filename: str) -> str:
    """
    {kind}/{user_id}/{epoch_ms}-{sanitized filename}
    """
    return f"{kind}/{user_id}/{int(time.time() * 1000)}-{sanitize_filename(filename)}"


def validate_upload(uploaded_file) -> None:
    if uploaded_file is None:
        raise ValidationError({"file": "A file is required."})
    if uploaded_file.size > settings.UPLOAD_MAX_BYTES:
        raise ValidationError({"file": "File size must be less than 10MB."})
    content_type = getattr(uploaded_file, "content_type", "") or ""
    if content_type not in settings.UPLOAD_ALLOWED_CONTENT_TYPES:
        raise ValidationError({"file": "Invalid file type."})


def store_upload(*, kind: str, user_id: int, uploaded_file) -> str:
    """
    Validate and push a Django UploadedFile; returns the object key.
    """
    validate_upload(uploaded_file)
    key = generate_file_key(kind, user_id, uploaded_file.name)
    get_storage().put_object(key, uploaded_file.read(), uploaded_file.content_type)
    logger.info("Stored %s upload %s (%d bytes)", kind, key, uploaded_file.size)
    return key


def discard_objects(keys) -> Outcome[None]:
    """
    Best-effort cleanup of several keys. Returns the first failure, if any.
    """
    storage = get_storage()
    first_error = None
    for key in keys:
        if not key:
            continue
        outcome = storage.delete_object(key)
        if not outcome.ok and first_error is None:
            first_error = outcome.error
    return Outcome.failure(first_error) if first_error is not None else Outcome.success()
