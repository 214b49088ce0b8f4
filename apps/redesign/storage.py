"""
Object storage for redesign images (Cloudflare R2 through the S3 API).
"""
from dataclasses import dataclass
import logging
import uuid

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError
from django.conf import settings
from tenacity import (
    RetryError,
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .errors import UploadFailed

logger = logging.getLogger(__name__)

EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/heif": "heif",
}

@dataclass
class StoredImage:
    key: str
    url: str


def _r2_client():
    endpoint_url = f"https://{settings.R2_ACCOUNT_ID}.r2.cloudflarestorage.com"

    return boto3.client(
        "s3",
        endpoint_url=endpoint_url,
        aws_access_key_id=settings.R2_ACCESS_KEY_ID,
        aws_secret_access_key=settings.R2_SECRET_ACCESS_KEY,
        region_name="auto",
        config=Config(signature_version="s3v4"),
    )


def build_key(subdir: str, mime_type: str, filename: str = None) -> str:
    filename = filename or f"{uuid.uuid4().hex}.{EXTENSIONS.get(mime_type, 'png')}"
    return f"{subdir.strip('/')}/{filename}"


def public_url(key: str) -> str:
    base = settings.R2_PUBLIC_BASE_URL.rstrip("/")
    return f"{base}/{key}" if base else key


def _put_bytes(client, key: str, data: bytes, content_type: str):
    # Same key on every attempt, so a retried put simply overwrites
    client.put_object(
        Bucket=settings.R2_BUCKET,
        Key=key,
        Body=data,
        ContentType=content_type,
        CacheControl="public, max-age=31536000, immutable",
    )


def upload_image(data: bytes, mime_type: str, *, subdir: str, filename: str = None,
                 max_attempts: int = None, backoff_seconds: float = None, client=None) -> StoredImage:
    """
    Upload image bytes, retrying with exponential backoff.
    Raises UploadFailed once the attempt budget is spent.
    """
    max_attempts = max_attempts or settings.REDESIGN_UPLOAD_MAX_ATTEMPTS
    if backoff_seconds is None:
        backoff_seconds = settings.REDESIGN_UPLOAD_BACKOFF_SECONDS

    key = build_key(subdir, mime_type, filename)
    client = client or _r2_client()

    retrying = Retrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=backoff_seconds, min=backoff_seconds, max=backoff_seconds * 8),
        retry=retry_if_exception_type((BotoCoreError, ClientError)),
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )
    try:
        retrying(_put_bytes, client, key, data, mime_type)
    except RetryError as e:
        last = e.last_attempt.exception()
        logger.error(f"Upload of {key} failed after {max_attempts} attempts: {last}")
        raise UploadFailed(f"Failed to upload after {max_attempts} attempts") from last

    logger.info(f"Uploaded {key} ({len(data)} bytes)")
    return StoredImage(key=key, url=public_url(key))


def delete_image(key: str, client=None):
    client = client or _r2_client()
    client.delete_object(Bucket=settings.R2_BUCKET, Key=key)
    logger.info(f"Deleted {key}")
