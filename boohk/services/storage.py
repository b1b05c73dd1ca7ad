"""
Object storage for uploads (signatures, company files, generated PDFs).

Uses any S3-compatible bucket through boto3.
"""
import logging
import os
import re
import uuid
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from boohk.timeutil import epoch_ms

logger = logging.getLogger(__name__)

STORAGE_ENDPOINT_URL = os.getenv("STORAGE_ENDPOINT_URL")
STORAGE_ACCESS_KEY_ID = os.getenv("STORAGE_ACCESS_KEY_ID")
STORAGE_SECRET_ACCESS_KEY = os.getenv("STORAGE_SECRET_ACCESS_KEY")
STORAGE_REGION = os.getenv("STORAGE_REGION", "auto")
STORAGE_BUCKET_NAME = os.getenv("STORAGE_BUCKET_NAME", "boohk")
STORAGE_PUBLIC_URL = os.getenv("STORAGE_PUBLIC_URL", "")

MAX_UPLOAD_SIZE = int(os.getenv("MAX_UPLOAD_SIZE_MB", "50")) * 1024 * 1024


class StorageError(Exception):
    """Raised when an object cannot be written to storage."""


def get_storage_client():
    """Get configured boto3 client for the object store"""
    return boto3.client(
        "s3",
        endpoint_url=STORAGE_ENDPOINT_URL,
        aws_access_key_id=STORAGE_ACCESS_KEY_ID,
        aws_secret_access_key=STORAGE_SECRET_ACCESS_KEY,
        config=Config(signature_version="s3v4"),
        region_name=STORAGE_REGION,
    )


def public_url(key: str) -> str:
    if STORAGE_PUBLIC_URL:
        return f"{STORAGE_PUBLIC_URL.rstrip('/')}/{key}"
    return f"s3://{STORAGE_BUCKET_NAME}/{key}"


def safe_filename(filename: Optional[str]) -> str:
    name = os.path.basename(filename or "file")
    return re.sub(r"[^A-Za-z0-9._-]+", "_", name) or "file"


def upload_bytes(key: str, data: bytes, content_type: str = "application/octet-stream", client=None) -> str:
    """
    Write bytes to the bucket.

    Returns:
        Public URL of the stored object

    Raises:
        StorageError: If the upload fails
    """
    client = client or get_storage_client()
    try:
        client.put_object(
            Bucket=STORAGE_BUCKET_NAME,
            Key=key,
            Body=data,
            ContentType=content_type,
        )
    except (BotoCoreError, ClientError) as e:
        logger.error(f"Failed to upload {key}: {e}")
        raise StorageError(f"Failed to upload {key}") from e

    logger.info(f"Uploaded {key} ({len(data)} bytes)")
    return public_url(key)


def signature_key(user_id: str, timestamp_ms: Optional[int] = None) -> str:
    return f"signatures/{user_id}/{timestamp_ms or epoch_ms()}.png"


def upload_signature(user_id: str, png_bytes: bytes, client=None) -> str:
    """Store a user's signature image and return its URL."""
    key = signature_key(user_id)
    try:
        return upload_bytes(key, png_bytes, "image/png", client=client)
    except StorageError as e:
        raise StorageError("Failed to upload signature") from e


def company_file_key(company_id: str, filename: str) -> str:
    return f"companies/{company_id}/files/{uuid.uuid4().hex}_{safe_filename(filename)}"


def upload_company_file(company_id: str, filename: str, data: bytes, content_type: str, client=None) -> dict:
    """Store a company document. Returns the storage key and URL."""
    if len(data) > MAX_UPLOAD_SIZE:
        raise ValueError(f"File exceeds {MAX_UPLOAD_SIZE // (1024 * 1024)} MB limit")
    key = company_file_key(company_id, filename)
    url = upload_bytes(key, data, content_type or "application/octet-stream", client=client)
    return {"key": key, "url": url}
