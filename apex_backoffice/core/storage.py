"""
S3 document storage for policy documents and client attachments.

Files are written under ``<UPLOAD_PREFIX>/<epoch-ms>_<filename>`` and the
resulting object URL is what gets stored on client and renewal rows.
boto3 is synchronous, so uploads run in a worker thread to keep the event
loop free.
"""

import asyncio
import logging
import re
import time
from functools import lru_cache
from typing import Any, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from apex_backoffice.core.config import settings
from apex_backoffice.core.exceptions import StorageFailureException

logger = logging.getLogger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def build_key(filename: str, prefix: Optional[str] = None) -> str:
    """Return a unique, URL-safe object key for ``filename``."""
    safe_name = _UNSAFE_KEY_CHARS.sub("_", filename.strip()).strip("_") or "file"
    stamp = int(time.time() * 1000)
    prefix = (settings.UPLOAD_PREFIX if prefix is None else prefix).strip("/")
    return f"{prefix}/{stamp}_{safe_name}" if prefix else f"{stamp}_{safe_name}"


class DocumentStorage:
    """Thin wrapper over an S3 client bound to one bucket."""

    def __init__(
        self,
        client: Any,
        bucket: str,
        region: str,
        endpoint_url: Optional[str] = None,
    ):
        self._client = client
        self._bucket = bucket
        self._region = region
        self._endpoint_url = endpoint_url

    def object_url(self, key: str) -> str:
        if self._endpoint_url:
            return f"{self._endpoint_url.rstrip('/')}/{self._bucket}/{key}"
        return f"https://{self._bucket}.s3.{self._region}.amazonaws.com/{key}"

    async def upload(self, filename: str, body: bytes, content_type: Optional[str]) -> str:
        """
        Store ``body`` and return its public URL.

        Raises :class:`StorageFailureException` when S3 rejects the upload;
        the S3 error detail is logged, not returned.
        """
        key = build_key(filename)
        params = {
            "Bucket": self._bucket,
            "Key": key,
            "Body": body,
            "ContentType": content_type or "application/octet-stream",
        }
        logger.info("Uploading %d bytes to s3://%s/%s", len(body), self._bucket, key)
        try:
            await asyncio.to_thread(self._client.put_object, **params)
        except (BotoCoreError, ClientError) as exc:
            logger.error("S3 upload of %s failed: %s", key, exc)
            raise StorageFailureException("Failed to upload file") from exc

        url = self.object_url(key)
        logger.info("Stored document %s", url)
        return url


@lru_cache(maxsize=1)
def get_document_storage() -> DocumentStorage:
    """
    FastAPI dependency returning the process-wide document store.

    The boto3 client is built on first use so the API can start (and tests
    can run) without AWS credentials configured.
    """
    client = boto3.client(
        "s3",
        region_name=settings.AWS_REGION,
        endpoint_url=settings.S3_ENDPOINT_URL,
        aws_access_key_id=settings.AWS_ACCESS_KEY or None,
        aws_secret_access_key=settings.AWS_SECRET_KEY or None,
        config=Config(
            retries={"max_attempts": 3, "mode": "standard"},
            connect_timeout=5,
            read_timeout=15,
        ),
    )
    return DocumentStorage(
        client,
        bucket=settings.AWS_BUCKET_NAME,
        region=settings.AWS_REGION,
        endpoint_url=settings.S3_ENDPOINT_URL,
    )
