"""S3 File Storage — uploads lesson videos and homework documents to a bucket.

Invariants:
    - Implements FileStorage (core/service_protocols.py)
    - Object keys are "{folder}/{uuid4 hex}{ext}": never derived from client filenames
    - Upload failures raise StorageError; delete failures are logged and swallowed
      (a dangling object must not block removing the DB reference)

Design Decisions:
    - boto3 client is blocking: calls run in a worker thread via asyncio.to_thread
    - endpoint_url configurable: works against AWS, Wasabi, MinIO alike
    - Public URL from s3_public_base_url when set (CDN), else the virtual-hosted URL
"""

import asyncio
import logging
from uuid import uuid4

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from learnhub.config import Settings
from learnhub.core.errors import StorageError
from learnhub.core.service_protocols import StoredFile
from learnhub.core.upload_rules import file_extension

logger = logging.getLogger(__name__)


class S3FileStorage:
    """FileStorage backed by an S3-compatible bucket."""

    def __init__(self, settings: Settings):
        self._bucket = settings.s3_bucket
        self._region = settings.s3_region
        self._public_base_url = settings.s3_public_base_url
        self._client = boto3.client(
            "s3",
            region_name=settings.s3_region,
            endpoint_url=settings.s3_endpoint_url,
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
        )

    def _public_url(self, key: str) -> str:
        if self._public_base_url:
            return f"{self._public_base_url.rstrip('/')}/{key}"
        return f"https://{self._bucket}.s3.{self._region}.amazonaws.com/{key}"

    async def upload(
        self, content: bytes, folder: str, filename: str | None, content_type: str | None,
    ) -> StoredFile:
        if not self._bucket:
            raise StorageError("storage bucket is not configured")
        key = f"{folder}/{uuid4().hex}{file_extension(filename)}"
        extra = {"ContentType": content_type} if content_type else {}
        try:
            await asyncio.to_thread(
                self._client.put_object,
                Bucket=self._bucket, Key=key, Body=content, **extra,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"S3 upload failed for {key}: {e}")
            raise StorageError("upload failed")
        logger.info(f"Stored object {key} ({len(content)} bytes)")
        return StoredFile(url=self._public_url(key), path=key, size=len(content))

    async def delete(self, path: str) -> None:
        if not self._bucket or not path:
            return
        try:
            await asyncio.to_thread(
                self._client.delete_object, Bucket=self._bucket, Key=path,
            )
        except (BotoCoreError, ClientError) as e:
            logger.warning(f"S3 delete failed for {path}: {e}")
