"""Blob store clients.

The file store writer only needs two calls: put an object at a key with
overwrite semantics, and turn that key into a public URL. ``S3BlobStore``
covers both AWS S3 and Cloudflare R2 through boto3.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from functools import partial

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import Settings
from app.exceptions.files import BlobStoreError

logger = logging.getLogger(__name__)


class BlobStore(ABC):
    """Abstract blob store."""

    @abstractmethod
    async def upload(self, key: str, data: bytes, content_type: str | None) -> str:
        """Write ``data`` at ``key``, overwriting any existing object. Returns the stored key."""

    @abstractmethod
    def public_url(self, key: str) -> str:
        """Public URL for an object key."""


class S3BlobStore(BlobStore):
    """S3-compatible blob store backed by boto3."""

    def __init__(
        self,
        bucket: str,
        access_key: str,
        secret_key: str,
        region: str = "us-east-1",
        endpoint_url: str | None = None,
        public_base_url: str | None = None,
    ):
        self.bucket = bucket
        self.region = region
        self.endpoint_url = endpoint_url
        self.public_base_url = public_base_url.rstrip("/") if public_base_url else None
        self.client = boto3.client(
            "s3",
            region_name=region,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            endpoint_url=endpoint_url,
        )
        logger.info(f"S3 blob store initialized: bucket={bucket}, region={region}")

    async def upload(self, key: str, data: bytes, content_type: str | None) -> str:
        extra = {"ContentType": content_type} if content_type else {}
        put = partial(self.client.put_object, Bucket=self.bucket, Key=key, Body=data, **extra)
        try:
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, put)
        except (BotoCoreError, ClientError) as e:
            raise BlobStoreError(f"Upload to {self.bucket}/{key} failed: {e}", key=key) from e
        return key

    def public_url(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{key}"
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}/{key}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"


def build_blob_store(config: Settings) -> BlobStore | None:
    """Construct the configured blob store, or ``None`` when credentials are missing."""
    if not config.has_file_storage:
        logger.warning("File storage credentials not configured; file storage disabled")
        return None

    if config.storage_type == "cloudflare_r2":
        endpoint = config.s3_endpoint_url or (
            f"https://{config.cloudflare_account_id}.r2.cloudflarestorage.com"
        )
        return S3BlobStore(
            bucket=config.cloudflare_bucket_name,
            access_key=config.cloudflare_access_key_id,
            secret_key=config.cloudflare_secret_access_key,
            region="auto",
            endpoint_url=endpoint,
            public_base_url=config.storage_public_base_url,
        )

    return S3BlobStore(
        bucket=config.s3_bucket_name,
        access_key=config.aws_access_key_id,
        secret_key=config.aws_secret_access_key,
        region=config.s3_region,
        endpoint_url=config.s3_endpoint_url,
        public_base_url=config.storage_public_base_url,
    )
