"""S3 storage client for publishing converted images."""

import logging
from typing import Optional

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from .config import Settings

logger = logging.getLogger(__name__)


class S3Storage:
    """S3 client wrapper exposing the single put-object capability the service needs."""

    def __init__(
        self,
        bucket: str,
        region: str,
        access_key: str,
        secret_key: str,
        endpoint_url: Optional[str] = None,
        public_host: str = "s3.{region}.amazonaws.com",
        client=None,
    ):
        """
        Initialize the S3 client.

        Args:
            bucket: Target bucket for uploaded objects
            region: AWS region of the bucket
            access_key: Static access key id
            secret_key: Static secret access key
            endpoint_url: Optional S3-compatible endpoint (MinIO, etc.)
            public_host: Host template used for public URLs; ``{region}`` is substituted
            client: Pre-built boto3 client (mainly for tests)
        """
        self.bucket = bucket
        self.region = region
        self.public_host = public_host.format(region=region)
        self.client = client or boto3.client(
            "s3",
            region_name=region,
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            config=Config(signature_version="s3v4"),
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "S3Storage":
        return cls(
            bucket=settings.aws_s3_bucket,
            region=settings.aws_region,
            access_key=settings.aws_access_key,
            secret_key=settings.aws_secret_key,
            endpoint_url=settings.s3_endpoint_url,
            public_host=settings.s3_public_host,
        )

    def put_object(self, key: str, body: bytes, content_type: Optional[str] = None):
        """
        Upload ``body`` as a new object.

        Args:
            key: S3 object key
            body: Object contents
            content_type: Optional Content-Type stored with the object

        Raises:
            botocore.exceptions.ClientError: On rejected requests
            botocore.exceptions.BotoCoreError: On transport/credential failures
        """
        extra = {"ContentType": content_type} if content_type else {}
        try:
            self.client.put_object(Bucket=self.bucket, Key=key, Body=body, **extra)
            logger.info(f"Uploaded object to s3://{self.bucket}/{key}")
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to upload object to {key}: {e}")
            raise

    def public_url(self, key: str) -> str:
        """Public HTTPS URL for ``key`` (virtual-hosted style)."""
        return f"https://{self.bucket}.{self.public_host}/{key}"
