"""
S3 bucket client - boto3 implementation of BucketAPI.

boto3 is blocking, so every call runs in the event loop's default executor.
Each method issues exactly one S3 request; retries are left to the caller.
"""

import asyncio
import functools
import logging
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from bucketctl.core.settings import EnvSettings, settings
from bucketctl.sync.errors import RemoteNotConfigured

logger = logging.getLogger(__name__)

SSE_NOT_FOUND_CODE = "ServerSideEncryptionConfigurationNotFoundError"


def create_s3_client(config: EnvSettings | None = None) -> Any:
    """Build a boto3 S3 client from settings.

    Args:
        config: Settings to use (default: global settings)

    Returns:
        botocore S3 client
    """
    config = config or settings
    kwargs: dict[str, Any] = {
        "region_name": config.aws_region,
        "config": Config(
            connect_timeout=config.s3_connect_timeout,
            read_timeout=config.s3_read_timeout,
            retries={"total_max_attempts": config.s3_max_attempts, "mode": "standard"},
        ),
    }
    if config.aws_endpoint_url:
        kwargs["endpoint_url"] = config.aws_endpoint_url
    if config.aws_access_key_id and config.aws_secret_access_key:
        kwargs["aws_access_key_id"] = config.aws_access_key_id
        kwargs["aws_secret_access_key"] = config.aws_secret_access_key
        if config.aws_session_token:
            kwargs["aws_session_token"] = config.aws_session_token
    return boto3.client("s3", **kwargs)


def is_sse_not_found(err: Exception) -> bool:
    """Whether err is S3's "no default encryption configured" error."""
    if not isinstance(err, ClientError):
        return False
    return err.response.get("Error", {}).get("Code") == SSE_NOT_FOUND_CODE


def _strip_metadata(response: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in response.items() if k != "ResponseMetadata"}


class S3BucketClient:
    """
    BucketAPI backed by a boto3 S3 client.

    Usage:
        client = S3BucketClient()
        status = await client.get_bucket_logging("my-bucket")
    """

    def __init__(self, client: Any | None = None) -> None:
        """
        Initialize S3BucketClient.

        Args:
            client: boto3 S3 client (default: create from settings)
        """
        self._client = client or create_s3_client()

    async def _call(self, operation: str, **kwargs: Any) -> dict[str, Any]:
        method = getattr(self._client, operation)
        loop = asyncio.get_running_loop()
        logger.debug(f"s3 {operation} bucket={kwargs.get('Bucket')}")
        response = await loop.run_in_executor(None, functools.partial(method, **kwargs))
        return _strip_metadata(response or {})

    async def get_bucket_logging(self, bucket: str) -> dict[str, Any]:
        return await self._call("get_bucket_logging", Bucket=bucket)

    async def put_bucket_logging(self, request: dict[str, Any]) -> None:
        await self._call("put_bucket_logging", **request)

    async def get_bucket_encryption(self, bucket: str) -> dict[str, Any]:
        try:
            return await self._call("get_bucket_encryption", Bucket=bucket)
        except ClientError as e:
            if is_sse_not_found(e):
                raise RemoteNotConfigured(bucket, "encryption") from e
            raise

    async def put_bucket_encryption(self, request: dict[str, Any]) -> None:
        await self._call("put_bucket_encryption", **request)

    async def delete_bucket_encryption(self, bucket: str) -> None:
        await self._call("delete_bucket_encryption", Bucket=bucket)
