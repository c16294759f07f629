"""
Remote bucket API protocol.

Facet controllers depend on this protocol only; the boto3 implementation
lives in bucketctl.tools.s3_client and tests use an in-memory fake.

Contract:
- Requests and responses use the S3 API shapes (PascalCase dicts)
- Responses carry no ResponseMetadata
- A facet that is not configured on the bucket is signalled either by an
  absent key in the response (logging) or by raising RemoteNotConfigured
  (encryption); any other failure propagates unchanged
"""

from typing import Any, Protocol


class BucketAPI(Protocol):
    """Bucket sub-resource calls used by the facet controllers."""

    async def get_bucket_logging(self, bucket: str) -> dict[str, Any]:
        """GetBucketLogging; "LoggingEnabled" is absent when logging is off."""
        ...

    async def put_bucket_logging(self, request: dict[str, Any]) -> None:
        """PutBucketLogging with a full request (Bucket, BucketLoggingStatus)."""
        ...

    async def get_bucket_encryption(self, bucket: str) -> dict[str, Any]:
        """GetBucketEncryption; raises RemoteNotConfigured when unset."""
        ...

    async def put_bucket_encryption(self, request: dict[str, Any]) -> None:
        """PutBucketEncryption with a full request."""
        ...

    async def delete_bucket_encryption(self, bucket: str) -> None:
        """DeleteBucketEncryption."""
        ...
