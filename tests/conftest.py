"""Pytest configuration and shared fixtures.

Adds `src/` to `sys.path` so tests can import the project package
without requiring installation.
"""

import copy
import os
import sys
from typing import Any

import pytest

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC_PATH = os.path.join(PROJECT_ROOT, "src")
if SRC_PATH not in sys.path:
    sys.path.insert(0, SRC_PATH)

from bucketctl.sync.errors import RemoteNotConfigured  # noqa: E402
from bucketctl.sync.models import Bucket  # noqa: E402


class FakeBucketAPI:
    """In-memory BucketAPI that answers the way S3 does.

    - GetBucketLogging omits "LoggingEnabled" when logging is off and
      omits "TargetGrants" when there are none
    - GetBucketEncryption raises RemoteNotConfigured when unset and
      reports BucketKeyEnabled on every rule
    """

    def __init__(self) -> None:
        self.logging: dict[str, dict[str, Any]] = {}
        self.encryption: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, str]] = []

    def writes(self) -> list[tuple[str, str]]:
        return [c for c in self.calls if not c[0].startswith("get_")]

    async def get_bucket_logging(self, bucket: str) -> dict[str, Any]:
        self.calls.append(("get_bucket_logging", bucket))
        if bucket not in self.logging:
            return {}
        return {"LoggingEnabled": copy.deepcopy(self.logging[bucket])}

    async def put_bucket_logging(self, request: dict[str, Any]) -> None:
        bucket = request["Bucket"]
        self.calls.append(("put_bucket_logging", bucket))
        enabled = request["BucketLoggingStatus"].get("LoggingEnabled")
        if not enabled:
            self.logging.pop(bucket, None)
            return
        stored = copy.deepcopy(enabled)
        if not stored.get("TargetGrants"):
            stored.pop("TargetGrants", None)
        self.logging[bucket] = stored

    async def get_bucket_encryption(self, bucket: str) -> dict[str, Any]:
        self.calls.append(("get_bucket_encryption", bucket))
        if bucket not in self.encryption:
            raise RemoteNotConfigured(bucket, "encryption")
        config = copy.deepcopy(self.encryption[bucket])
        for rule in config["Rules"]:
            rule.setdefault("BucketKeyEnabled", False)
        return {"ServerSideEncryptionConfiguration": config}

    async def put_bucket_encryption(self, request: dict[str, Any]) -> None:
        bucket = request["Bucket"]
        self.calls.append(("put_bucket_encryption", bucket))
        self.encryption[bucket] = copy.deepcopy(request["ServerSideEncryptionConfiguration"])

    async def delete_bucket_encryption(self, bucket: str) -> None:
        self.calls.append(("delete_bucket_encryption", bucket))
        self.encryption.pop(bucket, None)


@pytest.fixture
def fake_api() -> FakeBucketAPI:
    """Empty in-memory S3."""
    return FakeBucketAPI()


@pytest.fixture
def bucket() -> Bucket:
    """Bucket with no managed facets; S3 name "my-bucket"."""
    return Bucket(name="my-bucket")
