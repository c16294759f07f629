"""
Tests for the boto3-backed bucket client.

Uses botocore's Stubber so no request leaves the process.
"""

from unittest.mock import MagicMock

import boto3
import pytest
from botocore.exceptions import ClientError
from botocore.stub import Stubber

from bucketctl.core.settings import EnvSettings
from bucketctl.sync.errors import RemoteNotConfigured
from bucketctl.tools.s3_client import (
    SSE_NOT_FOUND_CODE,
    S3BucketClient,
    create_s3_client,
    is_sse_not_found,
)


@pytest.fixture
def s3():
    return boto3.client(
        "s3",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


@pytest.fixture
def stubber(s3):
    with Stubber(s3) as stub:
        yield stub
        stub.assert_no_pending_responses()


class TestCreateClient:
    """Test client construction from settings."""

    def test_region_endpoint_and_timeouts(self):
        config = EnvSettings(
            aws_region="eu-west-1",
            aws_endpoint_url="http://localhost:9000",
            aws_access_key_id="key",
            aws_secret_access_key="secret",
            s3_read_timeout=5.0,
        )

        client = create_s3_client(config)

        assert client.meta.region_name == "eu-west-1"
        assert client.meta.endpoint_url == "http://localhost:9000"
        assert client.meta.config.read_timeout == 5.0

    def test_default_endpoint(self):
        client = create_s3_client(EnvSettings(aws_region="us-west-2", aws_endpoint_url=""))

        assert "amazonaws.com" in client.meta.endpoint_url


class TestLogging:
    """Test logging calls."""

    @pytest.mark.asyncio
    async def test_get_bucket_logging(self, s3, stubber):
        enabled = {"TargetBucket": "logs", "TargetPrefix": "access/"}
        stubber.add_response("get_bucket_logging", {"LoggingEnabled": enabled}, {"Bucket": "my-bucket"})

        response = await S3BucketClient(s3).get_bucket_logging("my-bucket")

        assert response == {"LoggingEnabled": enabled}

    @pytest.mark.asyncio
    async def test_get_bucket_logging_disabled(self, s3, stubber):
        stubber.add_response("get_bucket_logging", {}, {"Bucket": "my-bucket"})

        assert await S3BucketClient(s3).get_bucket_logging("my-bucket") == {}

    @pytest.mark.asyncio
    async def test_put_bucket_logging_passes_request(self, s3, stubber):
        request = {
            "Bucket": "my-bucket",
            "BucketLoggingStatus": {
                "LoggingEnabled": {"TargetBucket": "logs", "TargetPrefix": "", "TargetGrants": []}
            },
        }
        stubber.add_response("put_bucket_logging", {}, request)

        await S3BucketClient(s3).put_bucket_logging(request)


class TestEncryption:
    """Test encryption calls and the not-found mapping."""

    @pytest.mark.asyncio
    async def test_get_bucket_encryption(self, s3, stubber):
        config = {
            "Rules": [
                {
                    "ApplyServerSideEncryptionByDefault": {"SSEAlgorithm": "AES256"},
                    "BucketKeyEnabled": False,
                }
            ]
        }
        stubber.add_response(
            "get_bucket_encryption",
            {"ServerSideEncryptionConfiguration": config},
            {"Bucket": "my-bucket"},
        )

        response = await S3BucketClient(s3).get_bucket_encryption("my-bucket")

        assert response == {"ServerSideEncryptionConfiguration": config}

    @pytest.mark.asyncio
    async def test_not_found_maps_to_not_configured(self, s3, stubber):
        stubber.add_client_error(
            "get_bucket_encryption",
            service_error_code=SSE_NOT_FOUND_CODE,
            http_status_code=404,
            expected_params={"Bucket": "my-bucket"},
        )

        with pytest.raises(RemoteNotConfigured) as exc_info:
            await S3BucketClient(s3).get_bucket_encryption("my-bucket")

        assert exc_info.value.bucket == "my-bucket"
        assert exc_info.value.facet == "encryption"

    @pytest.mark.asyncio
    async def test_other_client_errors_propagate(self, s3, stubber):
        stubber.add_client_error(
            "get_bucket_encryption",
            service_error_code="AccessDenied",
            http_status_code=403,
            expected_params={"Bucket": "my-bucket"},
        )

        with pytest.raises(ClientError):
            await S3BucketClient(s3).get_bucket_encryption("my-bucket")

    @pytest.mark.asyncio
    async def test_delete_bucket_encryption(self, s3, stubber):
        stubber.add_response("delete_bucket_encryption", {}, {"Bucket": "my-bucket"})

        await S3BucketClient(s3).delete_bucket_encryption("my-bucket")

    @pytest.mark.asyncio
    async def test_put_bucket_encryption(self, s3, stubber):
        request = {
            "Bucket": "my-bucket",
            "ServerSideEncryptionConfiguration": {
                "Rules": [{"ApplyServerSideEncryptionByDefault": {"SSEAlgorithm": "AES256"}}]
            },
        }
        stubber.add_response("put_bucket_encryption", {}, request)

        await S3BucketClient(s3).put_bucket_encryption(request)


class TestResponseHandling:
    """Test response post-processing."""

    @pytest.mark.asyncio
    async def test_response_metadata_is_stripped(self):
        client = MagicMock()
        client.get_bucket_logging.return_value = {
            "ResponseMetadata": {"HTTPStatusCode": 200},
            "LoggingEnabled": {"TargetBucket": "logs", "TargetPrefix": ""},
        }

        response = await S3BucketClient(client).get_bucket_logging("my-bucket")

        assert response == {"LoggingEnabled": {"TargetBucket": "logs", "TargetPrefix": ""}}
        client.get_bucket_logging.assert_called_once_with(Bucket="my-bucket")

    def test_is_sse_not_found(self):
        not_found = ClientError({"Error": {"Code": SSE_NOT_FOUND_CODE}}, "GetBucketEncryption")
        denied = ClientError({"Error": {"Code": "AccessDenied"}}, "GetBucketEncryption")

        assert is_sse_not_found(not_found)
        assert not is_sse_not_found(denied)
        assert not is_sse_not_found(RuntimeError(SSE_NOT_FOUND_CODE))
