"""
Default server-side encryption facet.

GetBucketEncryption fails with ServerSideEncryptionConfigurationNotFoundError
when no default encryption is set; the client maps that to
RemoteNotConfigured. Unlike logging, encryption can be deleted, so a remote
configuration without desired state observes as NEEDS_DELETION.
"""

from typing import Any

from bucketctl.sync.facets.base import FacetController
from bucketctl.sync.models import (
    Bucket,
    ServerSideEncryptionByDefault,
    ServerSideEncryptionConfiguration,
    ServerSideEncryptionRule,
)

SSE_GET_FAILED = "cannot get Bucket encryption configuration"
SSE_PUT_FAILED = "cannot put Bucket encryption configuration"
SSE_DELETE_FAILED = "cannot delete Bucket encryption configuration"


def generate_aws_encryption(
    local: ServerSideEncryptionConfiguration | None,
) -> dict[str, Any] | None:
    """Render the desired encryption as an S3 ServerSideEncryptionConfiguration dict.

    A rule without a default renders as an empty rule, the way S3 reports it.
    """
    if local is None:
        return None
    rules = []
    for rule in local.rules:
        by_default = rule.apply_server_side_encryption_by_default
        if by_default is None:
            rules.append({})
            continue
        remote_default = {"SSEAlgorithm": by_default.sse_algorithm}
        if by_default.kms_master_key_id is not None:
            remote_default["KMSMasterKeyID"] = by_default.kms_master_key_id
        rules.append({"ApplyServerSideEncryptionByDefault": remote_default})
    return {"Rules": rules}


def generate_local_encryption(remote: dict[str, Any]) -> ServerSideEncryptionConfiguration:
    """Build a ServerSideEncryptionConfiguration from the S3 shape."""
    rules = []
    for rule in remote.get("Rules") or []:
        by_default = rule.get("ApplyServerSideEncryptionByDefault")
        if by_default is None:
            rules.append(ServerSideEncryptionRule())
            continue
        rules.append(
            ServerSideEncryptionRule(
                apply_server_side_encryption_by_default=ServerSideEncryptionByDefault(
                    sse_algorithm=by_default.get("SSEAlgorithm"),
                    kms_master_key_id=by_default.get("KMSMasterKeyID"),
                )
            )
        )
    return ServerSideEncryptionConfiguration(rules=rules)


def build_put_bucket_encryption_input(
    name: str, config: ServerSideEncryptionConfiguration
) -> dict[str, Any]:
    """Create the PutBucketEncryption request from the full desired state."""
    return {
        "Bucket": name,
        "ServerSideEncryptionConfiguration": generate_aws_encryption(config),
    }


class EncryptionFacet(FacetController):
    """Controller for the bucket's default server-side encryption."""

    name = "encryption"
    desired_type = ServerSideEncryptionConfiguration
    supports_delete = True
    # S3 reports BucketKeyEnabled on every rule whether or not it was sent
    ignore_keys = frozenset({"BucketKeyEnabled"})

    get_failed = SSE_GET_FAILED
    put_failed = SSE_PUT_FAILED
    delete_failed = SSE_DELETE_FAILED

    def get_desired(self, bucket: Bucket) -> ServerSideEncryptionConfiguration | None:
        return bucket.spec.for_provider.server_side_encryption_configuration

    def set_desired(self, bucket: Bucket, value: ServerSideEncryptionConfiguration) -> None:
        bucket.spec.for_provider.server_side_encryption_configuration = value

    def to_remote_shape(
        self, desired: ServerSideEncryptionConfiguration | None
    ) -> dict[str, Any] | None:
        return generate_aws_encryption(desired)

    def to_local_shape(self, remote: dict[str, Any]) -> ServerSideEncryptionConfiguration:
        return generate_local_encryption(remote)

    async def _get(self, external_name: str) -> dict[str, Any] | None:
        response = await self.api.get_bucket_encryption(external_name)
        return response.get("ServerSideEncryptionConfiguration")

    async def _put(self, external_name: str, desired: ServerSideEncryptionConfiguration) -> None:
        await self.api.put_bucket_encryption(
            build_put_bucket_encryption_input(external_name, desired)
        )

    async def _delete(self, external_name: str) -> None:
        await self.api.delete_bucket_encryption(external_name)
