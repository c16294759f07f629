"""
Server access logging facet.

S3 has no delete call for logging; an unset configuration shows up as a
GetBucketLogging response without "LoggingEnabled". A bucket whose desired
logging is None while logging is enabled remotely observes as NEEDS_UPDATE.
"""

from typing import Any

from bucketctl.sync.facets.base import FacetController
from bucketctl.sync.models import (
    Bucket,
    LoggingConfiguration,
    TargetGrant,
    TargetGrantee,
)

LOGGING_GET_FAILED = "cannot get Bucket logging configuration"
LOGGING_PUT_FAILED = "cannot put Bucket logging configuration"


def _grantee_to_remote(grantee: TargetGrantee) -> dict[str, Any]:
    remote = {
        "DisplayName": grantee.display_name,
        "EmailAddress": grantee.email_address,
        "ID": grantee.id,
        "Type": grantee.type,
        "URI": grantee.uri,
    }
    return {k: v for k, v in remote.items() if v is not None}


def generate_aws_logging(local: LoggingConfiguration | None) -> dict[str, Any] | None:
    """Render the desired logging configuration as an S3 LoggingEnabled dict.

    TargetPrefix is always present (S3 always reports it); TargetGrants is
    present only when there are grants, matching what S3 returns.
    """
    if local is None:
        return None
    output: dict[str, Any] = {}
    if local.target_bucket is not None:
        output["TargetBucket"] = local.target_bucket
    output["TargetPrefix"] = local.target_prefix if local.target_prefix is not None else ""
    if local.target_grants:
        output["TargetGrants"] = [
            {"Grantee": _grantee_to_remote(g.grantee), "Permission": g.permission}
            for g in local.target_grants
        ]
    return output


def generate_local_logging(remote: dict[str, Any]) -> LoggingConfiguration:
    """Build a LoggingConfiguration from an S3 LoggingEnabled dict."""
    grants = []
    for g in remote.get("TargetGrants") or []:
        grantee = g.get("Grantee") or {}
        grants.append(
            TargetGrant(
                grantee=TargetGrantee(
                    type=grantee.get("Type"),
                    display_name=grantee.get("DisplayName"),
                    email_address=grantee.get("EmailAddress"),
                    id=grantee.get("ID"),
                    uri=grantee.get("URI"),
                ),
                permission=g.get("Permission"),
            )
        )
    return LoggingConfiguration(
        target_bucket=remote.get("TargetBucket"),
        target_prefix=remote.get("TargetPrefix"),
        target_grants=grants,
    )


def build_put_bucket_logging_input(name: str, config: LoggingConfiguration) -> dict[str, Any]:
    """Create the PutBucketLogging request.

    The call replaces the whole configuration, so TargetPrefix and
    TargetGrants are always sent, with "" and [] when unset.
    """
    logging_enabled = generate_aws_logging(config) or {}
    logging_enabled.setdefault("TargetGrants", [])
    return {
        "Bucket": name,
        "BucketLoggingStatus": {"LoggingEnabled": logging_enabled},
    }


class LoggingFacet(FacetController):
    """Controller for the bucket's server access logging configuration."""

    name = "logging"
    desired_type = LoggingConfiguration
    supports_delete = False

    get_failed = LOGGING_GET_FAILED
    put_failed = LOGGING_PUT_FAILED

    def get_desired(self, bucket: Bucket) -> LoggingConfiguration | None:
        return bucket.spec.for_provider.logging_configuration

    def set_desired(self, bucket: Bucket, value: LoggingConfiguration) -> None:
        bucket.spec.for_provider.logging_configuration = value

    def to_remote_shape(self, desired: LoggingConfiguration | None) -> dict[str, Any] | None:
        return generate_aws_logging(desired)

    def to_local_shape(self, remote: dict[str, Any]) -> LoggingConfiguration:
        return generate_local_logging(remote)

    async def _get(self, external_name: str) -> dict[str, Any] | None:
        response = await self.api.get_bucket_logging(external_name)
        return response.get("LoggingEnabled")

    async def _put(self, external_name: str, desired: LoggingConfiguration) -> None:
        await self.api.put_bucket_logging(build_put_bucket_logging_input(external_name, desired))
