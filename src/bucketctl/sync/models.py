"""
Data models for bucket facet reconciliation.

Defines:
- Desired state: LoggingConfiguration, ServerSideEncryptionConfiguration
  and the Bucket resource that owns them
- ResourceStatus: outcome of observing one facet
- FacetResult / BucketReconcileReport: per-pass results for the caller

Manifest keys are camelCase; attribute names are snake_case.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

EXTERNAL_NAME_ANNOTATION = "crossplane.io/external-name"


def _drop_none(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


# =============================================================================
# References (resolved by the platform, never sent to S3)
# =============================================================================


@dataclass
class Reference:
    """Reference to another managed resource by name."""

    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Reference":
        return cls(name=data["name"])


@dataclass
class Selector:
    """Label selector used to pick a referenced resource."""

    match_labels: dict[str, str] = field(default_factory=dict)
    match_controller: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {"matchLabels": dict(self.match_labels), "matchController": self.match_controller}
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Selector":
        return cls(
            match_labels=dict(data.get("matchLabels") or {}),
            match_controller=data.get("matchController"),
        )


# =============================================================================
# Logging facet
# =============================================================================


@dataclass
class TargetGrantee:
    """
    Grantee of a log delivery grant.

    Attributes:
        type: Grantee type (CanonicalUser, AmazonCustomerByEmail, Group)
        display_name: Screen name of the grantee
        email_address: Email address of the grantee
        id: Canonical user ID of the grantee
        uri: URI of the grantee group
    """

    type: str
    display_name: str | None = None
    email_address: str | None = None
    id: str | None = None
    uri: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "type": self.type,
                "displayName": self.display_name,
                "emailAddress": self.email_address,
                "id": self.id,
                "uri": self.uri,
            }
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TargetGrantee":
        return cls(
            type=data["type"],
            display_name=data.get("displayName"),
            email_address=data.get("emailAddress"),
            id=data.get("id"),
            uri=data.get("uri"),
        )


@dataclass
class TargetGrant:
    """Permission granted to a grantee on the delivered log objects."""

    grantee: TargetGrantee
    permission: str

    def to_dict(self) -> dict[str, Any]:
        return {"grantee": self.grantee.to_dict(), "permission": self.permission}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TargetGrant":
        return cls(
            grantee=TargetGrantee.from_dict(data["grantee"]),
            permission=data["permission"],
        )


@dataclass
class LoggingConfiguration:
    """
    Server access logging for a bucket.

    Attributes:
        target_bucket: Bucket that receives the access logs
        target_prefix: Key prefix for log objects ("" is a valid value)
        target_grants: Ordered grants on the delivered log objects
        target_bucket_ref: Reference resolved into target_bucket
        target_bucket_selector: Selector resolved into target_bucket_ref
    """

    target_bucket: str | None = None
    target_prefix: str | None = None
    target_grants: list[TargetGrant] = field(default_factory=list)
    target_bucket_ref: Reference | None = None
    target_bucket_selector: Selector | None = None

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "targetBucket": self.target_bucket,
                "targetPrefix": self.target_prefix,
                "targetGrants": [g.to_dict() for g in self.target_grants] or None,
                "targetBucketRef": self.target_bucket_ref.to_dict() if self.target_bucket_ref else None,
                "targetBucketSelector": (
                    self.target_bucket_selector.to_dict() if self.target_bucket_selector else None
                ),
            }
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LoggingConfiguration":
        ref = data.get("targetBucketRef")
        selector = data.get("targetBucketSelector")
        return cls(
            target_bucket=data.get("targetBucket"),
            target_prefix=data.get("targetPrefix"),
            target_grants=[TargetGrant.from_dict(g) for g in data.get("targetGrants") or []],
            target_bucket_ref=Reference.from_dict(ref) if ref else None,
            target_bucket_selector=Selector.from_dict(selector) if selector else None,
        )


# =============================================================================
# Encryption facet
# =============================================================================


@dataclass
class ServerSideEncryptionByDefault:
    """Default encryption applied to new objects."""

    sse_algorithm: str
    kms_master_key_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _drop_none({"sseAlgorithm": self.sse_algorithm, "kmsMasterKeyId": self.kms_master_key_id})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ServerSideEncryptionByDefault":
        return cls(sse_algorithm=data["sseAlgorithm"], kms_master_key_id=data.get("kmsMasterKeyId"))


@dataclass
class ServerSideEncryptionRule:
    """One default-encryption rule; S3 may report a rule without a default."""

    apply_server_side_encryption_by_default: ServerSideEncryptionByDefault | None = None

    def to_dict(self) -> dict[str, Any]:
        by_default = self.apply_server_side_encryption_by_default
        if by_default is None:
            return {}
        return {"applyServerSideEncryptionByDefault": by_default.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ServerSideEncryptionRule":
        by_default = data.get("applyServerSideEncryptionByDefault")
        return cls(
            apply_server_side_encryption_by_default=(
                ServerSideEncryptionByDefault.from_dict(by_default) if by_default else None
            )
        )


@dataclass
class ServerSideEncryptionConfiguration:
    """Default server-side encryption rules for a bucket."""

    rules: list[ServerSideEncryptionRule] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"rules": [r.to_dict() for r in self.rules]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ServerSideEncryptionConfiguration":
        return cls(rules=[ServerSideEncryptionRule.from_dict(r) for r in data.get("rules") or []])


# =============================================================================
# Bucket resource
# =============================================================================


@dataclass
class BucketParameters:
    """Desired bucket configuration, one optional value per facet."""

    region: str | None = None
    logging_configuration: LoggingConfiguration | None = None
    server_side_encryption_configuration: ServerSideEncryptionConfiguration | None = None

    def to_dict(self) -> dict[str, Any]:
        sse = self.server_side_encryption_configuration
        return _drop_none(
            {
                "region": self.region,
                "loggingConfiguration": (
                    self.logging_configuration.to_dict() if self.logging_configuration else None
                ),
                "serverSideEncryptionConfiguration": sse.to_dict() if sse else None,
            }
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BucketParameters":
        logging_cfg = data.get("loggingConfiguration")
        sse = data.get("serverSideEncryptionConfiguration")
        return cls(
            region=data.get("region"),
            logging_configuration=(
                LoggingConfiguration.from_dict(logging_cfg) if logging_cfg is not None else None
            ),
            server_side_encryption_configuration=(
                ServerSideEncryptionConfiguration.from_dict(sse) if sse is not None else None
            ),
        )


@dataclass
class BucketSpec:
    for_provider: BucketParameters = field(default_factory=BucketParameters)


@dataclass
class Bucket:
    """
    Bucket resource owning the desired state of every facet.

    Attributes:
        name: Resource name
        spec: Desired state, mutated in place by late initialization
        annotations: Resource annotations (external name lives here)
    """

    name: str
    spec: BucketSpec = field(default_factory=BucketSpec)
    annotations: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        metadata: dict[str, Any] = {"name": self.name}
        if self.annotations:
            metadata["annotations"] = dict(self.annotations)
        return {
            "apiVersion": "s3.aws.crossplane.io/v1beta1",
            "kind": "Bucket",
            "metadata": metadata,
            "spec": {"forProvider": self.spec.for_provider.to_dict()},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Bucket":
        metadata = data.get("metadata") or {}
        spec = data.get("spec") or {}
        return cls(
            name=metadata["name"],
            spec=BucketSpec(for_provider=BucketParameters.from_dict(spec.get("forProvider") or {})),
            annotations=dict(metadata.get("annotations") or {}),
        )


def get_external_name(bucket: Bucket) -> str:
    """Name of the bucket in S3: the external-name annotation, else the resource name."""
    return bucket.annotations.get(EXTERNAL_NAME_ANNOTATION) or bucket.name


# =============================================================================
# Outcomes and results
# =============================================================================


class ResourceStatus(str, Enum):
    """Outcome of observing one facet."""

    UPDATED = "updated"
    NEEDS_UPDATE = "needs_update"
    NEEDS_DELETION = "needs_deletion"


class ReconcileAction(str, Enum):
    """Action taken for a facet during a reconciliation pass."""

    NONE = "none"
    UPDATED = "updated"
    DELETED = "deleted"
    DRY_RUN = "dry_run"
    ERROR = "error"


@dataclass
class FacetResult:
    """
    Result of one facet in one pass.

    Attributes:
        facet: Facet name
        status: Observed outcome (None when observation failed)
        action: Action taken after observation
        error: Error message if any operation failed
        late_initialized: Whether late initialization changed the desired state
    """

    facet: str
    status: ResourceStatus | None = None
    action: ReconcileAction = ReconcileAction.NONE
    error: str | None = None
    late_initialized: bool = False

    @property
    def success(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "facet": self.facet,
            "status": self.status.value if self.status else None,
            "action": self.action.value,
            "error": self.error,
            "late_initialized": self.late_initialized,
        }


@dataclass
class BucketReconcileReport:
    """
    Resource-level aggregation of per-facet results.

    Attributes:
        bucket: Resource name
        external_name: S3 bucket name used for remote calls
        timestamp: When the pass started
        results: Per-facet results in facet order
    """

    bucket: str
    external_name: str
    timestamp: datetime = field(default_factory=datetime.now)
    results: list[FacetResult] = field(default_factory=list)

    @property
    def up_to_date(self) -> bool:
        """True when every facet observed as UPDATED without errors."""
        return all(r.success and r.status == ResourceStatus.UPDATED for r in self.results)

    @property
    def failed(self) -> list[FacetResult]:
        return [r for r in self.results if not r.success]

    @property
    def late_initialized(self) -> bool:
        return any(r.late_initialized for r in self.results)

    def get(self, facet: str) -> FacetResult | None:
        for result in self.results:
            if result.facet == facet:
                return result
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "bucket": self.bucket,
            "external_name": self.external_name,
            "timestamp": self.timestamp.isoformat(),
            "up_to_date": self.up_to_date,
            "late_initialized": self.late_initialized,
            "results": [r.to_dict() for r in self.results],
        }

    def to_markdown(self) -> str:
        """Generate markdown report."""
        lines = [
            f"# Bucket Reconcile Report - {self.bucket} ({self.external_name})",
            "",
            f"- **Time**: {self.timestamp.strftime('%Y-%m-%d %H:%M:%S')}",
            f"- **Up to date**: {'yes' if self.up_to_date else 'no'}",
            f"- **Late initialized**: {'yes' if self.late_initialized else 'no'}",
            "",
            "| Facet | Status | Action | Error |",
            "|-------|--------|--------|-------|",
        ]
        for r in self.results:
            status = r.status.value if r.status else "-"
            lines.append(f"| {r.facet} | {status} | {r.action.value} | {r.error or ''} |")
        return "\n".join(lines)
