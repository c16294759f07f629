"""
Tests for loading and writing bucket manifests.
"""

import pytest
import yaml

from bucketctl.manifest import dump_manifest, load_manifest
from bucketctl.sync.errors import ManifestError
from bucketctl.sync.models import (
    EXTERNAL_NAME_ANNOTATION,
    LoggingConfiguration,
    ServerSideEncryptionByDefault,
    ServerSideEncryptionConfiguration,
    ServerSideEncryptionRule,
)

MANIFEST = """\
apiVersion: s3.aws.crossplane.io/v1beta1
kind: Bucket
metadata:
  name: app-bucket
  annotations:
    crossplane.io/external-name: app-bucket-prod
spec:
  forProvider:
    region: us-east-1
    loggingConfiguration:
      targetBucket: logs-bucket
      targetPrefix: app/
      targetGrants:
        - grantee:
            type: Group
            uri: http://acs.amazonaws.com/groups/s3/LogDelivery
          permission: WRITE
    serverSideEncryptionConfiguration:
      rules:
        - applyServerSideEncryptionByDefault:
            sseAlgorithm: aws:kms
            kmsMasterKeyId: alias/app
---
apiVersion: v1
kind: ConfigMap
metadata:
  name: unrelated
data:
  key: value
---
apiVersion: s3.aws.crossplane.io/v1beta1
kind: Bucket
metadata:
  name: plain-bucket
spec:
  forProvider:
    region: us-east-1
"""


@pytest.fixture
def manifest_path(tmp_path):
    path = tmp_path / "buckets.yaml"
    path.write_text(MANIFEST, encoding="utf-8")
    return path


class TestLoadManifest:
    """Test reading Bucket documents."""

    def test_loads_buckets_in_order(self, manifest_path):
        buckets = load_manifest(manifest_path)

        assert [b.name for b in buckets] == ["app-bucket", "plain-bucket"]

    def test_parses_facets(self, manifest_path):
        bucket = load_manifest(manifest_path)[0]
        params = bucket.spec.for_provider

        assert bucket.annotations[EXTERNAL_NAME_ANNOTATION] == "app-bucket-prod"
        assert params.logging_configuration.target_bucket == "logs-bucket"
        assert params.logging_configuration.target_grants[0].grantee.type == "Group"
        rule = params.server_side_encryption_configuration.rules[0]
        assert rule.apply_server_side_encryption_by_default.kms_master_key_id == "alias/app"

    def test_unset_facets_are_none(self, manifest_path):
        params = load_manifest(manifest_path)[1].spec.for_provider

        assert params.logging_configuration is None
        assert params.server_side_encryption_configuration is None

    def test_missing_file(self, tmp_path):
        with pytest.raises(ManifestError, match="not found"):
            load_manifest(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("kind: Bucket\n  metadata: [\n", encoding="utf-8")

        with pytest.raises(ManifestError, match="Invalid YAML"):
            load_manifest(path)

    def test_bucket_without_name(self, tmp_path):
        path = tmp_path / "noname.yaml"
        path.write_text("kind: Bucket\nmetadata: {}\n", encoding="utf-8")

        with pytest.raises(ManifestError, match="Malformed"):
            load_manifest(path)


class TestDumpManifest:
    """Test writing buckets back."""

    def test_preserves_other_documents(self, manifest_path):
        buckets = load_manifest(manifest_path)
        buckets[1].spec.for_provider.logging_configuration = LoggingConfiguration(
            target_bucket="logs-bucket", target_prefix=""
        )

        dump_manifest(buckets, manifest_path)

        docs = list(yaml.safe_load_all(manifest_path.read_text(encoding="utf-8")))
        assert [d["kind"] for d in docs] == ["Bucket", "ConfigMap", "Bucket"]
        assert docs[1]["data"] == {"key": "value"}
        assert docs[2]["spec"]["forProvider"]["loggingConfiguration"] == {
            "targetBucket": "logs-bucket",
            "targetPrefix": "",
        }

    def test_round_trip_is_stable(self, manifest_path):
        original = load_manifest(manifest_path)

        dump_manifest(original, manifest_path)

        assert load_manifest(manifest_path) == original

    def test_keeps_unmanaged_keys(self, tmp_path):
        path = tmp_path / "full.yaml"
        path.write_text(
            """\
apiVersion: s3.aws.crossplane.io/v1beta1
kind: Bucket
metadata:
  name: my-bucket
  labels:
    team: storage
spec:
  deletionPolicy: Orphan
  providerConfigRef:
    name: example
  forProvider:
    acl: private
    locationConstraint: eu-west-1
    loggingConfiguration:
      targetBucket: logs-bucket
""",
            encoding="utf-8",
        )
        buckets = load_manifest(path)
        buckets[0].spec.for_provider.logging_configuration.target_prefix = "access/"
        buckets[0].spec.for_provider.server_side_encryption_configuration = (
            ServerSideEncryptionConfiguration(
                rules=[
                    ServerSideEncryptionRule(
                        apply_server_side_encryption_by_default=ServerSideEncryptionByDefault(
                            sse_algorithm="AES256"
                        )
                    )
                ]
            )
        )

        dump_manifest(buckets, path)

        doc = yaml.safe_load(path.read_text(encoding="utf-8"))
        assert doc["metadata"]["labels"] == {"team": "storage"}
        assert doc["spec"]["deletionPolicy"] == "Orphan"
        assert doc["spec"]["providerConfigRef"] == {"name": "example"}
        for_provider = doc["spec"]["forProvider"]
        assert for_provider["acl"] == "private"
        assert for_provider["locationConstraint"] == "eu-west-1"
        assert for_provider["loggingConfiguration"] == {
            "targetBucket": "logs-bucket",
            "targetPrefix": "access/",
        }
        assert for_provider["serverSideEncryptionConfiguration"] == {
            "rules": [{"applyServerSideEncryptionByDefault": {"sseAlgorithm": "AES256"}}]
        }

    def test_matches_documents_by_name(self, manifest_path):
        buckets = list(reversed(load_manifest(manifest_path)))
        buckets[0].spec.for_provider.logging_configuration = LoggingConfiguration(
            target_bucket="plain-logs", target_prefix=""
        )

        dump_manifest(buckets, manifest_path)

        docs = list(yaml.safe_load_all(manifest_path.read_text(encoding="utf-8")))
        assert [d["metadata"]["name"] for d in docs] == ["app-bucket", "unrelated", "plain-bucket"]
        assert docs[0]["spec"]["forProvider"]["loggingConfiguration"]["targetBucket"] == "logs-bucket"
        assert docs[2]["spec"]["forProvider"]["loggingConfiguration"]["targetBucket"] == "plain-logs"

    def test_unlisted_bucket_documents_are_kept(self, manifest_path):
        dump_manifest(load_manifest(manifest_path)[:1], manifest_path)

        assert [b.name for b in load_manifest(manifest_path)] == ["app-bucket", "plain-bucket"]

    def test_creates_missing_file(self, tmp_path, bucket):
        path = tmp_path / "new.yaml"

        dump_manifest([bucket], path)

        assert [b.name for b in load_manifest(path)] == ["my-bucket"]
