"""
Bucket facet reconciliation.

This module provides:
- FacetController: shared late-init / observe / apply / delete protocol
- LoggingFacet, EncryptionFacet: the bucket facets
- BucketReconciler: runs every facet against one bucket per pass

Usage:
    from bucketctl.sync import BucketReconciler
    from bucketctl.tools.s3_client import S3BucketClient

    reconciler = BucketReconciler(api=S3BucketClient())
    report = await reconciler.reconcile(bucket)
    if report.late_initialized:
        persist(bucket)
"""

from bucketctl.sync.comparator import diff_paths, is_equal
from bucketctl.sync.errors import (
    BucketCtlError,
    FacetError,
    RemoteNotConfigured,
    RemoteReadFailure,
    RemoteWriteFailure,
)
from bucketctl.sync.facets import (
    EncryptionFacet,
    FacetController,
    LoggingFacet,
    default_facets,
)
from bucketctl.sync.lateinit import late_initialize
from bucketctl.sync.models import (
    Bucket,
    BucketReconcileReport,
    FacetResult,
    ReconcileAction,
    ResourceStatus,
    get_external_name,
)
from bucketctl.sync.reconciler import BucketReconciler

__all__ = [
    # Composition
    "BucketReconciler",
    "default_facets",
    # Facets
    "FacetController",
    "LoggingFacet",
    "EncryptionFacet",
    # Algorithms
    "diff_paths",
    "is_equal",
    "late_initialize",
    # Models
    "Bucket",
    "BucketReconcileReport",
    "FacetResult",
    "ReconcileAction",
    "ResourceStatus",
    "get_external_name",
    # Errors
    "BucketCtlError",
    "FacetError",
    "RemoteNotConfigured",
    "RemoteReadFailure",
    "RemoteWriteFailure",
]
