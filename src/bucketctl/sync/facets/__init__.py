"""
Facet controllers for bucket sub-resources.
"""

from bucketctl.sync.facets.access_logging import LoggingFacet
from bucketctl.sync.facets.base import FacetController
from bucketctl.sync.facets.encryption import EncryptionFacet
from bucketctl.tools.base import BucketAPI

# Reconciliation order
FACET_TYPES: list[type[FacetController]] = [LoggingFacet, EncryptionFacet]


def default_facets(api: BucketAPI) -> list[FacetController]:
    """Instantiate every known facet against one bucket API."""
    return [facet_type(api) for facet_type in FACET_TYPES]


__all__ = [
    "FACET_TYPES",
    "EncryptionFacet",
    "FacetController",
    "LoggingFacet",
    "default_facets",
]
