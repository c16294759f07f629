"""Remote bucket API clients."""

from bucketctl.tools.base import BucketAPI

__all__ = ["BucketAPI"]
