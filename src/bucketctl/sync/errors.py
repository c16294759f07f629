"""
Errors raised by facet controllers and bucket clients.

The core only defines exceptions; callers (reconciler, CLI) decide how to
surface them.
"""


class BucketCtlError(Exception):
    """Base error for bucketctl."""


class ManifestError(BucketCtlError):
    """Bucket manifest missing, unreadable or malformed."""


class RemoteNotConfigured(BucketCtlError):
    """The facet has no remote configuration on the bucket.

    Raised by clients when the remote API reports "not configured". This is a
    recognized condition, not a transport failure.
    """

    def __init__(self, bucket: str, facet: str) -> None:
        self.bucket = bucket
        self.facet = facet
        super().__init__(f"{facet} configuration not found for bucket {bucket}")


class FacetError(BucketCtlError):
    """Failure of one facet operation, tagged with facet and operation."""

    def __init__(self, facet: str, operation: str, message: str) -> None:
        self.facet = facet
        self.operation = operation
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        if self.__cause__ is not None:
            return f"{self.message}: {self.__cause__}"
        return self.message


class RemoteReadFailure(FacetError):
    """Transport, auth or unexpected remote error while reading a facet."""


class RemoteWriteFailure(FacetError):
    """Replace or delete call failed."""
