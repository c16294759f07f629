"""
FacetController - shared state machine for bucket facets.

A facet is one independently managed sub-configuration of a bucket. Every
facet exposes the same four async operations:

    late_initialize  fill unset desired fields from the remote value
    observe          compare desired and remote, return a ResourceStatus
    create_or_update full-replace the remote value from the desired state
    delete           remove the remote value (no-op without a delete call)

Subclasses supply the field mapping (to_remote_shape / to_local_shape) and
the three remote calls; the protocol itself lives here.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar

from bucketctl.sync.comparator import diff_paths
from bucketctl.sync.errors import RemoteNotConfigured, RemoteReadFailure, RemoteWriteFailure
from bucketctl.sync.lateinit import late_initialize
from bucketctl.sync.models import Bucket, ResourceStatus, get_external_name
from bucketctl.tools.base import BucketAPI

logger = logging.getLogger(__name__)


class FacetController(ABC):
    """
    Base class for facet controllers.

    Class attributes:
        name: Static facet label used in logs, errors and reports
        desired_type: Dataclass of the desired state
        supports_delete: Whether the remote API has a delete call
        ignore_keys: Server-managed remote keys excluded from comparison
        get_failed / put_failed / delete_failed: Error tags per operation
    """

    name: ClassVar[str]
    desired_type: ClassVar[type]
    supports_delete: ClassVar[bool] = False
    ignore_keys: ClassVar[frozenset[str]] = frozenset()

    get_failed: ClassVar[str]
    put_failed: ClassVar[str]
    delete_failed: ClassVar[str] = ""

    def __init__(self, api: BucketAPI) -> None:
        self.api = api

    # ------------------------------------------------------------------
    # Desired state access
    # ------------------------------------------------------------------

    @abstractmethod
    def get_desired(self, bucket: Bucket) -> Any | None:
        """Desired state of this facet, None when unmanaged."""

    @abstractmethod
    def set_desired(self, bucket: Bucket, value: Any) -> None:
        """Store the desired state of this facet on the bucket."""

    # ------------------------------------------------------------------
    # Projector
    # ------------------------------------------------------------------

    @abstractmethod
    def to_remote_shape(self, desired: Any | None) -> dict[str, Any] | None:
        """Canonical remote shape of the desired state; None for None."""

    @abstractmethod
    def to_local_shape(self, remote: dict[str, Any]) -> Any:
        """Desired-state value built from a remote shape."""

    # ------------------------------------------------------------------
    # Remote calls
    # ------------------------------------------------------------------

    @abstractmethod
    async def _get(self, external_name: str) -> dict[str, Any] | None:
        """Remote shape of the facet, None (or RemoteNotConfigured) when unset."""

    @abstractmethod
    async def _put(self, external_name: str, desired: Any) -> None:
        """Full-replace the remote facet from the desired state."""

    async def _delete(self, external_name: str) -> None:
        raise NotImplementedError(f"{self.name} has no delete call")

    async def _read(self, bucket: Bucket, operation: str) -> dict[str, Any] | None:
        external_name = get_external_name(bucket)
        try:
            return await self._get(external_name)
        except RemoteNotConfigured:
            return None
        except Exception as e:
            raise RemoteReadFailure(self.name, operation, self.get_failed) from e

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def late_initialize(self, bucket: Bucket) -> bool:
        """Fill unset desired fields from the remote value.

        Returns:
            True if the desired state changed (the caller should persist it)

        Raises:
            RemoteReadFailure: Remote read failed for a reason other than
                "not configured"
        """
        observed = await self._read(bucket, "late_initialize")
        if observed is None:
            # Nothing remote to initialize from
            return False

        logger.debug(f"called LateInitialize for {self.name}")

        desired = self.get_desired(bucket)
        created = desired is None
        if created:
            desired = self.desired_type()
            self.set_desired(bucket, desired)
        changed = late_initialize(desired, self.to_local_shape(observed))
        return created or changed

    async def observe(self, bucket: Bucket) -> ResourceStatus:
        """Compare desired and remote state.

        Raises:
            RemoteReadFailure: Remote read failed for a reason other than
                "not configured"
        """
        desired = self.get_desired(bucket)
        observed = await self._read(bucket, "observe")

        if desired is None:
            if observed is None:
                return ResourceStatus.UPDATED
            if self.supports_delete:
                return ResourceStatus.NEEDS_DELETION
            return ResourceStatus.NEEDS_UPDATE

        if observed is None:
            return ResourceStatus.NEEDS_UPDATE

        diffs = diff_paths(self.to_remote_shape(desired), observed, ignore_keys=self.ignore_keys)
        if diffs:
            logger.debug(f"{self.name} drift in {get_external_name(bucket)}: {', '.join(diffs)}")
            return ResourceStatus.NEEDS_UPDATE
        return ResourceStatus.UPDATED

    async def create_or_update(self, bucket: Bucket) -> None:
        """Full-replace the remote facet; no-op when desired state is None.

        Raises:
            RemoteWriteFailure: The replace call failed
        """
        desired = self.get_desired(bucket)
        if desired is None:
            return
        try:
            await self._put(get_external_name(bucket), desired)
        except Exception as e:
            raise RemoteWriteFailure(self.name, "create_or_update", self.put_failed) from e

    async def delete(self, bucket: Bucket) -> None:
        """Delete the remote facet; no-op for facets without a delete call.

        Raises:
            RemoteWriteFailure: The delete call failed
        """
        if not self.supports_delete:
            return
        try:
            await self._delete(get_external_name(bucket))
        except Exception as e:
            raise RemoteWriteFailure(self.name, "delete", self.delete_failed) from e
