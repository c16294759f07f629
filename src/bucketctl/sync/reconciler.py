"""
Bucket Reconciler - run every facet controller against one bucket.

Per facet and pass:
    late_initialize -> observe -> create_or_update | delete | nothing

Facets are independent: a FacetError in one facet is recorded in its
FacetResult and the remaining facets still run. Anything else (including
cancellation) propagates to the caller. Nothing is retried here; the
caller schedules the next pass.
"""

import asyncio
import logging
import weakref
from collections.abc import Awaitable, Callable

from bucketctl.core.settings import settings
from bucketctl.sync.errors import FacetError
from bucketctl.sync.facets import FacetController, default_facets
from bucketctl.sync.models import (
    Bucket,
    BucketReconcileReport,
    FacetResult,
    ReconcileAction,
    ResourceStatus,
    get_external_name,
)
from bucketctl.tools.base import BucketAPI

logger = logging.getLogger(__name__)

FacetStep = Callable[[FacetController, Bucket], Awaitable[FacetResult]]


class BucketReconciler:
    """
    Composer for bucket facet controllers.

    Facets of one bucket run sequentially, or concurrently when
    ``concurrent`` is set. Operations on the same facet of the same bucket
    are always serialized.

    Usage:
        reconciler = BucketReconciler(api=S3BucketClient())
        report = await reconciler.reconcile(bucket)
    """

    def __init__(
        self,
        api: BucketAPI | None = None,
        facets: list[FacetController] | None = None,
        dry_run: bool = False,
        concurrent: bool | None = None,
    ) -> None:
        """
        Initialize BucketReconciler.

        Args:
            api: Bucket API used to build the default facets
            facets: Ordered facet controllers (default: logging, encryption)
            dry_run: If True, observe only and report the intended action
            concurrent: Run facets concurrently (default: from settings)
        """
        if facets is None:
            if api is None:
                from bucketctl.tools.s3_client import S3BucketClient

                api = S3BucketClient()
            facets = default_facets(api)
        self.facets = facets
        self.dry_run = dry_run
        self.concurrent = settings.reconcile_concurrent if concurrent is None else concurrent
        # Entries live only while some pass holds or waits on the lock
        self._locks: weakref.WeakValueDictionary[tuple[str, str], asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )
        self.stats = self._empty_stats()

    @staticmethod
    def _empty_stats() -> dict[str, int]:
        return {action.value: 0 for action in ReconcileAction}

    def _lock(self, bucket: Bucket, facet: FacetController) -> asyncio.Lock:
        key = (get_external_name(bucket), facet.name)
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    async def _run(self, bucket: Bucket, step: FacetStep) -> BucketReconcileReport:
        report = BucketReconcileReport(bucket=bucket.name, external_name=get_external_name(bucket))
        if self.concurrent:
            tasks = [asyncio.ensure_future(step(facet, bucket)) for facet in self.facets]
            try:
                results = await asyncio.gather(*tasks)
            except BaseException:
                # No facet may keep writing after the pass has failed
                for task in tasks:
                    task.cancel()
                raise
            report.results = list(results)
        else:
            for facet in self.facets:
                report.results.append(await step(facet, bucket))

        for result in report.results:
            self.stats[result.action.value] += 1
        return report

    async def _observe_facet(
        self, facet: FacetController, bucket: Bucket, result: FacetResult
    ) -> None:
        result.late_initialized = await facet.late_initialize(bucket)
        if result.late_initialized:
            logger.info(f"Late-initialized {facet.name} of {bucket.name} from remote state")
        result.status = await facet.observe(bucket)

    async def _observe_step(self, facet: FacetController, bucket: Bucket) -> FacetResult:
        async with self._lock(bucket, facet):
            result = FacetResult(facet=facet.name)
            try:
                await self._observe_facet(facet, bucket, result)
            except FacetError as e:
                logger.error(f"Observing {facet.name} of {bucket.name} failed: {e}")
                result.action = ReconcileAction.ERROR
                result.error = str(e)
            return result

    async def _reconcile_step(self, facet: FacetController, bucket: Bucket) -> FacetResult:
        async with self._lock(bucket, facet):
            result = FacetResult(facet=facet.name)
            try:
                await self._observe_facet(facet, bucket, result)
                await self._apply(facet, bucket, result)
            except FacetError as e:
                logger.error(f"Reconciling {facet.name} of {bucket.name} failed: {e}")
                result.action = ReconcileAction.ERROR
                result.error = str(e)
            return result

    async def _apply(self, facet: FacetController, bucket: Bucket, result: FacetResult) -> None:
        if result.status == ResourceStatus.NEEDS_UPDATE:
            if facet.get_desired(bucket) is None:
                # No delete call and nothing declared: leave the remote value alone
                logger.info(f"{facet.name} of {bucket.name} is set remotely but not managed")
                return
            if self.dry_run:
                logger.info(f"[DRY RUN] Would update {facet.name} of {bucket.name}")
                result.action = ReconcileAction.DRY_RUN
                return
            await facet.create_or_update(bucket)
            result.action = ReconcileAction.UPDATED
            logger.info(f"Updated {facet.name} of {bucket.name}")

        elif result.status == ResourceStatus.NEEDS_DELETION:
            if self.dry_run:
                logger.info(f"[DRY RUN] Would delete {facet.name} of {bucket.name}")
                result.action = ReconcileAction.DRY_RUN
                return
            await facet.delete(bucket)
            result.action = ReconcileAction.DELETED
            logger.info(f"Deleted {facet.name} of {bucket.name}")

    async def observe(self, bucket: Bucket) -> BucketReconcileReport:
        """Late-initialize and observe every facet without remote writes.

        Args:
            bucket: Bucket whose desired state may be late-initialized in place

        Returns:
            Report with the observed status of each facet
        """
        return await self._run(bucket, self._observe_step)

    async def reconcile(self, bucket: Bucket) -> BucketReconcileReport:
        """Run one reconciliation pass over every facet.

        Args:
            bucket: Bucket whose desired state may be late-initialized in place

        Returns:
            Report with status and action per facet. Statuses are those
            observed before acting; the next pass confirms convergence.
        """
        return await self._run(bucket, self._reconcile_step)

    def get_stats(self) -> dict[str, int]:
        """Get reconciliation statistics."""
        return self.stats.copy()

    def reset_stats(self) -> None:
        """Reset statistics counters."""
        self.stats = self._empty_stats()
