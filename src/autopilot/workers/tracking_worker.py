"""Worker for tracking_sync jobs."""

from sqlalchemy.ext.asyncio import AsyncSession

from autopilot.db.models.job import JobRow
from autopilot.services.tracking import sync_tracking
from autopilot.workers.base import BaseWorker


class TrackingSyncWorker(BaseWorker):
    async def process(self, job: JobRow, session: AsyncSession) -> dict:
        order_pk = self.require(job, "orderId")
        return await sync_tracking(session, job.seller_id, order_pk, self.services.cj, self.services.ebay)
