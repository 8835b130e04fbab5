"""Worker for orders_sync jobs."""

from sqlalchemy.ext.asyncio import AsyncSession

from autopilot.db.models.job import JobRow
from autopilot.services.order_sync import import_orders
from autopilot.workers.base import BaseWorker


class OrdersSyncWorker(BaseWorker):
    """Import the last days of marketplace orders for the job's seller."""

    async def process(self, job: JobRow, session: AsyncSession) -> dict:
        return await import_orders(
            session,
            job.seller_id,
            self.services.ebay,
            lookback_days=self.services.ebay_order_lookback_days,
        )
