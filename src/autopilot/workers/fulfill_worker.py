"""Worker for order_fulfill jobs."""

from sqlalchemy.ext.asyncio import AsyncSession

from autopilot.db.models.job import JobRow
from autopilot.services.fulfillment import create_supplier_order
from autopilot.workers.base import BaseWorker


class OrderFulfillWorker(BaseWorker):
    async def process(self, job: JobRow, session: AsyncSession) -> dict:
        order_pk = self.require(job, "orderId")
        return await create_supplier_order(session, job.seller_id, order_pk, self.services.cj)
