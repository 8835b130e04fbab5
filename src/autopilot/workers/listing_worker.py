"""Worker for listing_publish jobs."""

from sqlalchemy.ext.asyncio import AsyncSession

from autopilot.db.models.job import JobRow
from autopilot.services.listings import push_offer
from autopilot.workers.base import BaseWorker


class ListingPublishWorker(BaseWorker):
    async def process(self, job: JobRow, session: AsyncSession) -> dict:
        offer_id = self.require(job, "offerId")
        return await push_offer(
            session,
            job.seller_id,
            offer_id,
            self.services.ebay,
            self.services.ebay_default_category_id,
        )
