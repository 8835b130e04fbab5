"""Source product and offer repositories."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from autopilot.db.models.listing import OfferRow, SourceProductRow
from autopilot.repositories.base import BaseRepository


class SourceProductRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, SourceProductRow)

    async def get(self, source_product_id: str, seller_id: str) -> SourceProductRow | None:
        return await self.get_for_seller("source_product_id", source_product_id, seller_id)

    async def get_by_source_id(self, seller_id: str, source_id: str) -> SourceProductRow | None:
        stmt = select(SourceProductRow).where(
            SourceProductRow.seller_id == seller_id,
            SourceProductRow.source_id == source_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()


class OfferRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, OfferRow)

    async def get(self, offer_id: str, seller_id: str) -> OfferRow | None:
        return await self.get_for_seller("offer_id", offer_id, seller_id)

    async def get_by_sku(self, seller_id: str, sku: str) -> OfferRow | None:
        stmt = select(OfferRow).where(OfferRow.seller_id == seller_id, OfferRow.sku == sku)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
