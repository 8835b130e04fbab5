"""SKU mapping repository."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from autopilot.db.models.sku_map import SkuMappingRow
from autopilot.repositories.base import BaseRepository


class SkuMappingRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, SkuMappingRow)

    async def get(self, sku_map_id: str, seller_id: str) -> SkuMappingRow | None:
        return await self.get_for_seller("sku_map_id", sku_map_id, seller_id)

    async def get_by_sku(self, seller_id: str, ebay_sku: str) -> SkuMappingRow | None:
        stmt = select(SkuMappingRow).where(
            SkuMappingRow.seller_id == seller_id,
            SkuMappingRow.ebay_sku == ebay_sku,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_active_for_skus(self, seller_id: str, skus: list[str]) -> list[SkuMappingRow]:
        if not skus:
            return []
        stmt = select(SkuMappingRow).where(
            SkuMappingRow.seller_id == seller_id,
            SkuMappingRow.ebay_sku.in_(skus),
            SkuMappingRow.active.is_(True),
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
