"""Order repository."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from autopilot.db.models.order import OrderRow
from autopilot.models.enums import OrderFilter, OrderStatus
from autopilot.repositories.base import BaseRepository


class OrderRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, OrderRow)

    async def get(self, order_pk: str, seller_id: str) -> OrderRow | None:
        return await self.get_for_seller("order_pk", order_pk, seller_id)

    async def get_by_marketplace_id(self, seller_id: str, order_id: str) -> OrderRow | None:
        stmt = select(OrderRow).where(OrderRow.seller_id == seller_id, OrderRow.order_id == order_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_filtered(self, seller_id: str, status: OrderFilter, limit: int = 100) -> list[OrderRow]:
        stmt = (
            select(OrderRow)
            .where(OrderRow.seller_id == seller_id)
            .order_by(OrderRow.created_at.desc())
            .limit(limit)
        )
        if status == OrderFilter.AWAITING_FULFILLMENT:
            stmt = stmt.where(
                OrderRow.needs_fulfillment.is_(True),
                OrderRow.order_status.in_([OrderStatus.PENDING, OrderStatus.PROCESSING]),
            )
        elif status == OrderFilter.FULFILLED:
            stmt = stmt.where(OrderRow.order_status == OrderStatus.SHIPPED)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
