"""Base repository with common CRUD operations."""

from typing import Any, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from autopilot.db.base import Base

T = TypeVar("T", bound=Base)


class BaseRepository:
    """Generic async repository for SQLAlchemy models."""

    def __init__(self, session: AsyncSession, model_class: type[T]):
        self.session = session
        self.model_class = model_class

    async def get_by_id(self, pk_field: str, pk_value: str) -> T | None:
        """Get a single record by primary key."""
        stmt = select(self.model_class).where(
            getattr(self.model_class, pk_field) == pk_value
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_for_seller(self, pk_field: str, pk_value: str, seller_id: str) -> T | None:
        """Get a record by primary key, only if it belongs to the seller."""
        stmt = select(self.model_class).where(
            getattr(self.model_class, pk_field) == pk_value,
            self.model_class.seller_id == seller_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, **kwargs: Any) -> T:
        """Create and persist a new record."""
        row = self.model_class(**kwargs)
        self.session.add(row)
        await self.session.flush()
        return row

    async def update(self, row: T, **kwargs: Any) -> T:
        """Update an existing record."""
        for key, value in kwargs.items():
            setattr(row, key, value)
        await self.session.flush()
        return row

    async def list_for_seller(self, seller_id: str, newest_first: bool = True) -> list[T]:
        """List a seller's records ordered by creation time."""
        order = self.model_class.created_at.desc() if newest_first else self.model_class.created_at.asc()
        stmt = select(self.model_class).where(self.model_class.seller_id == seller_id).order_by(order)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
