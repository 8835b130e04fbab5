"""Repositories for API keys, rate-limit windows and the request audit log."""

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from autopilot.db.models.api_key import ApiKeyRow, AuditLogRow, RateLimitWindowRow
from autopilot.repositories.base import BaseRepository


class ApiKeyRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, ApiKeyRow)

    async def get(self, key_id: str) -> ApiKeyRow | None:
        return await self.get_by_id("key_id", key_id)

    async def get_by_hash(self, key_hash: str) -> ApiKeyRow | None:
        """Look up a key by hash, active or not; the caller decides what inactive means."""
        stmt = select(ApiKeyRow).where(ApiKeyRow.key_hash == key_hash)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def touch_last_used(self, key_id: str, now: datetime) -> None:
        """Advance last_used_at, never moving it backwards."""
        stmt = (
            update(ApiKeyRow)
            .where(
                ApiKeyRow.key_id == key_id,
                (ApiKeyRow.last_used_at.is_(None)) | (ApiKeyRow.last_used_at < now),
            )
            .values(last_used_at=now)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)


class RateLimitRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, RateLimitWindowRow)

    def _insert(self):
        dialect = self.session.get_bind().dialect.name
        if dialect == "postgresql":
            return pg_insert(RateLimitWindowRow)
        return sqlite_insert(RateLimitWindowRow)

    async def try_consume(self, api_key_id: str, window_start: datetime, limit: int) -> int | None:
        """Atomically count one request against the window.

        A single ``INSERT ... ON CONFLICT DO UPDATE ... WHERE count < limit``
        statement, so concurrent requests cannot lose increments and the
        counter never passes ``limit``.

        Returns:
            The new counter value, or None when the window is already full.
        """
        stmt = self._insert().values(
            api_key_id=api_key_id,
            window_start=window_start,
            request_count=1,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[RateLimitWindowRow.api_key_id, RateLimitWindowRow.window_start],
            set_={"request_count": RateLimitWindowRow.request_count + 1},
            where=RateLimitWindowRow.request_count < limit,
        ).returning(RateLimitWindowRow.request_count)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_count(self, api_key_id: str, window_start: datetime) -> int:
        stmt = select(RateLimitWindowRow.request_count).where(
            RateLimitWindowRow.api_key_id == api_key_id,
            RateLimitWindowRow.window_start == window_start,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() or 0


class AuditLogRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, AuditLogRow)

    async def list_recent(self, seller_id: str | None = None, limit: int = 100) -> list[AuditLogRow]:
        stmt = select(AuditLogRow).order_by(AuditLogRow.created_at.desc()).limit(limit)
        if seller_id:
            stmt = stmt.where(AuditLogRow.seller_id == seller_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
