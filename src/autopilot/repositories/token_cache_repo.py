"""Access token cache repository."""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from autopilot.db.models.token_cache import ApiTokenCacheRow
from autopilot.repositories.base import BaseRepository


class TokenCacheRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, ApiTokenCacheRow)

    async def get_valid(self, cache_id: str, now: datetime) -> str | None:
        row = await self.get_by_id("cache_id", cache_id)
        if row and row.expires_at > now:
            return row.access_token
        return None

    async def store(self, cache_id: str, access_token: str, expires_at: datetime) -> None:
        row = await self.get_by_id("cache_id", cache_id)
        if row:
            await self.update(row, access_token=access_token, expires_at=expires_at)
        else:
            await self.create(cache_id=cache_id, access_token=access_token, expires_at=expires_at)
