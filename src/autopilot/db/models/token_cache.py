"""Third-party access token cache."""

from datetime import datetime

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from autopilot.db.base import Base, TimestampMixin
from autopilot.db.types import UTCDateTime


class ApiTokenCacheRow(Base, TimestampMixin):
    __tablename__ = "api_token_cache"

    cache_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    access_token: Mapped[str] = mapped_column(Text, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
