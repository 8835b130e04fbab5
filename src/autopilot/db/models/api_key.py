"""API key, rate-limit window and audit log tables."""

from datetime import datetime

from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from autopilot.db.base import Base, TimestampMixin, utcnow
from autopilot.db.types import UTCDateTime


class ApiKeyRow(Base, TimestampMixin):
    __tablename__ = "api_keys"

    key_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    seller_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    key_hash: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_used_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)


class RateLimitWindowRow(Base):
    __tablename__ = "api_rate_limits"

    api_key_id: Mapped[str] = mapped_column(String(128), ForeignKey("api_keys.key_id"), primary_key=True)
    window_start: Mapped[datetime] = mapped_column(UTCDateTime(), primary_key=True)
    request_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class AuditLogRow(Base):
    __tablename__ = "api_audit_log"

    audit_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    api_key_id: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
    seller_id: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
    method: Mapped[str] = mapped_column(String(10), nullable=False)
    path: Mapped[str] = mapped_column(String(2048), nullable=False)
    status_code: Mapped[int] = mapped_column(Integer, nullable=False)
    duration_ms: Mapped[int] = mapped_column(Integer, nullable=False)
    ip: Mapped[str] = mapped_column(String(64), nullable=False, default="unknown")
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)
