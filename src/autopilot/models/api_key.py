"""Pydantic models for API key management."""

from datetime import datetime

from pydantic import Field

from autopilot.models.common import CamelModel


# ── Request models ─────────────────────────────────────────────────────────────

class ApiKeyCreate(CamelModel):
    name: str = Field(min_length=1, max_length=200)


class ApiKeyUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    is_active: bool | None = None


# ── Response models ────────────────────────────────────────────────────────────

class ApiKeyResponse(CamelModel):
    id: str = Field(validation_alias="key_id")
    name: str
    is_active: bool
    last_used_at: datetime | None
    created_at: datetime


class ApiKeyCreatedResponse(ApiKeyResponse):
    """Returned once at creation; includes the raw key."""
    key: str
