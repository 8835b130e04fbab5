"""Pydantic models for SKU-to-supplier-variant mappings."""

from datetime import datetime

from pydantic import Field

from autopilot.models.common import CamelModel


class SkuMapCreate(CamelModel):
    ebay_sku: str = Field(min_length=1, max_length=200)
    cj_variant_id: str = Field(min_length=1, max_length=128)
    default_qty: int = Field(default=1, ge=1)
    min_margin_pct: float = Field(default=20.0, ge=0)
    active: bool = True


class SkuMapUpdate(CamelModel):
    cj_variant_id: str | None = Field(default=None, min_length=1, max_length=128)
    default_qty: int | None = Field(default=None, ge=1)
    min_margin_pct: float | None = Field(default=None, ge=0)
    active: bool | None = None


class SkuMapResponse(CamelModel):
    id: str = Field(validation_alias="sku_map_id")
    ebay_sku: str
    cj_variant_id: str
    default_qty: int
    min_margin_pct: float
    active: bool
    created_at: datetime
    updated_at: datetime
