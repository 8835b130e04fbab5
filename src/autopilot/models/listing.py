"""Pydantic models for listing drafts, offers and supplier catalogue calls."""

from typing import Literal

from pydantic import Field

from autopilot.models.common import CamelModel


class ListingPrepareRequest(CamelModel):
    source: Literal["cj"]
    cj_variant_id: str = Field(min_length=1)


class ListingPublishRequest(CamelModel):
    source_product_id: str = Field(min_length=1)
    price: float = Field(gt=0)
    quantity: int = Field(default=1, ge=0)
    title: str | None = Field(default=None, max_length=80)
    category_id: str | None = None


class ListingDraft(CamelModel):
    source_product_id: str
    title: str
    description: str
    source_price: float = Field(validation_alias="price_source")
    images: list[str] = Field(validation_alias="images_json")
    suggested_price: float


class FreightRequest(CamelModel):
    vid: str = Field(min_length=1)
    quantity: int = Field(default=1, ge=1)
    country_code: str = Field(default="DE", min_length=2, max_length=2)
    start_country_code: str = Field(default="CN", min_length=2, max_length=2)
