"""Pydantic models for marketplace orders."""

from datetime import datetime
from typing import Any

from pydantic import Field

from autopilot.models.common import CamelModel


class OrderItemResponse(CamelModel):
    line_item_id: str
    sku: str
    title: str
    quantity: int
    price: float


class ShipmentResponse(CamelModel):
    id: str = Field(validation_alias="shipment_id")
    tracking_number: str | None
    carrier: str | None
    tracking_pushed: bool


class OrderResponse(CamelModel):
    id: str = Field(validation_alias="order_pk")
    order_id: str
    order_status: str
    total_price: float
    buyer: dict[str, Any] = Field(validation_alias="buyer_json")
    needs_fulfillment: bool
    supplier_order_id: str | None
    last_synced_at: datetime | None
    created_at: datetime
    items: list[OrderItemResponse] = []
    shipments: list[ShipmentResponse] = []
