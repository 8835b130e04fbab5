"""Marketplace order, order item and shipment tables."""

from datetime import datetime

from sqlalchemy import Boolean, Float, ForeignKey, Integer, JSON, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from autopilot.db.base import Base, TimestampMixin
from autopilot.db.types import UTCDateTime


class OrderRow(Base, TimestampMixin):
    __tablename__ = "orders"
    __table_args__ = (
        UniqueConstraint("seller_id", "order_id", name="uq_orders_seller_order"),
    )

    order_pk: Mapped[str] = mapped_column(String(128), primary_key=True)
    seller_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    order_id: Mapped[str] = mapped_column(String(128), nullable=False)
    order_status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    total_price: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    buyer_json: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    needs_fulfillment: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    supplier_order_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    last_synced_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    items: Mapped[list["OrderItemRow"]] = relationship(
        back_populates="order", lazy="selectin", cascade="all, delete-orphan",
    )
    shipments: Mapped[list["ShipmentRow"]] = relationship(
        back_populates="order", lazy="selectin", cascade="all, delete-orphan",
    )


class OrderItemRow(Base):
    __tablename__ = "order_items"

    item_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    order_pk: Mapped[str] = mapped_column(String(128), ForeignKey("orders.order_pk"), nullable=False, index=True)
    seller_id: Mapped[str] = mapped_column(String(128), nullable=False)
    line_item_id: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    sku: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    title: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    price: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    order: Mapped[OrderRow] = relationship(back_populates="items")


class ShipmentRow(Base, TimestampMixin):
    __tablename__ = "shipments"

    shipment_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    order_pk: Mapped[str] = mapped_column(String(128), ForeignKey("orders.order_pk"), nullable=False, index=True)
    seller_id: Mapped[str] = mapped_column(String(128), nullable=False)
    tracking_number: Mapped[str | None] = mapped_column(String(128), nullable=True)
    carrier: Mapped[str | None] = mapped_column(String(128), nullable=True)
    tracking_pushed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    order: Mapped[OrderRow] = relationship(back_populates="shipments")
