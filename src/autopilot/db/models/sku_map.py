"""SKU-to-supplier-variant mapping table."""

from sqlalchemy import Boolean, Float, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from autopilot.db.base import Base, TimestampMixin


class SkuMappingRow(Base, TimestampMixin):
    __tablename__ = "sku_map"
    __table_args__ = (
        UniqueConstraint("seller_id", "ebay_sku", name="uq_sku_map_seller_sku"),
    )

    sku_map_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    seller_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    ebay_sku: Mapped[str] = mapped_column(String(200), nullable=False)
    cj_variant_id: Mapped[str] = mapped_column(String(128), nullable=False)
    default_qty: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    min_margin_pct: Mapped[float] = mapped_column(Float, nullable=False, default=20.0)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
