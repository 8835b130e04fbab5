"""Source product and marketplace offer tables."""

from sqlalchemy import Float, Integer, JSON, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from autopilot.db.base import Base, TimestampMixin


class SourceProductRow(Base, TimestampMixin):
    __tablename__ = "source_products"
    __table_args__ = (
        UniqueConstraint("seller_id", "source_id", name="uq_source_products_seller_source"),
    )

    source_product_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    seller_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    source_id: Mapped[str] = mapped_column(String(128), nullable=False)
    source_type: Mapped[str] = mapped_column(String(50), nullable=False, default="cjdropshipping")
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    price_source: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    images_json: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    variants_json: Mapped[list] = mapped_column(JSON, nullable=False, default=list)


class OfferRow(Base, TimestampMixin):
    __tablename__ = "ebay_offers"
    __table_args__ = (
        UniqueConstraint("seller_id", "sku", name="uq_ebay_offers_seller_sku"),
    )

    offer_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    seller_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    sku: Mapped[str] = mapped_column(String(200), nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    category_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
    state: Mapped[str] = mapped_column(String(20), nullable=False, default="draft")
    listing_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
