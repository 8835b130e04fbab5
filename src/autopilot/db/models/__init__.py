"""SQLAlchemy ORM models - import all to register with Base.metadata."""

from autopilot.db.models.api_key import ApiKeyRow, AuditLogRow, RateLimitWindowRow
from autopilot.db.models.job import JobRow
from autopilot.db.models.listing import OfferRow, SourceProductRow
from autopilot.db.models.order import OrderItemRow, OrderRow, ShipmentRow
from autopilot.db.models.sku_map import SkuMappingRow
from autopilot.db.models.token_cache import ApiTokenCacheRow

__all__ = [
    "ApiKeyRow",
    "ApiTokenCacheRow",
    "AuditLogRow",
    "JobRow",
    "OfferRow",
    "OrderItemRow",
    "OrderRow",
    "RateLimitWindowRow",
    "ShipmentRow",
    "SkuMappingRow",
    "SourceProductRow",
]
