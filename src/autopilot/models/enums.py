"""Enumerations shared by the API, repositories and workers."""

from enum import StrEnum


class JobType(StrEnum):
    ORDERS_SYNC = "orders_sync"
    ORDER_FULFILL = "order_fulfill"
    TRACKING_SYNC = "tracking_sync"
    LISTING_PUBLISH = "listing_publish"


class JobState(StrEnum):
    QUEUED = "queued"
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"


class OrderStatus(StrEnum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    SHIPPED = "shipped"


class OrderFilter(StrEnum):
    ALL = "all"
    AWAITING_FULFILLMENT = "awaiting_fulfillment"
    FULFILLED = "fulfilled"


class OfferState(StrEnum):
    DRAFT = "draft"
    PUBLISHED = "published"
