"""Listing price calculation."""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class PricingConfig:
    margin_percent: float = 20.0
    shipping_cost: float = 0.0
    ebay_fee_percent: float = 12.0
    payment_fee_percent: float = 0.0
    payment_fee_fixed: float = 0.35
    additional_costs: float = 0.0

    @classmethod
    def from_settings(cls, settings) -> "PricingConfig":
        return cls(
            margin_percent=settings.pricing_margin_percent,
            shipping_cost=settings.pricing_shipping_cost,
            ebay_fee_percent=settings.pricing_ebay_fee_percent,
            payment_fee_percent=settings.pricing_payment_fee_percent,
            payment_fee_fixed=settings.pricing_payment_fee_fixed,
            additional_costs=settings.pricing_additional_costs,
        )


def calculate_listing_price(source_price: float, config: PricingConfig) -> float:
    """Price that covers cost, margin and marketplace fees, rounded up to the cent."""
    total_cost = source_price + config.shipping_cost + config.additional_costs
    cost_with_margin = total_cost * (1 + config.margin_percent / 100)
    fee_share = (config.ebay_fee_percent + config.payment_fee_percent) / 100
    if fee_share >= 1:
        raise ValueError("combined fee percentage must be below 100")
    price = (cost_with_margin + config.payment_fee_fixed) / (1 - fee_share)
    return math.ceil(round(price * 100, 6)) / 100


def calculate_profit(listing_price: float, source_price: float, config: PricingConfig) -> float:
    ebay_fee = listing_price * config.ebay_fee_percent / 100
    payment_fee = listing_price * config.payment_fee_percent / 100 + config.payment_fee_fixed
    return (
        listing_price
        - source_price
        - config.shipping_cost
        - config.additional_costs
        - ebay_fee
        - payment_fee
    )
