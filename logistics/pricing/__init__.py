from .policy import (
    SurchargeTier,
    PriceQuote,
    PricingPolicy,
    DELIVERY_PRICING,
    BUYER_INTENT_PRICING,
)

__all__ = [
    "SurchargeTier",
    "PriceQuote",
    "PricingPolicy",
    "DELIVERY_PRICING",
    "BUYER_INTENT_PRICING",
]
