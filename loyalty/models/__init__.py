"""Domain models for the loyalty points quote service."""

from .constants import (
    POINTS_CAP,
    PROMO_EXPIRED,
    PROMO_EXPIRES_SOON,
    PROMO_SERVICE_UNAVAILABLE,
    CabinClass,
    Tier,
)  # re-export
from .quote import PromoOutcome, QuoteOut, QuotePayload, QuoteRequest, QuoteResult

__all__ = [
    "POINTS_CAP",
    "PROMO_EXPIRED",
    "PROMO_EXPIRES_SOON",
    "PROMO_SERVICE_UNAVAILABLE",
    "CabinClass",
    "Tier",
    "PromoOutcome",
    "QuoteOut",
    "QuotePayload",
    "QuoteRequest",
    "QuoteResult",
]
