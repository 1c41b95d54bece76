"""Domain constants and enumerations for quote calculation.

Tier multipliers and the points cap live here so the arithmetic rules stay
auditable in one place.
"""

from decimal import Decimal
from enum import Enum

POINTS_CAP: int = 50_000

# Warning vocabulary (response tokens, used verbatim)
PROMO_EXPIRED = "PROMO_EXPIRED"
PROMO_EXPIRES_SOON = "PROMO_EXPIRES_SOON"
PROMO_SERVICE_UNAVAILABLE = "PROMO_SERVICE_UNAVAILABLE"


class CabinClass(Enum):
    ECONOMY = "ECONOMY"
    PREMIUM_ECONOMY = "PREMIUM_ECONOMY"
    BUSINESS = "BUSINESS"
    FIRST = "FIRST"


class Tier(Enum):
    """Customer loyalty tier; the value is the bonus multiplier on base points.

    Example: base points 1000 at GOLD (0.30) earn a tier bonus of 300.
    """

    NONE = "0.00"
    SILVER = "0.15"
    GOLD = "0.30"
    PLATINUM = "0.50"

    @property
    def multiplier(self) -> Decimal:
        return Decimal(self.value)
