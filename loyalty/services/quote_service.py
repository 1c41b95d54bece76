"""Quote orchestration: FX lookup, points arithmetic, promo lookup, cap.

The two lookups are sequenced because the promo bonus is computed on base
points, which need the FX rate. FX failures propagate (FxUnavailableError);
promo failures are converted into a PROMO_SERVICE_UNAVAILABLE warning.
"""

from __future__ import annotations

import logging
from typing import Protocol

from loyalty.core.errors import PromoUnavailableError
from loyalty.models.constants import POINTS_CAP
from loyalty.models.quote import PromoOutcome, QuoteRequest, QuoteResult
from loyalty.services.money import to_decimal, truncate_points

logger = logging.getLogger("loyalty.quote")


class SupportsRateLookup(Protocol):
    async def get_rate(self, currency: str) -> float: ...


class SupportsPromoLookup(Protocol):
    async def get_bonus(self, code: str | None, base_points: int) -> PromoOutcome: ...


class QuoteOrchestrator:
    def __init__(self, fx: SupportsRateLookup, promo: SupportsPromoLookup):
        self._fx = fx
        self._promo = promo

    async def calculate(self, request: QuoteRequest) -> QuoteResult:
        rate = await self._fx.get_rate(request.currency)

        base_points = truncate_points(
            to_decimal(request.fare_amount) * to_decimal(rate)
        )
        tier_bonus = truncate_points(base_points * request.customer_tier.multiplier)

        try:
            promo = await self._promo.get_bonus(request.promo_code, base_points)
        except PromoUnavailableError:
            logger.warning("promo service unavailable, quoting without promo bonus")
            promo = PromoOutcome.unavailable()

        total = min(base_points + tier_bonus + promo.bonus, POINTS_CAP)
        return QuoteResult(
            base_points=base_points,
            tier_bonus=tier_bonus,
            promo_bonus=promo.bonus,
            total_points=total,
            effective_fx_rate=rate,
            warnings=promo.warnings,
        )
