from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .constants import CabinClass, Tier, PROMO_SERVICE_UNAVAILABLE


class QuotePayload(BaseModel):
    """Decoded body of POST /v1/points/quote, before business validation.

    Every field is optional here so that RequestValidator can report missing
    values with the same reasons as invalid ones.
    """

    # strict: true or "1000" for fareAmount is a type error, not a fare
    model_config = ConfigDict(populate_by_name=True, extra="ignore", strict=True)

    fare_amount: Optional[float] = Field(None, alias="fareAmount")
    currency: Optional[str] = None
    cabin_class: Optional[str] = Field(None, alias="cabinClass")
    customer_tier: Optional[str] = Field(None, alias="customerTier")
    promo_code: Optional[str] = Field(None, alias="promoCode")


@dataclass(frozen=True)
class QuoteRequest:
    fare_amount: float
    currency: str
    cabin_class: CabinClass
    customer_tier: Tier
    promo_code: Optional[str] = None


@dataclass(frozen=True)
class PromoOutcome:
    bonus: int = 0
    warnings: Tuple[str, ...] = ()

    @classmethod
    def unavailable(cls) -> "PromoOutcome":
        """Fallback used when the promotion service cannot be consulted."""
        return cls(0, (PROMO_SERVICE_UNAVAILABLE,))


@dataclass(frozen=True)
class QuoteResult:
    base_points: int
    tier_bonus: int
    promo_bonus: int
    total_points: int
    effective_fx_rate: float
    warnings: Tuple[str, ...] = field(default_factory=tuple)


class QuoteOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    base_points: int = Field(..., alias="basePoints")
    tier_bonus: int = Field(..., alias="tierBonus")
    promo_bonus: int = Field(..., alias="promoBonus")
    total_points: int = Field(..., alias="totalPoints")
    effective_fx_rate: float = Field(..., gt=0, alias="effectiveFxRate")
    warnings: List[str] = []

    @classmethod
    def from_result(cls, result: QuoteResult) -> "QuoteOut":
        return cls(
            base_points=result.base_points,
            tier_bonus=result.tier_bonus,
            promo_bonus=result.promo_bonus,
            total_points=result.total_points,
            effective_fx_rate=result.effective_fx_rate,
            warnings=list(result.warnings),
        )
