"""Business validation of decoded quote payloads.

Rules are checked in a fixed order and the first violation is reported:
fare positivity, fare ceiling, currency presence, currency format, currency
support, cabin class, customer tier, promo code length. No external calls
are made here, so a rejected request never reaches the FX or promo services.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Iterable, Optional

from loyalty.core.errors import QuoteValidationError
from loyalty.models.constants import CabinClass, Tier
from loyalty.models.quote import QuotePayload, QuoteRequest

if TYPE_CHECKING:  # pragma: no cover
    from loyalty.core.config import Settings

_CURRENCY_RE = re.compile(r"[A-Z]{3}")


class RequestValidator:
    def __init__(
        self,
        supported_currencies: Iterable[str] = ("USD", "EUR", "GBP"),
        max_fare_amount: float = 1_000_000,
        max_promo_code_length: int = 50,
    ):
        self._supported = frozenset(supported_currencies)
        self._max_fare = max_fare_amount
        self._max_promo_len = max_promo_code_length

    @classmethod
    def from_settings(cls, settings: "Settings") -> "RequestValidator":
        return cls(
            supported_currencies=settings.supported_currencies,
            max_fare_amount=settings.max_fare_amount,
            max_promo_code_length=settings.max_promo_code_length,
        )

    def validate(self, payload: QuotePayload) -> QuoteRequest:
        """Return an immutable QuoteRequest or raise QuoteValidationError."""
        fare = payload.fare_amount
        # "not fare > 0" also rejects NaN
        if fare is None or not fare > 0:
            raise QuoteValidationError("Fare amount must be greater than zero")
        if fare > self._max_fare:
            raise QuoteValidationError("Fare amount exceeds maximum allowed")

        currency = payload.currency
        if currency is None or not currency.strip():
            raise QuoteValidationError("Currency is required")
        if not _CURRENCY_RE.fullmatch(currency):
            raise QuoteValidationError("Invalid currency format")
        if currency not in self._supported:
            raise QuoteValidationError("Unsupported currency")

        cabin = _lookup(CabinClass, payload.cabin_class)
        if cabin is None:
            raise QuoteValidationError("Invalid cabin class")
        tier = _lookup(Tier, payload.customer_tier)
        if tier is None:
            raise QuoteValidationError("Invalid customer tier")

        promo_code = payload.promo_code
        if promo_code is not None and len(promo_code) > self._max_promo_len:
            raise QuoteValidationError("Promo code too long")

        return QuoteRequest(
            fare_amount=fare,
            currency=currency,
            cabin_class=cabin,
            customer_tier=tier,
            promo_code=promo_code,
        )


def _lookup(enum_cls, name: Optional[str]):  # type: ignore[no-untyped-def]
    if name is None:
        return None
    return enum_cls.__members__.get(name)
