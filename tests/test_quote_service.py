from dataclasses import FrozenInstanceError
from decimal import Decimal

import httpx
import pytest

from loyalty.core.errors import FxUnavailableError, PromoUnavailableError
from loyalty.models import (
    POINTS_CAP,
    PROMO_EXPIRED,
    PROMO_EXPIRES_SOON,
    PROMO_SERVICE_UNAVAILABLE,
    CabinClass,
    PromoOutcome,
    QuoteRequest,
    Tier,
)
from loyalty.services.money import to_decimal, truncate_points
from loyalty.services.promo import PromoBonusResolver
from loyalty.services.quote_service import QuoteOrchestrator


class StubFx:
    def __init__(self, rate=3.67, error=None):
        self.rate = rate
        self.error = error
        self.calls = []

    async def get_rate(self, currency):
        self.calls.append(currency)
        if self.error is not None:
            raise self.error
        return self.rate


class StubPromo:
    def __init__(self, outcome=PromoOutcome(), error=None):
        self.outcome = outcome
        self.error = error
        self.calls = []

    async def get_bonus(self, code, base_points):
        self.calls.append((code, base_points))
        if self.error is not None:
            raise self.error
        return self.outcome


def _request(fare=1000.0, tier=Tier.SILVER, promo_code=None, currency="USD"):
    return QuoteRequest(
        fare_amount=fare,
        currency=currency,
        cabin_class=CabinClass.ECONOMY,
        customer_tier=tier,
        promo_code=promo_code,
    )


@pytest.mark.anyio
async def test_silver_without_promo():
    fx, promo = StubFx(), StubPromo()
    result = await QuoteOrchestrator(fx, promo).calculate(_request())
    assert (result.base_points, result.tier_bonus, result.promo_bonus) == (3670, 550, 0)
    assert result.total_points == 4220
    assert result.effective_fx_rate == 3.67
    assert result.warnings == ()
    assert fx.calls == ["USD"]
    assert promo.calls == [(None, 3670)]


@pytest.mark.anyio
async def test_promo_bonus_and_warning_are_carried_through():
    promo = StubPromo(PromoOutcome(917, (PROMO_EXPIRES_SOON,)))
    result = await QuoteOrchestrator(StubFx(), promo).calculate(_request(promo_code="SUMMER25"))
    assert result.promo_bonus == 917
    assert result.total_points == 3670 + 550 + 917
    assert result.warnings == (PROMO_EXPIRES_SOON,)
    assert promo.calls == [("SUMMER25", 3670)]


@pytest.mark.anyio
async def test_expired_promo_keeps_quote_without_bonus():
    promo = StubPromo(PromoOutcome(0, (PROMO_EXPIRED,)))
    result = await QuoteOrchestrator(StubFx(), promo).calculate(_request(promo_code="OLD"))
    assert result.total_points == 4220
    assert result.warnings == (PROMO_EXPIRED,)


@pytest.mark.anyio
async def test_fx_failure_is_fatal_and_skips_promo():
    fx = StubFx(error=FxUnavailableError("USD", 3))
    promo = StubPromo()
    with pytest.raises(FxUnavailableError):
        await QuoteOrchestrator(fx, promo).calculate(_request(promo_code="SUMMER25"))
    assert promo.calls == []


@pytest.mark.anyio
async def test_promo_failure_degrades_to_warning():
    promo = StubPromo(error=PromoUnavailableError("HTTP 500 for /promo"))
    result = await QuoteOrchestrator(StubFx(), promo).calculate(_request(promo_code="SUMMER25"))
    assert result.promo_bonus == 0
    assert result.total_points == 4220
    assert result.warnings == (PROMO_SERVICE_UNAVAILABLE,)


@pytest.mark.anyio
async def test_promo_transport_bug_degrades_to_warning():
    def handler(request: httpx.Request) -> httpx.Response:
        raise RuntimeError("bug in transport")

    client = httpx.AsyncClient(base_url="http://promo.test", transport=httpx.MockTransport(handler))
    promo = PromoBonusResolver(client)
    result = await QuoteOrchestrator(StubFx(), promo).calculate(_request(promo_code="SUMMER25"))
    assert result.promo_bonus == 0
    assert result.total_points == 4220
    assert result.warnings == (PROMO_SERVICE_UNAVAILABLE,)



@pytest.mark.anyio
async def test_total_is_capped():
    promo = StubPromo(PromoOutcome(36700, ()))
    result = await QuoteOrchestrator(StubFx(rate=3.67), promo).calculate(
        _request(fare=100_000.0, tier=Tier.PLATINUM, promo_code="BIG")
    )
    assert result.base_points == 367_000
    assert result.tier_bonus == 183_500
    assert result.total_points == POINTS_CAP


@pytest.mark.anyio
async def test_total_exactly_at_cap_is_unchanged():
    result = await QuoteOrchestrator(StubFx(rate=1.0), StubPromo()).calculate(
        _request(fare=50_000.0, tier=Tier.NONE)
    )
    assert result.total_points == 50_000
    assert result.tier_bonus == 0


@pytest.mark.anyio
@pytest.mark.parametrize(
    "fare,rate,tier,base,tier_bonus",
    [
        (999.99, 1.1, Tier.PLATINUM, 1099, 549),
        (10.0, 0.07, Tier.GOLD, 0, 0),
        (333.0, 1.0, Tier.GOLD, 333, 99),
        (1.0, 2.5, Tier.SILVER, 2, 0),
    ],
)
async def test_points_are_truncated(fare, rate, tier, base, tier_bonus):
    result = await QuoteOrchestrator(StubFx(rate=rate), StubPromo()).calculate(
        _request(fare=fare, tier=tier)
    )
    assert result.base_points == base
    assert result.tier_bonus == tier_bonus
    assert result.total_points == min(base + tier_bonus, POINTS_CAP)


@pytest.mark.anyio
async def test_result_is_immutable():
    result = await QuoteOrchestrator(StubFx(), StubPromo()).calculate(_request())
    with pytest.raises(FrozenInstanceError):
        result.total_points = 1  # type: ignore[misc]


def test_money_helpers_use_decimal_string_form():
    assert to_decimal(3.67) == Decimal("3.67")
    assert truncate_points(to_decimal(1000.0) * to_decimal(3.67)) == 3670
    assert truncate_points(3670.999) == 3670
    assert truncate_points(0) == 0
