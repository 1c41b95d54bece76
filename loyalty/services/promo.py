"""Promotion bonus resolver.

Calls the external promotion service (GET <promo_path>?code=XYZ) once, with
its own timeout and no retries, and expects
{"bonusPercentage": <int >= 0>, "expiresInDays": <int>}.

Rules:
    - no code / blank code -> zero bonus, no warnings, no call
    - expiresInDays <= 0 -> bonus forced to 0, PROMO_EXPIRED
    - 0 < expiresInDays <= expiry_warning_days -> PROMO_EXPIRES_SOON
    - any failure -> PromoUnavailableError (the caller decides the fallback)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from loyalty.core.errors import PromoUnavailableError
from loyalty.models.constants import PROMO_EXPIRED, PROMO_EXPIRES_SOON
from loyalty.models.quote import PromoOutcome
from loyalty.services.http_client import HttpError, PayloadError, get_json_object

logger = logging.getLogger("loyalty.promo")


def _require_int(body: Dict[str, Any], key: str) -> int:
    value = body.get(key)
    if value is None:
        raise PayloadError(f"missing '{key}' field")
    if isinstance(value, bool) or not isinstance(value, int):
        raise PayloadError(f"non-integer {key} {value!r}")
    return value


class PromoBonusResolver:
    def __init__(
        self,
        client: httpx.AsyncClient,
        path: str = "/promo",
        timeout: float = 0.5,
        expiry_warning_days: int = 3,
    ):
        self._client = client
        self._path = path
        self._timeout = timeout
        self._expiry_warning_days = expiry_warning_days

    async def get_bonus(self, code: Optional[str], base_points: int) -> PromoOutcome:
        if code is None or not code.strip():
            return PromoOutcome()

        try:
            body = await get_json_object(
                self._client, self._path, params={"code": code}, timeout=self._timeout
            )
            bonus_pct = _require_int(body, "bonusPercentage")
            expires_in_days = _require_int(body, "expiresInDays")
            if bonus_pct < 0:
                raise PayloadError(f"negative bonusPercentage {bonus_pct}")
        except HttpError as e:
            logger.warning("promo service failure for code %s: %s", code, e)
            raise PromoUnavailableError(str(e)) from e

        if expires_in_days <= 0:
            logger.info("promo code %s has expired", code)
            return PromoOutcome(0, (PROMO_EXPIRED,))

        bonus = base_points * bonus_pct // 100
        warnings: List[str] = []
        if expires_in_days <= self._expiry_warning_days:
            warnings.append(PROMO_EXPIRES_SOON)
        logger.debug("promo bonus for %s: %d (%d%%)", code, bonus, bonus_pct)
        return PromoOutcome(bonus, tuple(warnings))
