"""FX rate resolver.

Calls the external FX service (GET <fx_path>?currency=XXX) and expects
{"rate": <positive number>}. Any failure (transport, non-200, malformed body,
missing or non-positive rate) is retried with the same currency up to
max_retries additional attempts. Exhaustion raises FxUnavailableError, which
is fatal to the quote.
"""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Any, Dict, Optional

import httpx

from loyalty.core.errors import FxUnavailableError
from loyalty.services.http_client import HttpError, PayloadError, get_json_object

logger = logging.getLogger("loyalty.fx")


def extract_rate(body: Dict[str, Any]) -> float:
    rate = body.get("rate")
    if rate is None:
        raise PayloadError("missing 'rate' field")
    # bool is an int subclass; true/false is not a rate
    if isinstance(rate, bool) or not isinstance(rate, (int, float)):
        raise PayloadError(f"non-numeric rate {rate!r}")
    try:
        value = float(rate)
    except OverflowError as e:
        raise PayloadError(f"rate out of range {rate!r}") from e
    if not math.isfinite(value):
        raise PayloadError(f"non-finite rate {rate!r}")
    if not value > 0:
        raise PayloadError(f"non-positive rate {rate!r}")
    return value


class FxRateResolver:
    def __init__(
        self,
        client: httpx.AsyncClient,
        path: str = "/fx",
        max_retries: int = 2,
        backoff: float = 0.0,
        timeout: Optional[float] = None,
    ):
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self._client = client
        self._path = path
        self._max_retries = max_retries
        self._backoff = backoff
        self._timeout = timeout

    async def get_rate(self, currency: str) -> float:
        """Return loyalty-base units per 1 unit of currency, or raise FxUnavailableError."""
        last_err: Optional[Exception] = None
        attempts = self._max_retries + 1
        for attempt in range(attempts):
            try:
                body = await get_json_object(
                    self._client,
                    self._path,
                    params={"currency": currency},
                    timeout=self._timeout,
                )
                rate = extract_rate(body)
                logger.debug("fx rate for %s: %s", currency, rate)
                return rate
            except HttpError as e:
                last_err = e
                logger.warning(
                    "fx call failed (attempt %d/%d): %s", attempt + 1, attempts, e
                )
            if attempt < self._max_retries and self._backoff > 0:
                await asyncio.sleep(self._backoff * (2**attempt))
        logger.error("fx unavailable for %s after %d attempt(s)", currency, attempts)
        raise FxUnavailableError(currency, attempts) from last_err
