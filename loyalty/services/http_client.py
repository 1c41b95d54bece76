"""Outbound HTTP helpers shared by the FX and promotion resolvers.

One shared httpx.AsyncClient per upstream is built at startup (see
loyalty.main.create_app); helpers here perform a single GET returning a
decoded JSON object and normalize every failure to HttpError so resolvers
can apply their own retry / fallback policy.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import httpx


class HttpError(Exception):
    pass


class PayloadError(HttpError):
    """Response arrived but its body does not have the expected shape."""


def build_client(
    base_url: str,
    *,
    timeout: float,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=base_url, timeout=httpx.Timeout(timeout), transport=transport
    )


async def get_json_object(
    client: httpx.AsyncClient,
    path: str,
    *,
    params: Optional[Mapping[str, str]] = None,
    timeout: Optional[float] = None,
) -> Dict[str, Any]:
    kwargs: Dict[str, Any] = {"params": params}
    if timeout is not None:
        kwargs["timeout"] = httpx.Timeout(timeout)
    try:
        resp = await client.get(path, **kwargs)
    except httpx.TimeoutException as e:
        raise HttpError(f"timeout calling {path}: {e!r}") from e
    except httpx.HTTPError as e:
        raise HttpError(f"transport error calling {path}: {e!r}") from e
    except Exception as e:
        # Request building (unencodable params, invalid URL) or a transport bug;
        # CancelledError is a BaseException and still propagates
        raise HttpError(f"request to {path} could not be sent: {e!r}") from e
    if resp.status_code != 200:
        raise HttpError(f"HTTP {resp.status_code} for {path}")
    try:
        data = resp.json()
    except ValueError as e:  # JSON decode
        raise PayloadError(f"undecodable body from {path}") from e
    if not isinstance(data, dict):
        raise PayloadError(f"expected JSON object from {path}")
    return data
