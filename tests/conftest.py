from typing import Any, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from loyalty.core.config import Settings
from loyalty.main import create_app

FX_BASE_URL = "http://fx.test"
PROMO_BASE_URL = "http://promo.test"


class FakeUpstreams:
    """Scripted FX and promotion services behind one httpx.MockTransport.

    Each script is a list of replies consumed one per call (the last one
    repeats once the list is exhausted):
        dict            -> 200 with that JSON body
        int             -> that status code, empty body
        bytes           -> 200 with that raw body
        BaseException   -> raised from the transport
    """

    def __init__(self):
        self.fx_script: List[Any] = [{"rate": 3.67}]
        self.promo_script: List[Any] = [{"bonusPercentage": 25, "expiresInDays": 2}]
        self.fx_calls: List[Optional[str]] = []
        self.promo_calls: List[Optional[str]] = []

    def fx(self, *replies: Any) -> "FakeUpstreams":
        self.fx_script = list(replies)
        return self

    def promo(self, *replies: Any) -> "FakeUpstreams":
        self.promo_script = list(replies)
        return self

    @staticmethod
    def _next(script: List[Any], index: int) -> Any:
        return script[min(index, len(script) - 1)]

    @staticmethod
    def _build(reply: Any) -> httpx.Response:
        if isinstance(reply, BaseException):
            raise reply
        if isinstance(reply, dict):
            return httpx.Response(200, json=reply)
        if isinstance(reply, int):
            return httpx.Response(reply)
        if isinstance(reply, bytes):
            return httpx.Response(200, content=reply)
        raise TypeError(f"unsupported fake reply {reply!r}")

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/fx":
            reply = self._next(self.fx_script, len(self.fx_calls))
            self.fx_calls.append(request.url.params.get("currency"))
            return self._build(reply)
        if request.url.path == "/promo":
            reply = self._next(self.promo_script, len(self.promo_calls))
            self.promo_calls.append(request.url.params.get("code"))
            return self._build(reply)
        return httpx.Response(404)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def anyio_backend():
    # Only asyncio; no trio needed
    return "asyncio"


@pytest.fixture
def upstreams() -> FakeUpstreams:
    return FakeUpstreams()


@pytest.fixture
def settings() -> Settings:
    return Settings(fx_base_url=FX_BASE_URL, promo_base_url=PROMO_BASE_URL)


@pytest.fixture
def client(settings, upstreams):
    app = create_app(settings_override=settings, transport=upstreams.transport())
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
