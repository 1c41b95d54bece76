import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from starlette.exceptions import HTTPException as StarletteHTTPException
from .core.config import get_settings, Settings
from .core.logging import init_logging, request_context_middleware
from .core import errors
from .routers import health, quotes
from .services.fx_rates import FxRateResolver
from .services.http_client import build_client
from .services.promo import PromoBonusResolver
from .services.quote_service import QuoteOrchestrator
from .services.validation import RequestValidator

logger = logging.getLogger("loyalty")


def create_app(
    settings_override: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment. Falls back to cached get_settings().
    transport: optional httpx transport shared by both upstream clients; tests
    pass an httpx.MockTransport standing in for the FX and promo services.
    """
    settings = settings_override or get_settings()
    if settings_override is not None:
        settings.init_post_load()
    # Initialize logging early
    init_logging(debug=settings.debug)

    logger.info(
        "fx config | baseUrl=%s | path=%s | maxRetries=%d | timeoutMs=%d",
        settings.fx_base_url,
        settings.fx_path,
        settings.fx_max_retries,
        settings.fx_timeout_ms,
    )
    logger.info(
        "promo config | baseUrl=%s | path=%s | timeoutMs=%d | expiryWarningDays=%d",
        settings.promo_base_url,
        settings.promo_path,
        settings.promo_timeout_ms,
        settings.promo_expiry_warning_days,
    )

    # Shared, read-only outbound clients; one per upstream
    fx_client = build_client(
        str(settings.fx_base_url),
        timeout=settings.fx_timeout_ms / 1000,
        transport=transport,
    )
    promo_client = build_client(
        str(settings.promo_base_url),
        timeout=settings.promo_timeout_ms / 1000,
        transport=transport,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await fx_client.aclose()
        await promo_client.aclose()

    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        version=settings.version,
        lifespan=lifespan,
    )

    app.state.validator = RequestValidator.from_settings(settings)
    app.state.orchestrator = QuoteOrchestrator(
        fx=FxRateResolver(
            fx_client,
            path=settings.fx_path,
            max_retries=settings.fx_max_retries,
            backoff=settings.fx_retry_backoff_ms / 1000,
            timeout=settings.fx_timeout_ms / 1000,
        ),
        promo=PromoBonusResolver(
            promo_client,
            path=settings.promo_path,
            timeout=settings.promo_timeout_ms / 1000,
            expiry_warning_days=settings.promo_expiry_warning_days,
        ),
    )

    # Middleware (request id / structured logging)
    app.middleware("http")(request_context_middleware)

    # Error handlers
    app.add_exception_handler(StarletteHTTPException, errors.http_error_handler)
    app.add_exception_handler(errors.QuoteValidationError, errors.validation_error_handler)
    app.add_exception_handler(errors.FxUnavailableError, errors.fx_unavailable_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Routers
    app.include_router(health.router)
    app.include_router(quotes.router)

    return app
