"""Error taxonomy for quote calculation and the HTTP handlers that render it.

Categories:
    - QuoteValidationError: caller error, rendered as 400 with its reason.
    - FxUnavailableError: fatal dependency failure, rendered as 503.
    - PromoUnavailableError: recoverable dependency failure; the quote
      orchestrator absorbs it, so it never reaches a handler.
    - anything else: defect, rendered as 500 and logged with traceback.

Every error body has the shape {"status": <code>, "error": "<message>"}.
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette import status
import logging

logger = logging.getLogger("loyalty.errors")


class QuoteError(Exception):
    pass


class QuoteValidationError(QuoteError):
    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class DependencyUnavailableError(QuoteError):
    pass


class FxUnavailableError(DependencyUnavailableError):
    def __init__(self, currency: str, attempts: int):
        super().__init__(f"FX rate for {currency} unavailable after {attempts} attempt(s)")
        self.currency = currency
        self.attempts = attempts


class PromoUnavailableError(DependencyUnavailableError):
    pass


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": status_code, "error": message},
    )


_HTTP_MESSAGES = {
    status.HTTP_404_NOT_FOUND: "Endpoint not found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "Method Not Allowed",
    status.HTTP_415_UNSUPPORTED_MEDIA_TYPE: "Unsupported Media Type",
}


def http_error_handler(request: Request, exc):  # type: ignore
    message = _HTTP_MESSAGES.get(exc.status_code)
    if message is None:
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return error_response(exc.status_code, message)


def validation_error_handler(request: Request, exc: QuoteValidationError):  # type: ignore
    logger.warning("validation error: %s", exc.reason)
    return error_response(status.HTTP_400_BAD_REQUEST, exc.reason)


def fx_unavailable_handler(request: Request, exc: FxUnavailableError):  # type: ignore
    logger.error("calculation unavailable: %s", exc)
    return error_response(
        status.HTTP_503_SERVICE_UNAVAILABLE, "Service temporarily unavailable"
    )


def server_error_handler(request: Request, exc: Exception):  # type: ignore
    logger.exception("unhandled exception")
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error"
    )
