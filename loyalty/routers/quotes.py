"""Quote router: POST /v1/points/quote.

Decodes the JSON body itself (rather than through a FastAPI body parameter)
so every rejection carries the same {"status", "error"} shape and the
business rules in RequestValidator run in their documented order.
"""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import ValidationError
from starlette import status

from loyalty.core.errors import QuoteValidationError
from loyalty.models.quote import QuoteOut, QuotePayload
from loyalty.services.quote_service import QuoteOrchestrator
from loyalty.services.validation import RequestValidator

router = APIRouter(prefix="/v1/points", tags=["quotes"])
logger = logging.getLogger("loyalty.api")


def get_orchestrator(request: Request) -> QuoteOrchestrator:
    return request.app.state.orchestrator


def get_validator(request: Request) -> RequestValidator:
    return request.app.state.validator


def require_json_content(request: Request) -> None:
    content_type = request.headers.get("content-type", "")
    if "application/json" not in content_type.lower():
        raise HTTPException(status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE)


async def read_payload(request: Request) -> QuotePayload:
    raw = await request.body()
    if not raw.strip():
        raise QuoteValidationError("Request body is required")
    try:
        body = json.loads(raw)
    except ValueError as e:
        raise QuoteValidationError("Malformed JSON body") from e
    if not isinstance(body, dict):
        raise QuoteValidationError("Request body is required")
    try:
        return QuotePayload.model_validate(body)
    except ValidationError as e:
        raise QuoteValidationError("Invalid request payload") from e


@router.post("/quote", response_model=QuoteOut, summary="Quote loyalty points for a fare")
async def create_quote(
    _: None = Depends(require_json_content),
    payload: QuotePayload = Depends(read_payload),
    validator: RequestValidator = Depends(get_validator),
    orchestrator: QuoteOrchestrator = Depends(get_orchestrator),
):
    quote_request = validator.validate(payload)
    result = await orchestrator.calculate(quote_request)
    logger.info(
        "points calculated",
        extra={
            "fields": {
                "fare": quote_request.fare_amount,
                "currency": quote_request.currency,
                "cabin": quote_request.cabin_class.name,
                "tier": quote_request.customer_tier.name,
                "total_points": result.total_points,
                "warnings": list(result.warnings),
            }
        },
    )
    return QuoteOut.from_result(result)
