"""
Trade insight endpoints.

POST is the ingest hook for the private automation workflow. It is open unless
INSIGHT_INGEST_API_KEY is configured, in which case callers must send it as
``X-API-Key``. GET returns the newest insights for any signed-in user.
"""

import hmac
import json
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Header, Query, Request, status
from fastapi.responses import JSONResponse

import config
from shared.schemas.python import (
    CONFIDENCE_LEVELS,
    TRADE_ACTIONS,
    HtmlInsightCreate,
    StructuredInsightCreate,
)
from utils import supabase_client
from utils.errors import BadRequest, Unauthenticated
from utils.supabase_auth import extract_bearer_token
from utils.validators import normalize_symbol, parse_limit, parse_price, require_text

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/trade-insights", tags=["trade-insights"])

MISSING_FIELDS_MESSAGE = (
    "Missing required fields: either html_content OR (symbol, action, price, reasoning)"
)


def _check_ingest_key(provided: Optional[str]) -> None:
    expected = config.INSIGHT_INGEST_API_KEY
    if not expected:
        return
    if not provided or not hmac.compare_digest(provided, expected):
        raise Unauthenticated("Invalid ingest API key")


def _metadata(payload: Dict[str, Any]) -> Dict[str, Any]:
    metadata = payload.get("metadata") or {}
    if not isinstance(metadata, dict):
        raise BadRequest("Invalid metadata. Must be an object")
    return metadata


def build_insight_record(payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Turn an ingest body into the row to insert.

    With ``html_content`` only that and ``metadata`` are kept; every other field
    in the body is ignored. Otherwise the structured fields are validated and
    normalised.
    """
    html_content = payload.get("html_content")
    if html_content:
        if not isinstance(html_content, str):
            raise BadRequest("Invalid html_content. Must be a string")
        return HtmlInsightCreate(
            html_content=html_content, metadata=_metadata(payload)
        ).model_dump()

    symbol = payload.get("symbol")
    action = payload.get("action")
    price = payload.get("price")
    reasoning = payload.get("reasoning")
    if not symbol or not action or not price or not reasoning:
        raise BadRequest(MISSING_FIELDS_MESSAGE)
    if not isinstance(symbol, str) or not isinstance(reasoning, str):
        raise BadRequest("Invalid field types: symbol and reasoning must be strings")
    if not require_text(symbol) or not require_text(reasoning):
        raise BadRequest(MISSING_FIELDS_MESSAGE)

    if action not in TRADE_ACTIONS:
        raise BadRequest("Invalid action. Must be: buy, sell, or hold")

    confidence = payload.get("confidence") or "medium"
    if confidence not in CONFIDENCE_LEVELS:
        raise BadRequest("Invalid confidence. Must be: high, medium, or low")

    return StructuredInsightCreate(
        symbol=normalize_symbol(symbol),
        action=action,
        price=parse_price(price),
        reasoning=reasoning,
        confidence=confidence,
        metadata=_metadata(payload),
    ).model_dump()


@router.post("")
async def ingest_trade_insight(
    request: Request,
    x_api_key: Optional[str] = Header(None),
) -> JSONResponse:
    _check_ingest_key(x_api_key)

    body = await request.body()
    try:
        payload = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise BadRequest("Invalid JSON payload") from exc
    if not isinstance(payload, dict):
        raise BadRequest("Invalid JSON payload")

    record = build_insight_record(payload)
    stored = await supabase_client.insert_trade_insight(record)

    logger.info(
        "Trade insight stored: id=%s kind=%s",
        stored.get("id"),
        "html" if "html_content" in record else record.get("symbol"),
    )
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content={"success": True, "data": stored},
    )


@router.get("")
async def list_trade_insights(
    authorization: Optional[str] = Header(None),
    limit: Optional[str] = Query(None),
) -> Dict[str, Any]:
    """Newest insights first. The token is forwarded; the store enforces it."""
    token = extract_bearer_token(authorization, "Authentication required")
    insights = await supabase_client.list_trade_insights(token, parse_limit(limit))
    return {"insights": insights}


__all__ = ["router", "build_insight_record"]
