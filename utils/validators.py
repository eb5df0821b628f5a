"""
Validation Utilities

Presence and type checks shared by the chart and trade-insight routes. Each
helper raises BadRequest with the message the client sees.
"""

import math
from typing import Any, Optional

import config
from utils.errors import BadRequest


def normalize_symbol(symbol: str) -> str:
    """Trim and uppercase a ticker symbol."""
    return symbol.strip().upper()


def parse_price(raw: Any) -> float:
    """
    Coerce a price to a positive float.

    Accepts numbers and numeric strings ("150.5"). Booleans, non-numeric
    strings, NaN/inf and values <= 0 are rejected.
    """
    if isinstance(raw, bool):
        raise BadRequest("Invalid price. Must be a positive number")
    try:
        price = float(raw.strip() if isinstance(raw, str) else raw)
    except (TypeError, ValueError):
        raise BadRequest("Invalid price. Must be a positive number") from None
    if not math.isfinite(price) or price <= 0:
        raise BadRequest("Invalid price. Must be a positive number")
    return price


def parse_limit(raw: Optional[str], default: Optional[int] = None) -> int:
    """
    Parse the ``limit`` query parameter.

    Missing or blank uses the default; values above INSIGHTS_MAX_LIMIT are
    clamped; non-integers and values below 1 are rejected.
    """
    if default is None:
        default = config.INSIGHTS_DEFAULT_LIMIT
    if raw is None or not raw.strip():
        return min(default, config.INSIGHTS_MAX_LIMIT)
    try:
        limit = int(raw.strip())
    except ValueError:
        raise BadRequest("Invalid limit. Must be a positive integer") from None
    if limit < 1:
        raise BadRequest("Invalid limit. Must be a positive integer")
    return min(limit, config.INSIGHTS_MAX_LIMIT)


def require_text(value: Any) -> bool:
    """True when ``value`` is a non-blank string."""
    return isinstance(value, str) and bool(value.strip())


__all__ = ["normalize_symbol", "parse_price", "parse_limit", "require_text"]
