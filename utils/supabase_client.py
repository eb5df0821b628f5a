from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

import httpx

import config
from utils.errors import UpstreamFailure

logger = logging.getLogger(__name__)


class SupabaseConfigurationError(RuntimeError):
    """Raised when Supabase credentials are missing."""


def supabase_url() -> str:
    return (config.SUPABASE_URL or "").rstrip("/")


def _require_config() -> None:
    if not supabase_url() or not config.SUPABASE_ANON_KEY:
        raise SupabaseConfigurationError(
            "Supabase URL/anon key not configured. "
            "Set SUPABASE_URL and SUPABASE_ANON_KEY."
        )


def _headers(
    token: Optional[str] = None, prefer: Optional[Iterable[str]] = None
) -> Dict[str, str]:
    """Build PostgREST headers; without a user token the anon key is the bearer."""
    header = {
        "apikey": config.SUPABASE_ANON_KEY,
        "Authorization": f"Bearer {token or config.SUPABASE_ANON_KEY}",
        "Content-Type": "application/json",
        "Accept": "application/json",
    }
    if prefer:
        header["Prefer"] = ", ".join(prefer)
    return header


def _upstream_message(response: httpx.Response, fallback: str) -> str:
    """Prefer PostgREST's own error message when the body is JSON."""
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return fallback


async def _supabase_get(
    table: str,
    params: Optional[Dict[str, Any]] = None,
    *,
    token: Optional[str] = None,
    error_message: str = "Failed to fetch rows",
) -> List[Dict[str, Any]]:
    """Fetch rows from a table through the REST endpoint."""
    _require_config()
    url = f"{supabase_url()}/rest/v1/{table}"
    try:
        async with httpx.AsyncClient(timeout=config.SUPABASE_TIMEOUT) as client:
            response = await client.get(url, headers=_headers(token), params=params)
    except httpx.RequestError as exc:
        logger.error("Supabase GET transport error: table=%s error=%s", table, exc)
        raise UpstreamFailure(error_message, details=str(exc)) from exc

    if not response.is_success:
        logger.error(
            "Supabase GET failed: table=%s status=%s body=%s",
            table,
            response.status_code,
            response.text,
        )
        raise UpstreamFailure(
            error_message, details=response.text, upstream_status=response.status_code
        )

    data = response.json()
    if isinstance(data, dict):
        return data.get("data", [])
    if isinstance(data, list):
        return data
    return []


async def _supabase_post(
    table: str,
    payload: Dict[str, Any],
    *,
    token: Optional[str] = None,
    error_message: str = "Failed to insert row",
    use_upstream_message: bool = False,
) -> List[Dict[str, Any]]:
    """Insert a record and return the stored representation."""
    _require_config()
    url = f"{supabase_url()}/rest/v1/{table}"
    try:
        async with httpx.AsyncClient(timeout=config.SUPABASE_TIMEOUT) as client:
            response = await client.post(
                url,
                json=payload,
                headers=_headers(token, prefer=["return=representation"]),
            )
    except httpx.RequestError as exc:
        logger.error("Supabase POST transport error: table=%s error=%s", table, exc)
        raise UpstreamFailure(error_message, details=str(exc)) from exc

    if not response.is_success:
        logger.error(
            "Supabase POST failed: table=%s status=%s body=%s",
            table,
            response.status_code,
            response.text,
        )
        message = (
            _upstream_message(response, error_message)
            if use_upstream_message
            else error_message
        )
        raise UpstreamFailure(
            message, details=response.text, upstream_status=response.status_code
        )

    if not response.content:
        return []

    data = response.json()
    if isinstance(data, dict):
        # REST can return {"data": [...]} depending on headers
        return data.get("data", [data])
    return data


async def fetch_profile(user_id: str, token: str) -> Optional[Dict[str, Any]]:
    """Return the profile row for ``user_id`` or None when there is none."""
    rows = await _supabase_get(
        config.PROFILES_TABLE,
        {"select": "id,role", "id": f"eq.{user_id}", "limit": 1},
        token=token,
        error_message="Failed to load user profile",
    )
    return rows[0] if rows else None


async def insert_chart(payload: Dict[str, Any], token: str) -> Dict[str, Any]:
    rows = await _supabase_post(
        config.CHARTS_TABLE,
        payload,
        token=token,
        error_message="Failed to store chart",
        use_upstream_message=True,
    )
    if not rows:
        raise UpstreamFailure("Failed to store chart", details="Empty insert response")
    return rows[0]


async def list_charts(token: str, limit: int) -> List[Dict[str, Any]]:
    return await _supabase_get(
        config.CHARTS_TABLE,
        {"select": "*", "order": "created_at.desc", "limit": limit},
        token=token,
        error_message="Failed to fetch charts",
    )


async def insert_trade_insight(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Insert an insight with the anon key; ingest callers carry no user token."""
    rows = await _supabase_post(
        config.TRADE_INSIGHTS_TABLE,
        payload,
        error_message="Failed to store trade insight",
    )
    return rows[0] if rows else payload


async def list_trade_insights(token: str, limit: int) -> List[Dict[str, Any]]:
    """Newest-first insights, read with the caller's token."""
    return await _supabase_get(
        config.TRADE_INSIGHTS_TABLE,
        {"select": "*", "order": "created_at.desc", "limit": limit},
        token=token,
        error_message="Failed to fetch trade insights",
    )


__all__ = [
    "SupabaseConfigurationError",
    "supabase_url",
    "fetch_profile",
    "insert_chart",
    "list_charts",
    "insert_trade_insight",
    "list_trade_insights",
]
