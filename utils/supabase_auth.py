import logging
from typing import Optional

import httpx
from fastapi import Header, Request

import config
from shared.schemas.python import AuthenticatedUser
from utils.errors import Unauthenticated
from utils.supabase_client import _require_config, supabase_url

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def extract_bearer_token(
    authorization_header: Optional[str], message: str = "Unauthorized"
) -> str:
    """
    Return the token from an ``Authorization: Bearer <token>`` header.

    Raises Unauthenticated when the header is missing, uses another scheme or
    carries an empty token.
    """
    if not authorization_header:
        raise Unauthenticated(message)
    header = authorization_header.strip()
    if not header.startswith(BEARER_PREFIX):
        raise Unauthenticated(message)
    token = header[len(BEARER_PREFIX):].strip()
    if not token:
        raise Unauthenticated(message)
    return token


async def resolve_user(token: str) -> AuthenticatedUser:
    """Ask Supabase Auth who owns ``token``; any failure is Unauthenticated."""
    _require_config()
    headers = {
        "apikey": config.SUPABASE_ANON_KEY,
        "Authorization": f"Bearer {token}",
    }
    try:
        async with httpx.AsyncClient(timeout=config.SUPABASE_TIMEOUT) as client:
            response = await client.get(f"{supabase_url()}/auth/v1/user", headers=headers)
    except httpx.RequestError as exc:
        logger.warning("Supabase token resolution failed: %s", exc)
        raise Unauthenticated() from exc

    if not response.is_success:
        logger.info("Supabase rejected token: status=%s", response.status_code)
        raise Unauthenticated()

    try:
        data = response.json()
    except ValueError as exc:
        raise Unauthenticated() from exc

    if not isinstance(data, dict) or not data.get("id"):
        raise Unauthenticated()
    return AuthenticatedUser.model_validate(data)


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(None),
) -> AuthenticatedUser:
    """Resolve the caller; the raw token is kept on request.state for RLS reads."""
    token = extract_bearer_token(authorization)
    user = await resolve_user(token)
    request.state.access_token = token
    request.state.user = user
    return user


__all__ = [
    "extract_bearer_token",
    "resolve_user",
    "get_current_user",
]
