"""
Admin guard: decide whether a resolved user may perform admin-only writes.

Reads the ``user_profiles`` row with the caller's own token. Fail closed: a
missing row, a role other than ``admin`` or a failed lookup all mean "not admin".
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, Request

from shared.schemas.python import AuthenticatedUser, UserProfile
from utils import supabase_client
from utils.errors import Forbidden, UpstreamFailure
from utils.supabase_auth import get_current_user

logger = logging.getLogger(__name__)

ADMIN_REQUIRED_MESSAGE = "Only admins can upload charts"


async def get_profile(user_id: str, token: str) -> Optional[UserProfile]:
    """Return the user's profile, or None when absent or unreadable."""
    try:
        row = await supabase_client.fetch_profile(user_id, token)
    except UpstreamFailure as exc:
        logger.warning("Admin guard: profile lookup failed for %s: %s", user_id, exc)
        return None
    if not row:
        return None
    return UserProfile.model_validate(row)


async def is_admin(user_id: str, token: str) -> bool:
    profile = await get_profile(user_id, token)
    return profile is not None and profile.is_admin


async def require_admin(
    request: Request,
    user: AuthenticatedUser = Depends(get_current_user),
) -> AuthenticatedUser:
    """FastAPI dependency: the resolved user, if and only if they are an admin."""
    if not await is_admin(user.id, request.state.access_token):
        logger.info("Admin guard: denied user_id=%s", user.id)
        raise Forbidden(ADMIN_REQUIRED_MESSAGE)
    return user


__all__ = ["ADMIN_REQUIRED_MESSAGE", "get_profile", "is_admin", "require_admin"]
