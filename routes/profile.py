from fastapi import APIRouter, Depends, Request

from shared.schemas.python import AuthenticatedUser, ProfileResponse
from utils.admin_guard import get_profile
from utils.supabase_auth import get_current_user

router = APIRouter(prefix="/api/profile", tags=["profile"])


@router.get("", response_model=ProfileResponse)
async def get_my_profile(
    request: Request,
    user: AuthenticatedUser = Depends(get_current_user),
) -> ProfileResponse:
    """Caller's profile and admin flag. Advisory only: writes re-check the role."""
    profile = await get_profile(user.id, request.state.access_token)
    return ProfileResponse(
        user=user,
        profile=profile,
        is_admin=profile is not None and profile.is_admin,
    )


__all__ = ["router"]
