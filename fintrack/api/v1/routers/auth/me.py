"""
Current user API
================

GET /me
    The authenticated user's public projection.

PATCH /me
    Update display name, currency or theme. Omitted fields are left alone.

Both require `Authorization: Bearer <session token>`:
401 "Access token required" without it, 401 "Invalid or expired token" for a
bad one, 404 "User not found" when the account behind a valid token is gone.
"""

from fastapi import APIRouter, Depends, Request

from fintrack.api.deps import get_auth_service, get_current_user
from fintrack.repositories.user import UserRecord
from fintrack.schemas.auth import CurrentUserResponse, ProfileUpdate
from fintrack.security_headers import set_sensitive_cache
from fintrack.services.auth.auth_service import AuthService

router = APIRouter(tags=["Account"])


@router.get("/me", response_model=CurrentUserResponse, summary="Current user")
async def read_me(
    request: Request,
    current_user: UserRecord = Depends(get_current_user),
) -> CurrentUserResponse:
    set_sensitive_cache(request)
    return CurrentUserResponse.model_validate({"user": current_user.public()})


@router.patch("/me", response_model=CurrentUserResponse, summary="Update profile")
async def update_me(
    request: Request,
    payload: ProfileUpdate,
    current_user: UserRecord = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
) -> CurrentUserResponse:
    set_sensitive_cache(request)
    user = await service.update_profile(current_user.id, payload.model_dump(exclude_unset=True))
    return CurrentUserResponse.model_validate({"user": user.public()})


__all__ = ["router", "read_me", "update_me"]
