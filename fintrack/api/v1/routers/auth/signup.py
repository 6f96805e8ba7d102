"""
Signup API
==========

POST /signup
------------
Creates an account (bcrypt-hashed password, default wallet and starter
categories). It does not log the user in; clients call `/login` next.

Errors
------
- 409 when the email is already registered.
- 422 when the payload fails validation.
"""

from fastapi import APIRouter, Depends, Request, status

from fintrack.api.deps import get_auth_service
from fintrack.schemas.auth import MessageResponse, SignupPayload
from fintrack.security_headers import set_sensitive_cache
from fintrack.services.auth.auth_service import SIGNUP_MESSAGE, AuthService

router = APIRouter(tags=["Authentication"])


# ──────────────────────────────────────────────────────
# 👤 User Signup Endpoint
# ──────────────────────────────────────────────────────
@router.post(
    "/signup",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new account",
)
async def signup(
    payload: SignupPayload,
    request: Request,
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    set_sensitive_cache(request)
    await service.signup(
        email=payload.email,
        password=payload.password,
        full_name=payload.full_name,
        currency=payload.currency,
    )
    return MessageResponse(message=SIGNUP_MESSAGE)


__all__ = ["router", "signup"]
