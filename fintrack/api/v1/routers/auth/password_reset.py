"""
Password Reset API
==================

Endpoints
---------
POST /forgot-password
    Email a one-time numeric code when the account exists. The answer is the
    same either way (no enumeration).

POST /verify-otp
    Check a code without consuming it (lets the UI move to the new-password
    step). Repeatable.

POST /reset-password
    Verify the code again, set the new password and consume the request.

Security
--------
- Per-client rate limit (`OTP_RATE_LIMIT`, default 5 per 5 minutes) on all three.
- Every verify/reset failure is the same 400 "Invalid or expired OTP.".
- Responses are marked **no-store**.

Decorated routes keep `request` and `response` parameters; the limiter needs both.
"""

from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response

from fintrack.api.deps import get_auth_service
from fintrack.core.config import settings
from fintrack.core.limiter import rate_limit
from fintrack.schemas.auth import (
    ForgotPasswordRequest,
    MessageResponse,
    OTPVerifyRequest,
    PasswordResetConfirm,
)
from fintrack.security_headers import set_sensitive_cache
from fintrack.services.auth.auth_service import AuthService

router = APIRouter(tags=["Password Reset"])


# ─────────────────────────────────────────────────────────────
# 🔑 Request Password Reset OTP
# ─────────────────────────────────────────────────────────────
@router.post(
    "/forgot-password",
    response_model=MessageResponse,
    summary="Email a one-time code for password reset",
)
@rate_limit(settings.OTP_RATE_LIMIT)
async def forgot_password(
    request: Request,
    response: Response,
    background_tasks: BackgroundTasks,
    payload: ForgotPasswordRequest,
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    set_sensitive_cache(response)
    result = await service.forgot_password(payload.email, background_tasks=background_tasks)
    return MessageResponse(**result)


# ─────────────────────────────────────────────────────────────
# ✅ Verify OTP (non-consuming)
# ─────────────────────────────────────────────────────────────
@router.post(
    "/verify-otp",
    response_model=MessageResponse,
    summary="Check a password-reset code",
)
@rate_limit(settings.OTP_RATE_LIMIT)
async def verify_otp(
    request: Request,
    response: Response,
    payload: OTPVerifyRequest,
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    set_sensitive_cache(response)
    result = await service.verify_otp(payload.email, payload.otp)
    return MessageResponse(**result)


# ─────────────────────────────────────────────────────────────
# 🔒 Reset Password
# ─────────────────────────────────────────────────────────────
@router.post(
    "/reset-password",
    response_model=MessageResponse,
    summary="Verify the code and set a new password",
)
@rate_limit(settings.OTP_RATE_LIMIT)
async def reset_password(
    request: Request,
    response: Response,
    payload: PasswordResetConfirm,
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    set_sensitive_cache(response)
    result = await service.reset_password(payload.email, payload.otp, payload.new_password)
    return MessageResponse(**result)


__all__ = ["router", "forgot_password", "verify_otp", "reset_password"]
