"""
Authentication API
==================

POST /login
    Email + password sign-in. Returns a session token and the public user
    projection. Unknown email and wrong password both answer 401 with the
    same message.

Notes
-----
- The response is marked **no-store** so tokens are never cached.
"""

from fastapi import APIRouter, Body, Depends, Request

from fintrack.api.deps import get_auth_service
from fintrack.schemas.auth import LoginRequest, LoginResponse
from fintrack.security_headers import set_sensitive_cache
from fintrack.services.auth.auth_service import AuthService

router = APIRouter(tags=["Authentication"])


# ──────────────────────────────────────────────────────────────
# 🔐 POST /login (email + password)
# ──────────────────────────────────────────────────────────────
@router.post("/login", response_model=LoginResponse, summary="Email + password login")
async def login(
    request: Request,
    payload: LoginRequest = Body(...),
    service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    set_sensitive_cache(request)
    result = await service.login(email=payload.email, password=payload.password)
    return LoginResponse.model_validate(result)


__all__ = ["router", "login"]
