"""
Auth router aggregator.

`build_auth_router()` composes signup, login, password reset and current-user
routes under one prefix (default `/auth`) with shared OpenAPI error docs.
"""

from fastapi import APIRouter

from . import login, me, password_reset, signup


def build_auth_router(*, base_prefix: str = "/auth") -> APIRouter:
    router = APIRouter(prefix=base_prefix)

    common_responses = {
        400: {"description": "Bad Request"},
        401: {"description": "Unauthorized"},
        404: {"description": "Not Found"},
        409: {"description": "Conflict"},
        429: {"description": "Too Many Requests"},
        500: {"description": "Internal Server Error"},
    }

    router.include_router(signup.router, responses=common_responses)          # /signup
    router.include_router(login.router, responses=common_responses)           # /login
    router.include_router(password_reset.router, responses=common_responses)  # /forgot-password, /verify-otp, /reset-password
    router.include_router(me.router, responses=common_responses)              # /me
    return router


router = build_auth_router()

__all__ = ["router", "build_auth_router"]
