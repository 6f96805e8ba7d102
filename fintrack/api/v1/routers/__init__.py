"""
API router aggregator.

    from fintrack.api.v1.routers import router
    app.include_router(router, prefix=settings.API_PREFIX)
"""

from fastapi import APIRouter

from .auth import router as auth_router


def build_router() -> APIRouter:
    router = APIRouter()
    router.include_router(auth_router)
    return router


router = build_router()

__all__ = ["router", "build_router"]
