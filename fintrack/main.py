# fintrack/main.py
from __future__ import annotations

"""
# Finance Tracker API — Application Entrypoint (FastAPI)

ASGI application factory and lifecycle for the Finance Tracker backend.

## Design Goals
- Deterministic, testable **app factory** (`create_app`) with explicit lifespan.
- Explicit **middleware order**:
  1) request id → 2) security headers/HTTPS → 3) CORS → 4) gzip → 5) rate limits.
- Centralized problem+json exception handling.

## Probes
- `/healthz` — liveness (process up).
- `/readyz` — readiness (quick DB check).
"""

import os
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.gzip import GZipMiddleware
from starlette.responses import JSONResponse

from fintrack.core.logger import logger  # importing configures sinks + stdlib intercept
from fintrack.core.config import settings
from fintrack.core.exception_handlers import (
    global_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from fintrack.core.limiter import install_rate_limiter
from fintrack.db.session import create_all, db_healthcheck, dispose_engine
from fintrack.middleware.request_id import RequestIDMiddleware
from fintrack.security_headers import configure_cors, install_security


# ─────────────────────────────────────────────────────────────────────────────
# 🔄 Lifespan: startup & shutdown
# ─────────────────────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Startup:
        - Log a startup banner.
        - Create tables when `DB_AUTO_CREATE` is on (local/dev).

    Shutdown:
        - Dispose the DB engine.
    """
    logger.info("✅ {} starting up (env={})", settings.PROJECT_NAME, settings.ENV)
    if settings.DB_AUTO_CREATE:
        await create_all()
    try:
        yield
    finally:
        await dispose_engine()
        logger.info("🛑 {} shutting down", settings.PROJECT_NAME)


# ─────────────────────────────────────────────────────────────────────────────
# 🏗️ App factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app() -> FastAPI:
    """
    Build and configure the FastAPI app instance.

    Returns:
        FastAPI: application with middleware, exception handlers, routers
        and health/readiness endpoints.
    """
    enable_docs = settings.ENABLE_DOCS
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        docs_url="/docs" if enable_docs else None,
        redoc_url="/redoc" if enable_docs else None,
        openapi_url="/openapi.json" if enable_docs else None,
        lifespan=lifespan,
    )

    # ── Middlewares (last added runs first) ─────────────────────────────────
    install_rate_limiter(app)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]
    app.add_middleware(GZipMiddleware, minimum_size=1024)
    configure_cors(app)
    install_security(app)
    app.add_middleware(RequestIDMiddleware)

    # ── Exception handlers ──────────────────────────────────────────────────
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, global_exception_handler)

    # ── Routers ─────────────────────────────────────────────────────────────
    from fintrack.api.v1.routers import router as api_router

    app.include_router(api_router, prefix=settings.API_PREFIX)

    # ── Meta endpoints ──────────────────────────────────────────────────────
    @app.get("/healthz", tags=["meta"])
    async def healthz() -> dict:
        """Liveness probe. No external checks."""
        return {"ok": True}

    @app.get("/readyz", tags=["meta"])
    async def readyz() -> JSONResponse:
        """Readiness probe (`SELECT 1`)."""
        db_ok = await db_healthcheck()
        return JSONResponse(
            {"ready": db_ok, "checks": {"db": db_ok}},
            status_code=200 if db_ok else 503,
        )

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        return JSONResponse(
            {"name": settings.PROJECT_NAME, "docs": app.docs_url or "", "version": settings.VERSION}
        )

    return app


# ─────────────────────────────────────────────────────────────────────────────
# 🚀 Module-level ASGI app for Uvicorn
# ─────────────────────────────────────────────────────────────────────────────
app = create_app()
__all__ = ["create_app", "app"]


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "fintrack.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("RELOAD", "1") == "1",
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
