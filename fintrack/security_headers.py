# fintrack/security_headers.py
from __future__ import annotations

"""
# Finance Tracker — Security Headers & CORS

Security headers and CORS utilities for a JSON API.

## What you get
- **Headers**: HSTS, X-Content-Type-Options, X-Frame-Options, Referrer-Policy,
  a locked-down CSP (the API serves no HTML).
- **No-store for credentials**: every response under `SENSITIVE_PATHS`
  (default `/api/auth`) gets `Cache-Control: no-store`, error responses included.
- **Cache helper**: `set_sensitive_cache()` for individual routes.
- **CORS installer**: strict allow-list from `FRONTEND_ORIGINS`.

## Env knobs
- ENABLE_HTTPS_REDIRECT (default "false")
- SECURITY_SKIP_PATHS (CSV; default "/docs,/redoc,/openapi.json")
- SENSITIVE_PATHS (CSV; default "/api/auth")
- HSTS_MAX_AGE (31536000)
- REFERRER_POLICY (default "no-referrer")
"""

import os
from dataclasses import dataclass
from typing import List, Tuple, Union

from fastapi import Request, Response
from starlette.middleware.cors import CORSMiddleware
from starlette.middleware.httpsredirect import HTTPSRedirectMiddleware
from starlette.types import ASGIApp, Receive, Scope, Send

from fintrack.core.config import settings


def _csv(value: str) -> Tuple[str, ...]:
    return tuple(p.strip() for p in value.split(",") if p.strip())


@dataclass(frozen=True)
class SecurityHeadersConfig:
    hsts_max_age: int = int(os.getenv("HSTS_MAX_AGE", "31536000"))
    referrer_policy: str = os.getenv("REFERRER_POLICY", "no-referrer")
    skip_paths: Tuple[str, ...] = _csv(os.getenv("SECURITY_SKIP_PATHS", "/docs,/redoc,/openapi.json"))
    sensitive_paths: Tuple[str, ...] = _csv(os.getenv("SENSITIVE_PATHS", "/api/auth"))


_CFG = SecurityHeadersConfig()


# ─────────────────────────────────────────────────────────────
# 🧱 Raw header helpers
# ─────────────────────────────────────────────────────────────

def _has_header(raw_headers: List[Tuple[bytes, bytes]], name: str) -> bool:
    lname = name.lower().encode("latin-1")
    return any(h[0].lower() == lname for h in raw_headers)


def _ensure(raw_headers: List[Tuple[bytes, bytes]], name: str, value: str) -> None:
    if not _has_header(raw_headers, name):
        raw_headers.append((name.encode("latin-1"), value.encode("latin-1")))


def _apply_security_headers(raw_headers: List[Tuple[bytes, bytes]], cfg: SecurityHeadersConfig) -> None:
    _ensure(raw_headers, "Strict-Transport-Security", f"max-age={cfg.hsts_max_age}; includeSubDomains")
    _ensure(raw_headers, "X-Content-Type-Options", "nosniff")
    _ensure(raw_headers, "X-Frame-Options", "DENY")
    _ensure(raw_headers, "Referrer-Policy", cfg.referrer_policy)
    _ensure(raw_headers, "Content-Security-Policy", "default-src 'none'; frame-ancestors 'none'")


def _apply_no_store(raw_headers: List[Tuple[bytes, bytes]]) -> None:
    _ensure(raw_headers, "Cache-Control", "no-store")
    _ensure(raw_headers, "Pragma", "no-cache")
    _ensure(raw_headers, "Expires", "0")


class SecurityHeadersMiddleware:
    """
    ASGI middleware that applies security headers on every response and
    no-store caching on sensitive paths or requests flagged by
    `set_sensitive_cache(request)`.
    """

    def __init__(self, app: ASGIApp, cfg: SecurityHeadersConfig = _CFG) -> None:
        self.app = app
        self.cfg = cfg

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            return await self.app(scope, receive, send)

        path = scope.get("path", "")
        skipped = path.startswith(self.cfg.skip_paths) if self.cfg.skip_paths else False
        sensitive = path.startswith(self.cfg.sensitive_paths) if self.cfg.sensitive_paths else False
        state = scope.setdefault("state", {})

        async def send_wrapper(message):
            if message.get("type") == "http.response.start":
                raw_headers = message.setdefault("headers", [])
                if not skipped:
                    _apply_security_headers(raw_headers, self.cfg)
                if sensitive or state.get("_sensitive_cache"):
                    _apply_no_store(raw_headers)
            await send(message)

        await self.app(scope, receive, send_wrapper)


# ─────────────────────────────────────────────────────────────
# 🔓 Public helpers
# ─────────────────────────────────────────────────────────────

def set_sensitive_cache(target: Union[Response, Request]) -> None:
    """
    Mark a **Response** or **Request** as not cacheable.

    - `Response`: headers are set immediately (idempotent).
    - `Request`: sets a flag read by the middleware at response start.
    """
    if isinstance(target, Response):
        target.headers["Cache-Control"] = "no-store"
        target.headers["Pragma"] = "no-cache"
        target.headers["Expires"] = "0"
        return
    if isinstance(target, Request):
        setattr(target.state, "_sensitive_cache", True)
        return
    raise TypeError("set_sensitive_cache expects a Response or Request")


def configure_cors(app) -> None:
    """Install strict CORS from `FRONTEND_ORIGINS` (localhost defaults in dev)."""
    origins = settings.frontend_origins_list
    if not origins and settings.is_development:
        origins = [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID", "Retry-After"],
        max_age=3600,
    )


def install_security(app) -> None:
    """Add HTTPS redirect (optional) and the security headers middleware."""
    if os.getenv("ENABLE_HTTPS_REDIRECT", "false").lower() == "true":
        app.add_middleware(HTTPSRedirectMiddleware)
    app.add_middleware(SecurityHeadersMiddleware, cfg=_CFG)


__all__ = [
    "SecurityHeadersConfig",
    "SecurityHeadersMiddleware",
    "install_security",
    "configure_cors",
    "set_sensitive_cache",
]
