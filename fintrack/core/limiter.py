from __future__ import annotations

"""
Finance Tracker — HTTP Rate Limiting (SlowAPI)
==============================================

Highlights
----------
- **IP keyed**: X-Forwarded-For (first hop), then X-Real-IP, then socket peer.
- **Exemptions**: health/docs paths, configurable trusted IPs.
- **Test/CI friendly**:
    - `RATE_LIMIT_NAMESPACE`: prefixes keys so parallel runs don't collide.
    - `RATE_LIMIT_TEST_BYPASS`: disables limits when truthy (read per request).
- **Backends**: any `limits` storage URI, in-memory by default.

Environment
-----------
RATE_LIMIT_ENABLED           default: "true"
DEFAULT_RATE_LIMIT           default: "" (no global limit; routes opt in)
RATELIMIT_STORAGE_URI        default: "" (falls back to "memory://")
RATELIMIT_STRATEGY           default: "moving-window"
RATE_LIMIT_SKIP_PATHS        default: "/healthz,/readyz,/docs,/openapi.json,/favicon.ico"
RATE_LIMIT_TRUSTED_IPS       default: "" (comma separated)
RATE_LIMIT_NAMESPACE         default: ""
RATE_LIMIT_TEST_BYPASS       default: "" (truthy to bypass in tests/CI)

Usage
-----
    from fintrack.core.limiter import install_rate_limiter, rate_limit

    install_rate_limiter(app)

    @router.post("/forgot-password")
    @rate_limit(settings.OTP_RATE_LIMIT)
    async def forgot_password(request: Request, response: Response, ...): ...

Decorated endpoints must accept `request: Request` and `response: Response`.
"""

import os
from typing import Callable, List, Optional, Set

from dotenv import load_dotenv
from loguru import logger
from slowapi import Limiter
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.requests import Request

load_dotenv()

_TRUTHY = {"1", "true", "yes", "on"}

RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
DEFAULT_LIMIT = os.getenv("DEFAULT_RATE_LIMIT", "").strip()
STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "").strip()
STRATEGY = os.getenv("RATELIMIT_STRATEGY", "moving-window").strip()

SKIP_PATHS: List[str] = [
    p.strip()
    for p in os.getenv(
        "RATE_LIMIT_SKIP_PATHS",
        "/healthz,/readyz,/docs,/openapi.json,/favicon.ico",
    ).split(",")
    if p.strip()
]
TRUSTED_IPS: Set[str] = {ip.strip() for ip in os.getenv("RATE_LIMIT_TRUSTED_IPS", "").split(",") if ip.strip()}
NAMESPACE = os.getenv("RATE_LIMIT_NAMESPACE", "").strip()


# ──────────────────────────────────────────────────────────────
# 🧠 Keying & exemptions
# ──────────────────────────────────────────────────────────────
def client_ip(request: Request) -> str:
    """Best-effort client IP (XFF first hop → X-Real-IP → ASGI peer)."""
    xff = request.headers.get("x-forwarded-for")
    if xff:
        ip = xff.split(",")[0].strip()
        if ip:
            return ip
    xri = request.headers.get("x-real-ip")
    if xri and xri.strip():
        return xri.strip()
    return get_remote_address(request) or "unknown"


def rate_limit_key(request: Request) -> str:
    key = f"ip:{client_ip(request)}"
    return f"{NAMESPACE}:{key}" if NAMESPACE else key


def _path_is_skipped(path: str) -> bool:
    return any(path == p or path.startswith(p.rstrip("/") + "/") for p in SKIP_PATHS)


def should_exempt_request(request: Optional[Request]) -> bool:
    """
    Exempt a request when limiting is switched off, the path is skipped,
    the caller is trusted, or the test bypass is on.
    """
    # Env is re-read so tests can flip limits without re-importing.
    if os.getenv("RATE_LIMIT_ENABLED", "true").strip().lower() != "true":
        return True
    if os.getenv("RATE_LIMIT_TEST_BYPASS", "").strip().lower() in _TRUTHY:
        return True
    if request is None:
        return False
    if _path_is_skipped(request.url.path):
        return True
    return client_ip(request) in TRUSTED_IPS


# ──────────────────────────────────────────────────────────────
# 🧰 Limiter instance
# ──────────────────────────────────────────────────────────────
def _default_limits() -> List[str]:
    return [chunk.strip() for chunk in DEFAULT_LIMIT.split(",") if chunk.strip()]


def _make_limiter() -> Limiter:
    storage_uri = STORAGE_URI or "memory://"
    limiter = Limiter(
        key_func=rate_limit_key,
        default_limits=_default_limits(),
        headers_enabled=True,
        storage_uri=storage_uri,
        strategy=STRATEGY,
    )
    logger.info(
        "RateLimiter ready | enabled={} | default={} | storage={} | ns={}",
        RATE_LIMIT_ENABLED, _default_limits(), storage_uri, NAMESPACE or "-",
    )
    return limiter


limiter: Limiter = _make_limiter()


# ──────────────────────────────────────────────────────────────
# 🎛 Decorators
# ──────────────────────────────────────────────────────────────
def _exempt_when(request: Optional[Request] = None) -> bool:
    return should_exempt_request(request)


def rate_limit(*limits: str) -> Callable:
    """
    Apply per-route limits with the exemptions above.

    Examples
    --------
    @rate_limit("5 per 5 minutes")
    @rate_limit("5/second", "100/minute")
    """
    selected = list(limits) if limits else _default_limits()
    decorators = [limiter.limit(value, exempt_when=_exempt_when) for value in selected]

    def _apply(fn: Callable) -> Callable:
        for deco in reversed(decorators):
            fn = deco(fn)
        return fn

    return _apply


# ──────────────────────────────────────────────────────────────
# 🔧 Installer
# ──────────────────────────────────────────────────────────────
def install_rate_limiter(app) -> None:
    """Attach the limiter to `app.state` and mount SlowAPI middleware."""
    app.state.limiter = limiter
    if not RATE_LIMIT_ENABLED:
        logger.info("RateLimiter disabled by env; middleware not installed")
        return
    app.add_middleware(SlowAPIMiddleware)


__all__ = ["limiter", "rate_limit", "install_rate_limiter", "client_ip", "should_exempt_request"]
