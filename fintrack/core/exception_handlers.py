from __future__ import annotations

"""
Problem+JSON exception handlers (RFC 7807).

Installed by `fintrack.main.create_app`. Every HTTP error is rendered as
application/problem+json; clients read the human message from `detail`.
"""

from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from fintrack.core.exceptions import AppException


def _problem(
    title: str,
    detail: str,
    status_code: int,
    request: Request,
    *,
    headers: Optional[Dict[str, str]] = None,
    **extra: Any,
) -> JSONResponse:
    content: Dict[str, Any] = {
        "type": "about:blank",
        "title": title,
        "detail": detail,
        "status": status_code,
        "instance": str(request.url),
    }
    content.update(extra)
    return JSONResponse(
        status_code=status_code,
        content=content,
        headers=headers,
        media_type="application/problem+json",
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:  # type: ignore
    title = exc.__class__.__name__.replace("Exception", "").strip() or "Error"
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    extra: Dict[str, Any] = {}
    if isinstance(exc, AppException) and exc.details is not None:
        extra["details"] = exc.details
    return _problem(title, detail, exc.status_code, request, headers=getattr(exc, "headers", None), **extra)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:  # type: ignore
    return _problem(
        "Validation error",
        "Validation error",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        request,
        errors=jsonable_encoder(exc.errors(), exclude={"input"}),
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:  # type: ignore
    # Hide internals from the client; the trace goes to the log.
    logger.opt(exception=exc).error("Unhandled error on {} {}", request.method, request.url.path)
    return _problem(
        "Internal Server Error",
        "An unexpected error occurred.",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        request,
    )


__all__ = [
    "http_exception_handler",
    "validation_exception_handler",
    "global_exception_handler",
]
