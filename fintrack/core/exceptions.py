# fintrack/core/exceptions.py
from __future__ import annotations

"""
Finance Tracker — Application Exceptions
========================================
A thin layer on top of FastAPI's `HTTPException` so services can raise typed,
client-safe errors and the problem+json handlers in
`fintrack.core.exception_handlers` render them uniformly.

Key ideas
---------
- One base `AppException` carrying `code`, `user_id`, `details`.
- Account/auth errors inherit from it with fixed status + message.
- Messages are the public contract; anything sensitive stays in logs.

Usage
-----
    raise EmailAlreadyRegistered()
    raise AppException(status_code=409, message="Conflict", details={"field": "email"})
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

__all__ = [
    "AppException",
    "EmailAlreadyRegistered",
    "InvalidCredentials",
    "InvalidOrExpiredOTP",
    "WeakPassword",
    "NotAuthenticated",
    "InvalidTokenException",
    "UserNotFound",
]


# ──────────────────────────────────────────────────────────────
# 📦 Core: AppException
# ──────────────────────────────────────────────────────────────
class AppException(HTTPException):
    """Base application-level exception with optional metadata.

    Attributes
    -----------
    status_code : int
        HTTP status code.
    message : str
        Human-readable error message (serialized as `detail`).
    code : int
        Optional internal error code. Defaults to `status_code`.
    user_id : str | None
        Acting/affected user for log context. Never rendered.
    details : Any
        Machine-readable details for clients (must be non-sensitive).
    headers : dict | None
        Optional response headers (e.g. `WWW-Authenticate`).
    """

    def __init__(
        self,
        *,
        status_code: int,
        message: str,
        code: Optional[int] = None,
        user_id: Optional[str] = None,
        details: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.code: int = int(code or status_code)
        self.message: str = message
        self.user_id: Optional[str] = user_id
        self.details: Optional[Any] = details


# ──────────────────────────────────────────────────────────────
# 👤 Account
# ──────────────────────────────────────────────────────────────
class EmailAlreadyRegistered(AppException):
    """Signup with an email that already has an account."""

    def __init__(self) -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, message="Email already registered")


class InvalidCredentials(AppException):
    """Login failure. Same message for unknown email and wrong password."""

    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            message="Invalid email or password",
        )


class UserNotFound(AppException):
    def __init__(self, *, user_id: Optional[str] = None) -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, message="User not found", user_id=user_id)


# ──────────────────────────────────────────────────────────────
# 🔁 Password reset
# ──────────────────────────────────────────────────────────────
class InvalidOrExpiredOTP(AppException):
    """The only failure verify/reset ever report, whatever went wrong."""

    def __init__(self) -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, message="Invalid or expired OTP.")


class WeakPassword(AppException):
    def __init__(self, *, min_length: int = 8) -> None:
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            message=f"Password must be at least {min_length} characters long.",
            details={"min_length": min_length},
        )


# ──────────────────────────────────────────────────────────────
# 🔑 Session token
# ──────────────────────────────────────────────────────────────
class NotAuthenticated(AppException):
    """No bearer credential on a protected route."""

    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            message="Access token required",
            headers={"WWW-Authenticate": "Bearer"},
        )


class InvalidTokenException(AppException):
    """Raised for malformed, badly signed or expired tokens (401 by default)."""

    def __init__(
        self,
        *,
        detail: str = "Invalid or expired token",
        status_code: int = status.HTTP_401_UNAUTHORIZED,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        super().__init__(
            status_code=status_code,
            message=detail,
            headers=headers or {"WWW-Authenticate": "Bearer"},
        )
