# fintrack/core/email.py
from __future__ import annotations

"""
Outbound notifications used by the auth service.

`Notifier` is the seam the service depends on; `EmailNotifier` is the SMTP
implementation over `fintrack.utils.email_utils`. Message copy lives here so
the service only passes the code and its validity window.
"""

from dataclasses import dataclass
from typing import Protocol

from fintrack.core.config import settings
from fintrack.utils.email_utils import render_template, send_multipart


class Notifier(Protocol):
    async def send(self, to: str, subject: str, text: str, html: str) -> bool:
        """Deliver one message. Returns False on failure instead of raising."""
        ...


class EmailNotifier:
    """SMTP delivery through FastAPI-Mail (logged dry-run without SMTP_HOST)."""

    async def send(self, to: str, subject: str, text: str, html: str) -> bool:
        return await send_multipart(to, subject, text, html)


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    text: str
    html: str


def password_reset_otp_email(code: str, expires_minutes: int) -> RenderedEmail:
    """Subject, text and HTML bodies for a reset code."""
    ctx = {"app_name": settings.APP_NAME, "otp": code, "expires_minutes": expires_minutes}
    return RenderedEmail(
        subject=f"{settings.APP_NAME} - Password Reset OTP",
        text=render_template("password_reset_otp.txt", **ctx),
        html=render_template("password_reset_otp.html", **ctx),
    )


def get_notifier() -> Notifier:
    """FastAPI dependency; tests override it with a recording fake."""
    return EmailNotifier()


__all__ = ["Notifier", "EmailNotifier", "RenderedEmail", "password_reset_otp_email", "get_notifier"]
