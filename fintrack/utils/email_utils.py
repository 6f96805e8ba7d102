# fintrack/utils/email_utils.py

from __future__ import annotations

"""
Email Utilities for Finance Tracker
===================================

Low-level primitives behind `fintrack.core.email`:

- Jinja2 rendering of the packaged templates (`fintrack/templates/emails`)
- FastAPI-Mail connection config built from settings
- `send_multipart`: one HTML message with a plain-text alternative

Highlights
----------
- Dry-run: when `SMTP_HOST` is unset the message is logged, not sent.
- Background-safe: the sender **logs** failures and returns False instead of
  raising, so a scheduled task never crashes the worker.

Settings knobs
--------------
SMTP_HOST, SMTP_PORT, SMTP_USERNAME, SMTP_PASSWORD
EMAIL_FROM, EMAIL_FROM_NAME
"""

from pathlib import Path
from typing import Optional

from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType
from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape
from loguru import logger

from fintrack.core.config import settings

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates" / "emails"

# Lazy singletons for FastAPI-Mail + Jinja2
_fastmail: Optional[FastMail] = None
_jinja_env: Optional[Environment] = None


# ──────────────────────────────────────────────────────────────────────────────
# 🧰 Jinja environment
# ──────────────────────────────────────────────────────────────────────────────

def _jinja() -> Environment:
    """Jinja2 environment over the packaged email templates (HTML autoescaped)."""
    global _jinja_env
    if _jinja_env is None:
        _jinja_env = Environment(
            loader=FileSystemLoader(str(TEMPLATE_DIR)),
            autoescape=select_autoescape(enabled_extensions=("html", "xml")),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )
    return _jinja_env


def render_template(template_name: str, **context) -> str:
    """Render `template_name` with `context`. Missing variables raise."""
    return _jinja().get_template(template_name).render(**context)


# ──────────────────────────────────────────────────────────────────────────────
# 📮 FastAPI-Mail configuration
# ──────────────────────────────────────────────────────────────────────────────

def _conn_config() -> ConnectionConfig:
    use_ssl = settings.SMTP_PORT == 465  # implicit TLS; otherwise STARTTLS
    password = settings.SMTP_PASSWORD.get_secret_value() if settings.SMTP_PASSWORD else ""
    return ConnectionConfig(
        MAIL_USERNAME=settings.SMTP_USERNAME or "",
        MAIL_PASSWORD=password,
        MAIL_FROM=settings.EMAIL_FROM,
        MAIL_PORT=settings.SMTP_PORT,
        MAIL_SERVER=settings.SMTP_HOST or "localhost",
        MAIL_FROM_NAME=settings.EMAIL_FROM_NAME,
        MAIL_STARTTLS=not use_ssl,
        MAIL_SSL_TLS=use_ssl,
        USE_CREDENTIALS=bool(settings.SMTP_USERNAME and password),
        SUPPRESS_SEND=0,
    )


def _fastmail_client() -> FastMail:
    """Lazily instantiate and cache the FastMail client."""
    global _fastmail
    if _fastmail is None:
        _fastmail = FastMail(_conn_config())
    return _fastmail


def smtp_configured() -> bool:
    return bool(settings.SMTP_HOST)


def _mailto(to_email: str) -> str:
    """Minimal recipient check; raises ValueError if clearly malformed."""
    addr = (to_email or "").strip()
    if not addr or "@" not in addr:
        raise ValueError("Invalid recipient email")
    return addr


# ──────────────────────────────────────────────────────────────────────────────
# ✉️  ASYNC: HTML + text alternative via FastAPI-Mail
# ──────────────────────────────────────────────────────────────────────────────

async def send_multipart(to_email: str, subject: str, text: str, html: str) -> bool:
    """
    Send one message carrying an HTML body and a plain-text alternative.

    Returns
    -------
    bool
        True when handed to the SMTP server (or logged in dry-run mode),
        False on any delivery failure. Never raises.
    """
    try:
        recipient = _mailto(to_email)
    except ValueError:
        logger.warning("Email skipped: malformed recipient")
        return False

    if not smtp_configured():
        logger.info("📨 [DRY-RUN] Email to={} subject={}\n{}", recipient, subject, text)
        return True

    message = MessageSchema(
        subject=subject,
        recipients=[recipient],
        body=html,
        alternative_body=text,
        subtype=MessageType.html,
        multipart_subtype="alternative",
    )
    try:
        await _fastmail_client().send_message(message)
    except Exception:
        logger.exception("❌ FastMail send failed (subject={}) [non-fatal]", subject)
        return False
    logger.info("📨 Email sent (subject={})", subject)
    return True


__all__ = ["render_template", "send_multipart", "smtp_configured", "TEMPLATE_DIR"]
