from __future__ import annotations

"""
Auth service: accounts, sessions and password reset
===================================================

Features
--------
- **Signup** with bcrypt hashing and onboarding defaults.
- **Login** with a single failure message (and a dummy hash check for
  unknown emails so both paths cost one bcrypt verify).
- **Forgot / verify / reset** with numeric OTPs stored as salted hashes.
- **Neutral responses**: forgot-password always answers the same; every
  verify/reset failure collapses to `InvalidOrExpiredOTP`.
- **BackgroundTasks** for non-blocking email when the caller provides them.

The service holds no state of its own. Stores, notifier, provisioner and
clock are injected, so tests drive it with in-memory fakes and a fixed clock.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Final, Optional

from fastapi import BackgroundTasks
from loguru import logger

from fintrack.core.config import settings
from fintrack.core.email import Notifier, RenderedEmail, password_reset_otp_email
from fintrack.core.exceptions import (
    EmailAlreadyRegistered,
    InvalidCredentials,
    UserNotFound,
    WeakPassword,
)
from fintrack.core.security import create_session_token, get_password_hash, verify_password
from fintrack.repositories.password_reset import PasswordResetRepositoryProtocol
from fintrack.repositories.user import DuplicateEmailError, UserRecord, UserRepositoryProtocol
from fintrack.services.auth.otp import (
    ResetFailure,
    ResetRejected,
    check_reset,
    collapse,
    generate_otp,
    hash_otp,
    project,
)
from fintrack.services.onboarding import OnboardingProvisionerProtocol

SIGNUP_MESSAGE: Final[str] = "User registered successfully. Please log in."
FORGOT_PASSWORD_MESSAGE: Final[str] = "If an account with that email exists, an OTP has been sent."
OTP_VERIFIED_MESSAGE: Final[str] = "OTP verified successfully."
PASSWORD_RESET_MESSAGE: Final[str] = "Password has been reset successfully."

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


_dummy_hash: Optional[str] = None


def _timing_hash() -> str:
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = get_password_hash(uuid.uuid4().hex)
    return _dummy_hash


class AuthService:
    def __init__(
        self,
        *,
        users: UserRepositoryProtocol,
        resets: PasswordResetRepositoryProtocol,
        notifier: Notifier,
        provisioner: Optional[OnboardingProvisionerProtocol] = None,
        clock: Clock = utc_now,
    ) -> None:
        self.users = users
        self.resets = resets
        self.notifier = notifier
        self.provisioner = provisioner
        self.clock = clock

    # ─────────────────────────────────────────────────────────────
    # 👤 Signup / login
    # ─────────────────────────────────────────────────────────────
    async def signup(
        self,
        *,
        email: str,
        password: str,
        full_name: str,
        currency: Optional[str] = None,
    ) -> UserRecord:
        """Create an account and provision its defaults.

        Raises
        ------
        EmailAlreadyRegistered
            The email is taken (including a lost insert race).
        WeakPassword
            Password shorter than `PASSWORD_MIN_LENGTH`.
        """
        if len(password or "") < settings.PASSWORD_MIN_LENGTH:
            raise WeakPassword(min_length=settings.PASSWORD_MIN_LENGTH)
        if await self.users.get_by_email(email) is not None:
            raise EmailAlreadyRegistered()

        try:
            user = await self.users.create(
                email=email,
                password_hash=get_password_hash(password),
                full_name=full_name,
                currency=(currency or "").strip().upper() or settings.DEFAULT_CURRENCY,
                theme=settings.DEFAULT_THEME,
            )
        except DuplicateEmailError:
            raise EmailAlreadyRegistered()

        if self.provisioner is not None:
            try:
                await self.provisioner.provision(user)
            except Exception:
                # The account is usable without defaults; they can be added later.
                logger.exception("Onboarding defaults failed | user_id={}", user.id)

        logger.info("User registered | user_id={}", user.id)
        return user

    async def login(self, *, email: str, password: str) -> Dict[str, Any]:
        """Return `{"token", "user"}` or raise `InvalidCredentials`."""
        user = await self.users.get_by_email(email)
        if user is None:
            verify_password(password, _timing_hash())
            logger.info("Login failed")
            raise InvalidCredentials()
        if not verify_password(password, user.password_hash):
            logger.info("Login failed | user_id={}", user.id)
            raise InvalidCredentials()

        token = create_session_token(user.id, now=self.clock())
        logger.info("Login ok | user_id={}", user.id)
        return {"token": token, "user": user.public()}

    # ─────────────────────────────────────────────────────────────
    # 🔁 Password reset
    # ─────────────────────────────────────────────────────────────
    async def forgot_password(
        self,
        email: Optional[str],
        *,
        background_tasks: Optional[BackgroundTasks] = None,
    ) -> Dict[str, str]:
        """Issue a reset code when the account exists. Always the same answer."""
        generic = {"message": FORGOT_PASSWORD_MESSAGE}
        if not email:
            return generic

        user = await self.users.get_by_email(email)
        if user is None:
            # same hashing cost as a real request
            hash_otp(generate_otp(settings.OTP_LENGTH))
            logger.info("Reset requested for unknown account")
            return generic

        code = generate_otp(settings.OTP_LENGTH)
        expires_at = self.clock() + timedelta(minutes=settings.OTP_EXPIRY_MINUTES)
        await self.resets.replace(user.id, otp_hash=hash_otp(code), expires_at=expires_at)

        message = password_reset_otp_email(code, settings.OTP_EXPIRY_MINUTES)
        if background_tasks is not None:
            background_tasks.add_task(self._deliver, user.id, user.email, message)
        else:
            await self._deliver(user.id, user.email, message)

        logger.info("Reset code issued | user_id={}", user.id)
        return generic

    async def _deliver(self, user_id: uuid.UUID, to: str, message: RenderedEmail) -> None:
        delivered = await self.notifier.send(to, message.subject, message.text, message.html)
        if not delivered:
            # The ledger row stays; it expires or the next request replaces it.
            logger.warning("Reset code delivery failed | user_id={}", user_id)

    async def _authorize_reset(self, email: Optional[str], code: Optional[str]):
        """Return `(user, active_reset)` or raise the collapsed error."""
        try:
            if not email or not code:
                raise ResetRejected(ResetFailure.MISSING_INPUT)
            user = await self.users.get_by_email(email)
            if user is None:
                raise ResetRejected(ResetFailure.UNKNOWN_ACCOUNT)
            record = await self.resets.get(user.id)
            active = check_reset(project(record) if record else None, code, self.clock())
        except ResetRejected as rejected:
            raise collapse(rejected.reason) from None
        return user, active

    async def verify_otp(self, email: Optional[str], code: Optional[str]) -> Dict[str, str]:
        """Check a code without consuming it. Repeatable."""
        user, _ = await self._authorize_reset(email, code)
        logger.info("Reset code verified | user_id={}", user.id)
        return {"message": OTP_VERIFIED_MESSAGE}

    async def reset_password(
        self,
        email: Optional[str],
        code: Optional[str],
        new_password: Optional[str],
    ) -> Dict[str, str]:
        """Set a new password and consume the request.

        Raises
        ------
        InvalidOrExpiredOTP
            Missing input or any rejected request/code.
        WeakPassword
            `new_password` shorter than `PASSWORD_MIN_LENGTH`.
        """
        if not email or not code or not new_password:
            raise collapse(ResetFailure.MISSING_INPUT)
        if len(new_password) < settings.PASSWORD_MIN_LENGTH:
            raise WeakPassword(min_length=settings.PASSWORD_MIN_LENGTH)

        user, active = await self._authorize_reset(email, code)
        await self.users.update_password(user.id, get_password_hash(new_password))
        consumed = active.consume(self.clock())
        if not await self.resets.mark_used(user.id, consumed.used_at, otp_hash=active.otp_hash):
            logger.warning("Reset row was consumed or replaced concurrently | user_id={}", user.id)

        logger.info("Password reset | user_id={}", user.id)
        return {"message": PASSWORD_RESET_MESSAGE}

    # ─────────────────────────────────────────────────────────────
    # 🪪 Current user
    # ─────────────────────────────────────────────────────────────
    async def get_current_user(self, user_id: uuid.UUID) -> UserRecord:
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise UserNotFound(user_id=str(user_id))
        return user

    async def update_profile(self, user_id: uuid.UUID, patch: Dict[str, Any]) -> UserRecord:
        changes = dict(patch)
        if changes.get("currency"):
            changes["currency"] = str(changes["currency"]).strip().upper()
        user = await self.users.update_profile(user_id, changes)
        if user is None:
            raise UserNotFound(user_id=str(user_id))
        logger.info("Profile updated | user_id={} fields={}", user_id, sorted(k for k, v in patch.items() if v is not None))
        return user


__all__ = [
    "AuthService",
    "utc_now",
    "SIGNUP_MESSAGE",
    "FORGOT_PASSWORD_MESSAGE",
    "OTP_VERIFIED_MESSAGE",
    "PASSWORD_RESET_MESSAGE",
]
