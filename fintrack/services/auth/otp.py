from __future__ import annotations

"""
Password-reset codes
====================

- **CSPRNG numeric codes** of a fixed length, leading digit never zero.
- **Salted one-way storage**: codes are bcrypt-hashed through the same
  passlib context as passwords and verified in constant time.
- **Typed reset state**: a ledger row is projected to `ActiveReset` or
  `ConsumedReset`; only an active, unexpired request can be consumed.
- **One external failure**: every internal rejection reason is logged and
  then collapsed into `InvalidOrExpiredOTP`, so responses never reveal
  whether the account exists, the code was wrong or the request is stale.
"""

import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from loguru import logger

from fintrack.core.exceptions import InvalidOrExpiredOTP
from fintrack.core.security import get_password_hash, verify_password
from fintrack.repositories.password_reset import ResetRecord


# ─────────────────────────────────────────────────────────────
# 🔢 Codes
# ─────────────────────────────────────────────────────────────
def generate_otp(length: int = 6) -> str:
    """Uniform integer in [10^(n-1), 10^n - 1], as a string of exactly `length` digits."""
    if length <= 0:
        raise ValueError("OTP length must be positive")
    low = 10 ** (length - 1)
    return str(low + secrets.randbelow(9 * low))


def hash_otp(code: str) -> str:
    return get_password_hash(code)


def otp_matches(code: str, otp_hash: str) -> bool:
    return verify_password(code, otp_hash)


# ─────────────────────────────────────────────────────────────
# 🧾 Reset state
# ─────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class ConsumedReset:
    user_id: uuid.UUID
    used_at: datetime


@dataclass(frozen=True)
class ActiveReset:
    user_id: uuid.UUID
    otp_hash: str
    expires_at: datetime

    def is_usable(self, now: datetime) -> bool:
        return now < self.expires_at

    def consume(self, now: datetime) -> ConsumedReset:
        return ConsumedReset(user_id=self.user_id, used_at=now)


ResetState = Union[ActiveReset, ConsumedReset]


def project(record: ResetRecord) -> ResetState:
    if record.used_at is not None:
        return ConsumedReset(user_id=record.user_id, used_at=record.used_at)
    return ActiveReset(user_id=record.user_id, otp_hash=record.otp_hash, expires_at=record.expires_at)


# ─────────────────────────────────────────────────────────────
# 🚫 Rejections
# ─────────────────────────────────────────────────────────────
class ResetFailure(str, Enum):
    MISSING_INPUT = "missing_input"
    UNKNOWN_ACCOUNT = "unknown_account"
    NO_REQUEST = "no_request"
    ALREADY_USED = "already_used"
    EXPIRED = "expired"
    CODE_MISMATCH = "code_mismatch"


class ResetRejected(Exception):
    """Internal only. Never leaves the service; see `collapse`."""

    def __init__(self, reason: ResetFailure) -> None:
        super().__init__(reason.value)
        self.reason = reason


def collapse(reason: ResetFailure) -> InvalidOrExpiredOTP:
    """Log the real reason and return the single client-facing error."""
    logger.info("Password reset rejected | reason={}", reason.value)
    return InvalidOrExpiredOTP()


def check_reset(state: Optional[ResetState], code: str, now: datetime) -> ActiveReset:
    """Return the active request if `code` may be used against it at `now`.

    Order matters only for logging; the caller collapses every reason.
    """
    if state is None:
        raise ResetRejected(ResetFailure.NO_REQUEST)
    if isinstance(state, ConsumedReset):
        raise ResetRejected(ResetFailure.ALREADY_USED)
    if not state.is_usable(now):
        raise ResetRejected(ResetFailure.EXPIRED)
    if not otp_matches(code, state.otp_hash):
        raise ResetRejected(ResetFailure.CODE_MISMATCH)
    return state


__all__ = [
    "generate_otp",
    "hash_otp",
    "otp_matches",
    "ActiveReset",
    "ConsumedReset",
    "ResetState",
    "project",
    "ResetFailure",
    "ResetRejected",
    "collapse",
    "check_reset",
]
