# fintrack/core/security.py
from __future__ import annotations

"""
Finance Tracker — Password Hashing & Session Tokens
===================================================
- Salted one-way hashing (passlib bcrypt) for passwords *and* reset codes
- Session JWT creation (sub/iat/nbf/exp/jti, `token_type="access"`)
- Session JWT decoding with typed 401s

The FastAPI dependency that turns a bearer token into a user lives in
`fintrack.api.deps`.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import UUID, uuid4

from jose import ExpiredSignatureError, JWTError, jwt
from loguru import logger
from passlib.context import CryptContext

from fintrack.core.config import settings
from fintrack.core.exceptions import InvalidTokenException

# ───────────────────────────────────────────────
# 🔐 Security Constants and Setup
# ───────────────────────────────────────────────
ALGORITHM: str = settings.JWT_ALGORITHM
TOKEN_TYPE = "access"

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


# ───────────────────────────────────────────────
# 🔐 Hashing Utilities
# ───────────────────────────────────────────────
def get_password_hash(password: str) -> str:
    """Return a salted hash using Passlib's bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Constant-time verify of a plaintext secret against a stored hash.

    Returns False (never raises) for empty input or an unparseable hash.
    """
    if not plain_password or not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        logger.warning("Stored hash could not be parsed; treating as mismatch")
        return False


# ───────────────────────────────────────────────
# 🪪 JWT session token
# ───────────────────────────────────────────────
def create_session_token(
    user_id: UUID,
    *,
    now: Optional[datetime] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a signed session token for `user_id`."""
    now = now or datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(days=settings.SESSION_TOKEN_EXPIRE_DAYS))
    payload: Dict[str, Any] = {
        "sub": str(user_id),
        "iat": now,
        "nbf": now,
        "exp": expire,
        "jti": str(uuid4()),
        "token_type": TOKEN_TYPE,
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY.get_secret_value(), algorithm=ALGORITHM)


def decode_session_token(token: str) -> Dict[str, Any]:
    """Decode and validate a session token.

    Checks signature, `exp`/`nbf`/`iat`, presence of `jti` and the token type.

    Raises
    ------
    InvalidTokenException
        For any malformed, badly signed, expired or wrong-type token.
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY.get_secret_value(),
            algorithms=[ALGORITHM],
        )
    except ExpiredSignatureError:
        logger.info("Session token rejected: expired")
        raise InvalidTokenException()
    except JWTError as e:
        logger.info("Session token rejected: {}", e.__class__.__name__)
        raise InvalidTokenException()

    if not payload.get("jti") or payload.get("token_type") != TOKEN_TYPE:
        logger.info("Session token rejected: missing jti or wrong type")
        raise InvalidTokenException()
    return payload


def get_user_id_from_payload(payload: Dict[str, Any]) -> UUID:
    """Extract and validate `sub` as a UUID; raise 401 if malformed/missing."""
    sub = payload.get("sub")
    if not sub:
        raise InvalidTokenException()
    try:
        return UUID(str(sub))
    except ValueError:
        raise InvalidTokenException()


__all__ = [
    "pwd_context",
    "get_password_hash",
    "verify_password",
    "create_session_token",
    "decode_session_token",
    "get_user_id_from_payload",
]
