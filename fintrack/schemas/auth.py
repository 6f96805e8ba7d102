# fintrack/schemas/auth.py

import re
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fintrack.core.config import settings

# Light sanity check only; the address is stored exactly as supplied.
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ──────────────── Sign Up ────────────────
class SignupPayload(_CamelModel):
    email: str = Field(..., max_length=320)
    password: str = Field(..., min_length=settings.PASSWORD_MIN_LENGTH, max_length=128)
    full_name: str = Field(..., alias="fullName", min_length=1, max_length=255)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)

    @field_validator("currency", mode="before")
    @classmethod
    def _blank_currency(cls, v):
        # "" means "use the default", same as omitting it
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("email")
    @classmethod
    def _email_shape(cls, v: str) -> str:
        if not _EMAIL_RE.match(v):
            raise ValueError("Invalid email address")
        return v


# ──────────────── Login ────────────────
class LoginRequest(BaseModel):
    email: str
    password: str


class PublicUser(_CamelModel):
    id: str
    email: str
    full_name: str = Field(..., alias="fullName")
    currency: str
    theme: str


class LoginResponse(BaseModel):
    token: str
    user: PublicUser


class CurrentUserResponse(BaseModel):
    user: PublicUser


# ──────────────── Profile ────────────────
class ProfileUpdate(_CamelModel):
    full_name: Optional[str] = Field(None, alias="fullName", min_length=1, max_length=255)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    theme: Optional[Literal["light", "dark"]] = None


# ──────────────── Password Reset ────────────────
# Fields are optional and loosely typed: missing or malformed input is
# answered by the service with the same 400 as a wrong code.
def _loose_str(v: Any) -> Optional[str]:
    if isinstance(v, bool):
        return None
    if isinstance(v, int):
        return str(v)
    return v if isinstance(v, str) else None


class ForgotPasswordRequest(BaseModel):
    email: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def _loose(cls, v: Any) -> Optional[str]:
        return _loose_str(v)


class OTPVerifyRequest(BaseModel):
    email: Optional[str] = None
    otp: Optional[str] = None

    @field_validator("email", "otp", mode="before")
    @classmethod
    def _loose(cls, v: Any) -> Optional[str]:
        return _loose_str(v)


class PasswordResetConfirm(_CamelModel):
    email: Optional[str] = None
    otp: Optional[str] = None
    new_password: Optional[str] = Field(None, alias="newPassword")

    @field_validator("email", "otp", "new_password", mode="before")
    @classmethod
    def _loose(cls, v: Any) -> Optional[str]:
        return _loose_str(v)


class MessageResponse(BaseModel):
    message: str
