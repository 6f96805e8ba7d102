# fintrack/core/config.py
from __future__ import annotations

"""
# Finance Tracker — Centralized Configuration (Pydantic v2)

Single `settings` object with strongly-typed, environment-driven config.

## Goals
- Safe defaults for local/dev; explicit where prod needs secrets.
- Bounded security knobs (token lifetime, bcrypt cost, OTP window).
- CSV → list helpers for CORS origins.

## Usage
    from fintrack.core.config import settings
"""

from typing import List, Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()  # harmless in prod; convenient in dev


# ─────────────────────────────────────────────────────────────
# Small helpers
# ─────────────────────────────────────────────────────────────
def _split_csv(v: str | None) -> list[str]:
    """Split a comma-separated string into a trimmed list (empty-safe)."""
    if not v:
        return []
    return [s.strip() for s in str(v).split(",") if s and s.strip()]


# ─────────────────────────────────────────────────────────────
# Settings
# ─────────────────────────────────────────────────────────────
class Settings(BaseSettings):
    """
    Global application settings sourced from environment.

    Security:
        - `JWT_SECRET_KEY` has no default; the app refuses to start without it.
        - OTP length/expiry and bcrypt cost are clamped to sane ranges.

    Notes:
        - `DATABASE_URL` wins over the `POSTGRES_*` parts when set.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # don't crash on unknown keys
    )

    # ── App meta ──────────────────────────────────────────────
    PROJECT_NAME: str = "Finance Tracker API"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"
    ENV: Literal["development", "staging", "production"] = "development"
    ENABLE_DOCS: bool = True
    APP_NAME: str = "Finance Tracker"  # shown in transactional emails

    # ── Security / sessions ───────────────────────────────────
    JWT_SECRET_KEY: SecretStr = Field(...)
    JWT_ALGORITHM: Literal["HS256", "HS384", "HS512"] = "HS256"
    SESSION_TOKEN_EXPIRE_DAYS: int = Field(7, ge=1, le=365)
    BCRYPT_ROUNDS: int = Field(12, ge=4, le=16)
    PASSWORD_MIN_LENGTH: int = Field(8, ge=6, le=128)

    # ── Password reset OTP ────────────────────────────────────
    OTP_LENGTH: int = Field(6, ge=4, le=10)
    OTP_EXPIRY_MINUTES: int = Field(10, ge=1, le=24 * 60)
    OTP_RATE_LIMIT: str = "5 per 5 minutes"

    # ── Account defaults ──────────────────────────────────────
    DEFAULT_CURRENCY: str = Field("USD", min_length=3, max_length=3)
    DEFAULT_THEME: Literal["light", "dark"] = "light"

    # ── Database ──────────────────────────────────────────────
    DATABASE_URL: Optional[str] = None  # e.g. sqlite+aiosqlite:///./fintrack.db
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: SecretStr = SecretStr("")
    POSTGRES_DB: str = "fintrack"
    DB_AUTO_CREATE: bool = False

    # ── CORS ──────────────────────────────────────────────────
    FRONTEND_ORIGINS: Optional[str] = None  # CSV

    # ── Email ─────────────────────────────────────────────────
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USERNAME: Optional[str] = None
    SMTP_PASSWORD: Optional[SecretStr] = None
    EMAIL_FROM: str = "no-reply@fintrack.app"
    EMAIL_FROM_NAME: str = "Finance Tracker"

    # ── Validators / normalizers ──────────────────────────────
    @field_validator("FRONTEND_ORIGINS", mode="before")
    @classmethod
    def _normalize_frontend_csv(cls, v):
        return None if v is None else ",".join(_split_csv(str(v)))

    @field_validator("DEFAULT_CURRENCY", mode="before")
    @classmethod
    def _upper_currency(cls, v):
        return str(v or "USD").strip().upper()

    # ── Derived / convenience properties ─────────────────────
    @property
    def is_production(self) -> bool:
        return self.ENV.lower() == "production"

    @property
    def is_development(self) -> bool:
        return self.ENV.lower() == "development"

    @property
    def database_url(self) -> str:
        """Async SQLAlchemy DSN (explicit `DATABASE_URL` first, else asyncpg DSN)."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD.get_secret_value()}"
            f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def frontend_origins_list(self) -> List[str]:
        return _split_csv(self.FRONTEND_ORIGINS)

    @property
    def session_token_ttl_seconds(self) -> int:
        return self.SESSION_TOKEN_EXPIRE_DAYS * 24 * 60 * 60


# Singleton instance
settings = Settings()
