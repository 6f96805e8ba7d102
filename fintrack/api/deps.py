"""
FastAPI dependencies shared by the auth routers.

- `get_auth_service`: an `AuthService` wired to the request's DB session.
- `get_current_user`: resolves the bearer session token to a user.

Missing credentials and bad credentials are told apart: no header gives
`NotAuthenticated`, anything unverifiable gives `InvalidTokenException`.
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from fintrack.core.email import Notifier, get_notifier
from fintrack.core.exceptions import NotAuthenticated
from fintrack.core.security import decode_session_token, get_user_id_from_payload
from fintrack.db.session import get_async_db
from fintrack.repositories.password_reset import SQLPasswordResetRepository
from fintrack.repositories.user import SQLUserRepository, UserRecord
from fintrack.services.auth.auth_service import AuthService
from fintrack.services.onboarding import SQLOnboardingProvisioner

bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_service(
    db: AsyncSession = Depends(get_async_db),
    notifier: Notifier = Depends(get_notifier),
) -> AuthService:
    return AuthService(
        users=SQLUserRepository(db),
        resets=SQLPasswordResetRepository(db),
        notifier=notifier,
        provisioner=SQLOnboardingProvisioner(db),
    )


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    service: AuthService = Depends(get_auth_service),
) -> UserRecord:
    """Authenticate the caller from `Authorization: Bearer <token>`.

    Steps:
    1) Require a bearer credential.
    2) Decode & validate the session token.
    3) Load the user; a vanished account is a 404.
    """
    if credentials is None or not credentials.credentials:
        raise NotAuthenticated()

    payload = decode_session_token(credentials.credentials)
    user_id = get_user_id_from_payload(payload)
    user = await service.get_current_user(user_id)

    request.state.user_id = user.id
    return user
