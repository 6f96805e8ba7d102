# tests/test_services/test_auth_service.py

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from fintrack.core.exceptions import (
    EmailAlreadyRegistered,
    InvalidCredentials,
    InvalidOrExpiredOTP,
    UserNotFound,
    WeakPassword,
)
from fintrack.core.security import decode_session_token, verify_password
from fintrack.repositories.password_reset import MemoryPasswordResetRepository
from fintrack.repositories.user import MemoryUserRepository
from fintrack.services.auth import auth_service
from fintrack.services.auth.auth_service import (
    FORGOT_PASSWORD_MESSAGE,
    AuthService,
)
from tests.fixtures.mocks.email import RecordingNotifier


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class RecordingProvisioner:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.provisioned = []

    async def provision(self, user) -> None:
        if self.fail:
            raise RuntimeError("db went away")
        self.provisioned.append(user.id)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def service(clock, notifier) -> AuthService:
    return AuthService(
        users=MemoryUserRepository(),
        resets=MemoryPasswordResetRepository(),
        notifier=notifier,
        provisioner=RecordingProvisioner(),
        clock=clock,
    )


async def _signup(service: AuthService, email: str = "dee@example.com", password: str = "password-1"):
    return await service.signup(email=email, password=password, full_name="Dee Ex")


# ────────────────────────────────────────────────────────────────────────────────
# 👤 Signup / login
# ────────────────────────────────────────────────────────────────────────────────

@pytest.mark.anyio
async def test_signup_hashes_and_provisions(service: AuthService):
    user = await _signup(service)

    assert user.password_hash != "password-1"
    assert verify_password("password-1", user.password_hash)
    assert user.currency == "USD"
    assert user.theme == "light"
    assert service.provisioner.provisioned == [user.id]


@pytest.mark.anyio
async def test_signup_normalizes_currency(service: AuthService):
    user = await service.signup(email="e@example.com", password="password-1", full_name="E", currency=" eur ")
    assert user.currency == "EUR"


@pytest.mark.anyio
async def test_signup_duplicate(service: AuthService):
    await _signup(service)
    with pytest.raises(EmailAlreadyRegistered):
        await _signup(service, password="other-password")


@pytest.mark.anyio
async def test_signup_weak_password(service: AuthService):
    with pytest.raises(WeakPassword) as exc:
        await _signup(service, password="1234567")
    assert exc.value.details == {"min_length": 8}


@pytest.mark.anyio
async def test_signup_survives_provisioning_failure(service: AuthService):
    service.provisioner = RecordingProvisioner(fail=True)
    user = await _signup(service)
    assert await service.users.get_by_id(user.id) == user


@pytest.mark.anyio
async def test_login_issues_token_for_user(service: AuthService, clock: FakeClock):
    user = await _signup(service)

    result = await service.login(email=user.email, password="password-1")

    assert result["user"] == user.public()
    # the fixed clock is in the past, so read the claims without validating exp
    claims = jwt.get_unverified_claims(result["token"])
    assert claims["sub"] == str(user.id)
    assert claims["iat"] == int(clock.now.timestamp())


@pytest.mark.anyio
@pytest.mark.parametrize("email, password", [("dee@example.com", "wrong-pass"), ("nope@example.com", "password-1")])
async def test_login_failure(service: AuthService, email, password):
    await _signup(service)
    with pytest.raises(InvalidCredentials) as exc:
        await service.login(email=email, password=password)
    assert exc.value.detail == "Invalid email or password"


@pytest.mark.anyio
async def test_login_token_decodes(notifier):
    svc = AuthService(users=MemoryUserRepository(), resets=MemoryPasswordResetRepository(), notifier=notifier)
    user = await _signup(svc)
    result = await svc.login(email=user.email, password="password-1")
    assert decode_session_token(result["token"])["sub"] == str(user.id)


# ────────────────────────────────────────────────────────────────────────────────
# 🔁 Password reset
# ────────────────────────────────────────────────────────────────────────────────

@pytest.mark.anyio
async def test_forgot_password_unknown_email_sends_nothing(service: AuthService, notifier):
    result = await service.forgot_password("ghost@example.com")
    assert result == {"message": FORGOT_PASSWORD_MESSAGE}
    assert notifier.sent == []


@pytest.mark.anyio
async def test_forgot_password_unknown_email_still_hashes(service: AuthService, monkeypatch):
    calls = []
    real_hash = auth_service.hash_otp

    def counting_hash(code):
        calls.append(code)
        return real_hash(code)

    monkeypatch.setattr(auth_service, "hash_otp", counting_hash)
    await service.forgot_password("ghost@example.com")
    assert len(calls) == 1


@pytest.mark.anyio
async def test_forgot_password_records_request(service: AuthService, notifier, clock: FakeClock):
    user = await _signup(service)

    await service.forgot_password(user.email)

    record = await service.resets.get(user.id)
    assert record is not None
    assert record.expires_at == clock.now + timedelta(minutes=10)
    assert record.used_at is None
    assert verify_password(notifier.last_code(user.email), record.otp_hash)


@pytest.mark.anyio
async def test_failed_delivery_keeps_request(service: AuthService, notifier):
    user = await _signup(service)
    notifier.fail = True

    result = await service.forgot_password(user.email)

    assert result == {"message": FORGOT_PASSWORD_MESSAGE}
    assert await service.resets.get(user.id) is not None


@pytest.mark.anyio
async def test_code_valid_until_expiry(service: AuthService, notifier, clock: FakeClock):
    user = await _signup(service)
    await service.forgot_password(user.email)
    code = notifier.last_code()

    clock.advance(minutes=9, seconds=59)
    await service.verify_otp(user.email, code)

    clock.advance(seconds=1)
    with pytest.raises(InvalidOrExpiredOTP):
        await service.verify_otp(user.email, code)


@pytest.mark.anyio
async def test_reset_consumes_request(service: AuthService, notifier, clock: FakeClock):
    user = await _signup(service)
    await service.forgot_password(user.email)
    code = notifier.last_code()

    await service.reset_password(user.email, code, "new-password-1")

    updated = await service.users.get_by_id(user.id)
    assert verify_password("new-password-1", updated.password_hash)
    assert (await service.resets.get(user.id)).used_at == clock.now

    with pytest.raises(InvalidOrExpiredOTP):
        await service.reset_password(user.email, code, "newer-password")


@pytest.mark.anyio
async def test_second_request_invalidates_first(service: AuthService, notifier, monkeypatch):
    codes = iter(["111111", "222222"])
    monkeypatch.setattr(auth_service, "generate_otp", lambda length: next(codes))
    user = await _signup(service)

    await service.forgot_password(user.email)
    await service.forgot_password(user.email)

    assert "111111" in notifier.sent[0].text
    with pytest.raises(InvalidOrExpiredOTP):
        await service.verify_otp(user.email, "111111")
    await service.verify_otp(user.email, "222222")


@pytest.mark.anyio
async def test_reset_does_not_consume_request_issued_mid_reset(service: AuthService, notifier):
    user = await _signup(service)
    await service.forgot_password(user.email)
    first = notifier.last_code()

    update_password = service.users.update_password

    async def update_then_new_request(user_id, password_hash):
        await update_password(user_id, password_hash)
        await service.forgot_password(user.email)

    service.users.update_password = update_then_new_request
    await service.reset_password(user.email, first, "new-password-1")
    service.users.update_password = update_password

    second = notifier.last_code()
    assert (await service.resets.get(user.id)).used_at is None
    await service.verify_otp(user.email, second)
    await service.reset_password(user.email, second, "new-password-2")
    assert verify_password("new-password-2", (await service.users.get_by_id(user.id)).password_hash)


@pytest.mark.anyio
async def test_reset_weak_password_leaves_request_open(service: AuthService, notifier):
    user = await _signup(service)
    await service.forgot_password(user.email)
    code = notifier.last_code()

    with pytest.raises(WeakPassword):
        await service.reset_password(user.email, code, "short")
    assert (await service.resets.get(user.id)).used_at is None


@pytest.mark.anyio
async def test_missing_input_collapses_before_password_check(service: AuthService):
    with pytest.raises(InvalidOrExpiredOTP):
        await service.reset_password("dee@example.com", None, "short")
    with pytest.raises(InvalidOrExpiredOTP):
        await service.verify_otp(None, "123456")


# ────────────────────────────────────────────────────────────────────────────────
# 🪪 Current user / profile
# ────────────────────────────────────────────────────────────────────────────────

@pytest.mark.anyio
async def test_get_current_user_missing(service: AuthService):
    with pytest.raises(UserNotFound):
        await service.get_current_user(uuid.uuid4())


@pytest.mark.anyio
async def test_update_profile_ignores_unset_and_unknown_fields(service: AuthService):
    user = await _signup(service)

    updated = await service.update_profile(
        user.id, {"currency": "chf", "full_name": None, "email": "hijack@example.com"}
    )

    assert updated.currency == "CHF"
    assert updated.full_name == "Dee Ex"
    assert updated.email == user.email


@pytest.mark.anyio
async def test_update_profile_missing_user(service: AuthService):
    with pytest.raises(UserNotFound):
        await service.update_profile(uuid.uuid4(), {"theme": "dark"})
