# tests/test_auth/test_signup.py

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fintrack.db.models.category import Category
from fintrack.db.models.user import User
from fintrack.db.models.wallet import Wallet

URL = "/api/auth/signup"


def _payload(**overrides):
    body = {
        "email": "ana@example.com",
        "password": "s3cretpass",
        "fullName": "Ana Lima",
    }
    body.update(overrides)
    return body


# ────────────────────────────────────────────────────────────────────────────────
# POST /api/auth/signup
# ────────────────────────────────────────────────────────────────────────────────

@pytest.mark.anyio
async def test_signup_creates_user(async_client: AsyncClient, db_session: AsyncSession):
    resp = await async_client.post(URL, json=_payload())

    assert resp.status_code == 201
    assert resp.json() == {"message": "User registered successfully. Please log in."}

    user = (await db_session.execute(select(User).where(User.email == "ana@example.com"))).scalar_one()
    assert user.full_name == "Ana Lima"
    assert user.currency == "USD"
    assert user.theme == "light"
    assert user.password_hash != "s3cretpass"
    assert user.password_hash.startswith("$2")


@pytest.mark.anyio
async def test_signup_provisions_wallet_and_categories(async_client: AsyncClient, db_session: AsyncSession):
    resp = await async_client.post(URL, json=_payload(currency="eur"))
    assert resp.status_code == 201

    user = (await db_session.execute(select(User).where(User.email == "ana@example.com"))).scalar_one()
    wallets = (await db_session.execute(select(Wallet).where(Wallet.user_id == user.id))).scalars().all()
    assert len(wallets) == 1
    assert wallets[0].name == "Main Wallet"
    assert wallets[0].type == "bank"
    assert wallets[0].currency == "EUR"
    assert user.currency == "EUR"

    kinds = dict(
        (await db_session.execute(
            select(Category.type, func.count()).where(Category.user_id == user.id).group_by(Category.type)
        )).all()
    )
    assert kinds == {"expense": 6, "income": 3}


@pytest.mark.anyio
async def test_signup_duplicate_email_409(async_client: AsyncClient):
    first = await async_client.post(URL, json=_payload())
    assert first.status_code == 201

    second = await async_client.post(URL, json=_payload(password="another-pass"))
    assert second.status_code == 409
    assert second.json()["detail"] == "Email already registered"
    assert second.headers["content-type"].startswith("application/problem+json")


@pytest.mark.anyio
async def test_signup_email_is_not_case_folded(async_client: AsyncClient):
    assert (await async_client.post(URL, json=_payload())).status_code == 201
    resp = await async_client.post(URL, json=_payload(email="Ana@example.com"))
    assert resp.status_code == 201


@pytest.mark.anyio
@pytest.mark.parametrize("currency", ["", "   ", None])
async def test_signup_blank_currency_uses_default(async_client: AsyncClient, db_session: AsyncSession, currency):
    resp = await async_client.post(URL, json=_payload(currency=currency))
    assert resp.status_code == 201

    user = (await db_session.execute(select(User).where(User.email == "ana@example.com"))).scalar_one()
    assert user.currency == "USD"


@pytest.mark.anyio
@pytest.mark.parametrize(
    "overrides",
    [
        {"password": "short"},
        {"email": "not-an-email"},
        {"fullName": ""},
        {"currency": "EURO"},
    ],
)
async def test_signup_validation_422(async_client: AsyncClient, overrides):
    resp = await async_client.post(URL, json=_payload(**overrides))
    assert resp.status_code == 422
    assert resp.json()["title"] == "Validation error"


@pytest.mark.anyio
async def test_signup_response_is_no_store(async_client: AsyncClient):
    resp = await async_client.post(URL, json=_payload())
    assert resp.headers.get("cache-control") == "no-store"
    assert resp.headers.get("x-request-id")
