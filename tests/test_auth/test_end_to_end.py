# tests/test_auth/test_end_to_end.py

import pytest
from httpx import AsyncClient

PASSWORD = "first-password"


@pytest.mark.anyio
async def test_signup_login_me_reset_login(async_client: AsyncClient, notifier):
    email = "journey@example.com"

    signup = await async_client.post(
        "/api/auth/signup",
        json={"email": email, "password": PASSWORD, "fullName": "Jo Urney"},
    )
    assert signup.status_code == 201

    login = await async_client.post("/api/auth/login", json={"email": email, "password": PASSWORD})
    assert login.status_code == 200
    token = login.json()["token"]

    me = await async_client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["user"]["email"] == email
    assert me.json()["user"]["id"] == login.json()["user"]["id"]

    forgot = await async_client.post("/api/auth/forgot-password", json={"email": email})
    assert forgot.status_code == 200
    code = notifier.last_code(email)

    verify = await async_client.post("/api/auth/verify-otp", json={"email": email, "otp": code})
    assert verify.status_code == 200

    reset = await async_client.post(
        "/api/auth/reset-password",
        json={"email": email, "otp": code, "newPassword": "second-password"},
    )
    assert reset.status_code == 200

    # sessions are stateless; the old token keeps working until it expires
    still = await async_client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert still.status_code == 200

    relog = await async_client.post("/api/auth/login", json={"email": email, "password": "second-password"})
    assert relog.status_code == 200


@pytest.mark.anyio
async def test_meta_endpoints(async_client: AsyncClient):
    health = await async_client.get("/healthz")
    assert health.status_code == 200
    assert health.json() == {"ok": True}
    assert health.headers.get("x-content-type-options") == "nosniff"
    assert "cache-control" not in health.headers

    root = await async_client.get("/")
    assert root.json()["name"] == "Finance Tracker API"


@pytest.mark.anyio
async def test_request_id_is_echoed(async_client: AsyncClient):
    rid = "3f1c2a9e-8b7d-4c6e-9a5f-1e2d3c4b5a69"
    resp = await async_client.get("/healthz", headers={"X-Request-ID": rid})
    assert resp.headers["x-request-id"] == rid

    other = await async_client.get("/healthz", headers={"X-Request-ID": "not-a-uuid"})
    assert other.headers["x-request-id"] != "not-a-uuid"
