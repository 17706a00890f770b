"""Tests for login, token refresh and logout."""

import pytest
from conftest import STRONG_PASSWORD
from httpx import AsyncClient
from sqlalchemy import update

from app.models.tenant import Tenant, TenantStatus
from app.models.user import User


async def _login(client: AsyncClient, email: str = "owner@acme.com", password: str = STRONG_PASSWORD):
    return await client.post("/v1/auth/login", json={"email": email, "password": password})


@pytest.mark.asyncio
async def test_login_success(client: AsyncClient, tenant):
    resp = await _login(client)
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["tenant"]["id"] == tenant["tenant"]["id"]
    assert body["user"]["last_login_at"] is not None

    headers = {"Authorization": f"Bearer {body['tokens']['access_token']}"}
    resp = await client.get("/v1/auth/me", headers=headers)
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, tenant):
    resp = await _login(client, password="Wr0ng!pass")
    assert resp.status_code == 401
    assert resp.json()["code"] == "invalid_credentials"


@pytest.mark.asyncio
async def test_login_unknown_email(client: AsyncClient, tenant):
    resp = await _login(client, email="nobody@acme.com")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_login_suspended_tenant(client: AsyncClient, tenant, session):
    await session.execute(
        update(Tenant)
        .where(Tenant.slug == "acme-auto")
        .values(status=TenantStatus.SUSPENDED)
    )
    await session.commit()

    resp = await _login(client)
    assert resp.status_code == 403
    assert resp.json()["code"] == "tenant_inactive"


@pytest.mark.asyncio
async def test_login_disabled_user(client: AsyncClient, tenant, session):
    await session.execute(
        update(User).where(User.email == "owner@acme.com").values(is_active=False)
    )
    await session.commit()

    resp = await _login(client)
    assert resp.status_code == 403
    assert resp.json()["code"] == "user_inactive"


@pytest.mark.asyncio
async def test_refresh_issues_new_access_token(client: AsyncClient, tenant):
    refresh_token = tenant["tokens"]["refresh_token"]

    resp = await client.post("/v1/auth/refresh", json={"refresh_token": refresh_token})
    assert resp.status_code == 200
    tokens = resp.json()
    assert tokens["refresh_token"] == refresh_token
    assert tokens["expires_in"] > 0

    headers = {"Authorization": f"Bearer {tokens['access_token']}"}
    resp = await client.get("/v1/tenants/me", headers=headers)
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_refresh_with_access_token_rejected(client: AsyncClient, tenant):
    resp = await client.post(
        "/v1/auth/refresh", json={"refresh_token": tenant["tokens"]["access_token"]}
    )
    assert resp.status_code == 401
    assert resp.json()["code"] == "invalid_refresh_token"


@pytest.mark.asyncio
async def test_logout_revokes_refresh_token(client: AsyncClient, tenant):
    refresh_token = tenant["tokens"]["refresh_token"]

    resp = await client.post("/v1/auth/logout", json={"refresh_token": refresh_token})
    assert resp.status_code == 204

    resp = await client.post("/v1/auth/refresh", json={"refresh_token": refresh_token})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_logout_with_garbage_token_is_noop(client: AsyncClient):
    resp = await client.post("/v1/auth/logout", json={"refresh_token": "not-a-jwt"})
    assert resp.status_code == 204
