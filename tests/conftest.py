"""Shared test fixtures — async SQLite in-memory DB + test client.

Tenant namespaces are in-memory databases ATTACHed to the single pooled
connection, so every test starts with a clean registry and no schemas.
"""

import os

os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret")
os.environ.setdefault("REFRESH_TOKEN_SECRET_KEY", "test-refresh-secret")
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "1")

from collections.abc import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

# Import all models so metadata is populated
import app.models  # noqa: E402, F401
from app.api.deps import get_provisioner, get_tenant_session_factory  # noqa: E402
from app.core.database import get_session, init_db  # noqa: E402
from app.core.tenancy import TenantSessionFactory  # noqa: E402
from app.main import app  # noqa: E402
from app.services.provisioning import SchemaProvisioner  # noqa: E402
from app.services.storage import StorageError, StoredBlob, get_blob_storage, make_blob_name  # noqa: E402

STRONG_PASSWORD = "Sup3r$ecret"


class FakeBlobStorage:
    """In-memory blob store with a switch to simulate outages."""

    def __init__(self) -> None:
        self.blobs: dict[tuple[str, str], bytes] = {}
        self.fail_uploads = False
        self.fail_deletes = False

    def url(self, container: str, blob_name: str) -> str:
        return f"https://blobs.test/{container}/{blob_name}"

    async def upload(self, container, data, filename, content_type, tenant_id) -> StoredBlob:
        if self.fail_uploads:
            raise StorageError("storage offline")
        blob_name = make_blob_name(tenant_id, filename)
        self.blobs[(container, blob_name)] = data
        return StoredBlob(
            blob_name=blob_name,
            url=self.url(container, blob_name),
            size=len(data),
            content_type=content_type,
        )

    async def delete(self, container: str, blob_name: str) -> None:
        if self.fail_deletes:
            raise StorageError("storage offline")
        self.blobs.pop((container, blob_name), None)

    async def metadata(self, container: str, blob_name: str) -> StoredBlob:
        data = self.blobs[(container, blob_name)]
        return StoredBlob(blob_name, self.url(container, blob_name), len(data), "application/octet-stream")


@pytest.fixture
async def engine():
    eng = create_async_engine("sqlite+aiosqlite://", echo=False, poolclass=StaticPool)
    await init_db(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
def test_session_factory(engine):
    """Session factory bound to the test SQLite engine (public schema)."""
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(test_session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with test_session_factory() as sess:
        yield sess
        await sess.rollback()


@pytest.fixture
def provisioner(engine) -> SchemaProvisioner:
    return SchemaProvisioner(engine)


@pytest.fixture
def tenant_sessions(engine) -> TenantSessionFactory:
    return TenantSessionFactory(engine)


@pytest.fixture
def blob_storage() -> FakeBlobStorage:
    return FakeBlobStorage()


@pytest.fixture
async def client(
    test_session_factory, provisioner, tenant_sessions, blob_storage
) -> AsyncGenerator[AsyncClient, None]:
    """HTTPX async test client with DB, provisioner and storage overrides."""

    async def _override_session():
        async with test_session_factory() as sess:
            yield sess

    app.dependency_overrides[get_session] = _override_session
    app.dependency_overrides[get_provisioner] = lambda: provisioner
    app.dependency_overrides[get_tenant_session_factory] = lambda: tenant_sessions
    app.dependency_overrides[get_blob_storage] = lambda: blob_storage

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def register_tenant(
    client: AsyncClient, slug: str = "acme-auto", email: str = "owner@acme.com"
) -> dict:
    """Register a tenant and return the response body plus auth headers."""
    resp = await client.post("/v1/auth/register", json={
        "business_name": f"{slug} Mobile Repair",
        "slug": slug,
        "contact_email": email,
        "full_name": "Pat Owner",
        "email": email,
        "password": STRONG_PASSWORD,
    })
    assert resp.status_code == 201, resp.text
    data = resp.json()
    data["headers"] = {"Authorization": f"Bearer {data['tokens']['access_token']}"}
    return data


@pytest.fixture
async def tenant(client: AsyncClient) -> dict:
    return await register_tenant(client)


async def create_customer(client: AsyncClient, headers: dict, **overrides) -> dict:
    payload = {"first_name": "Jane", "last_name": "Driver", "phone": "555-0100"}
    payload.update(overrides)
    resp = await client.post("/v1/customers", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def create_vehicle(client: AsyncClient, headers: dict, customer_id: str, **overrides) -> dict:
    payload = {"customer_id": customer_id, "year": "2019", "make": "Toyota", "model": "Camry"}
    payload.update(overrides)
    resp = await client.post("/v1/vehicles", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def create_job(client: AsyncClient, headers: dict, **overrides) -> dict:
    if "customer_id" not in overrides:
        customer = await create_customer(client, headers)
        vehicle = await create_vehicle(client, headers, customer["id"])
        overrides.setdefault("customer_id", customer["id"])
        overrides.setdefault("vehicle_id", vehicle["id"])
    payload = {"title": "Brake service"}
    payload.update(overrides)
    resp = await client.post("/v1/jobs", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()
