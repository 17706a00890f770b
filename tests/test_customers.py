"""Tests for customer and vehicle CRUD endpoints."""

import pytest
from conftest import create_customer, create_job, create_vehicle
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_create_and_list_customers(client: AsyncClient, tenant):
    headers = tenant["headers"]
    await create_customer(client, headers, first_name="Jane", phone="555-0001")
    await create_customer(client, headers, first_name="John", phone="555-0002", email="j@x.com")

    resp = await client.get("/v1/customers", headers=headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["pagination"]["total"] == 2
    assert body["pagination"]["has_more"] is False

    resp = await client.get("/v1/customers", params={"search": "joh"}, headers=headers)
    assert [c["first_name"] for c in resp.json()["data"]] == ["John"]


@pytest.mark.asyncio
async def test_pagination_limits(client: AsyncClient, tenant):
    headers = tenant["headers"]
    for i in range(3):
        await create_customer(client, headers, phone=f"555-100{i}")

    resp = await client.get("/v1/customers", params={"limit": 2}, headers=headers)
    body = resp.json()
    assert len(body["data"]) == 2
    assert body["pagination"] == {"total": 3, "limit": 2, "offset": 0, "has_more": True}

    resp = await client.get("/v1/customers", params={"limit": 101}, headers=headers)
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_duplicate_customer_email_rejected(client: AsyncClient, tenant):
    headers = tenant["headers"]
    await create_customer(client, headers, phone="555-0001", email="dup@x.com")

    resp = await client.post(
        "/v1/customers",
        json={"first_name": "A", "last_name": "B", "phone": "555-0002", "email": "dup@x.com"},
        headers=headers,
    )
    assert resp.status_code == 409
    assert resp.json()["code"] == "duplicate_email"


@pytest.mark.asyncio
async def test_customer_detail_includes_vehicles_and_jobs(client: AsyncClient, tenant):
    headers = tenant["headers"]
    customer = await create_customer(client, headers)
    vehicle = await create_vehicle(client, headers, customer["id"])
    await create_job(client, headers, customer_id=customer["id"], vehicle_id=vehicle["id"])

    resp = await client.get(f"/v1/customers/{customer['id']}", headers=headers)
    assert resp.status_code == 200
    body = resp.json()
    assert [v["id"] for v in body["vehicles"]] == [vehicle["id"]]
    assert len(body["recent_jobs"]) == 1


@pytest.mark.asyncio
async def test_update_customer(client: AsyncClient, tenant):
    headers = tenant["headers"]
    customer = await create_customer(client, headers)

    resp = await client.patch(
        f"/v1/customers/{customer['id']}", json={"city": "Austin"}, headers=headers
    )
    assert resp.status_code == 200
    assert resp.json()["city"] == "Austin"
    assert resp.json()["first_name"] == "Jane"


@pytest.mark.asyncio
async def test_customer_with_vehicles_cannot_be_deleted(client: AsyncClient, tenant):
    headers = tenant["headers"]
    customer = await create_customer(client, headers)
    vehicle = await create_vehicle(client, headers, customer["id"])

    resp = await client.delete(f"/v1/customers/{customer['id']}", headers=headers)
    assert resp.status_code == 409
    assert resp.json()["code"] == "customer_has_vehicles"

    resp = await client.delete(f"/v1/vehicles/{vehicle['id']}", headers=headers)
    assert resp.status_code == 204

    resp = await client.delete(f"/v1/customers/{customer['id']}", headers=headers)
    assert resp.status_code == 204

    resp = await client.get(f"/v1/customers/{customer['id']}", headers=headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_vehicle_requires_existing_customer(client: AsyncClient, tenant):
    resp = await client.post(
        "/v1/vehicles",
        json={
            "customer_id": "00000000-0000-4000-8000-000000000000",
            "year": "2020",
            "make": "Ford",
            "model": "F-150",
        },
        headers=tenant["headers"],
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_duplicate_vin_rejected(client: AsyncClient, tenant):
    headers = tenant["headers"]
    customer = await create_customer(client, headers)
    await create_vehicle(client, headers, customer["id"], vin="1HGCM82633A004352")

    resp = await client.post(
        "/v1/vehicles",
        json={
            "customer_id": customer["id"],
            "vin": "1HGCM82633A004352",
            "year": "2003",
            "make": "Honda",
            "model": "Accord",
        },
        headers=headers,
    )
    assert resp.status_code == 409
    assert resp.json()["code"] == "duplicate_vin"


@pytest.mark.asyncio
async def test_vehicle_with_jobs_cannot_be_deleted(client: AsyncClient, tenant):
    headers = tenant["headers"]
    job = await create_job(client, headers)

    resp = await client.delete(f"/v1/vehicles/{job['vehicle_id']}", headers=headers)
    assert resp.status_code == 409
    assert resp.json()["code"] == "vehicle_has_jobs"

    resp = await client.get(f"/v1/vehicles/{job['vehicle_id']}", headers=headers)
    assert [j["id"] for j in resp.json()["service_history"]] == [job["id"]]


@pytest.mark.asyncio
async def test_vehicle_filters(client: AsyncClient, tenant):
    headers = tenant["headers"]
    customer = await create_customer(client, headers)
    await create_vehicle(client, headers, customer["id"], make="Toyota", year="2019")
    await create_vehicle(client, headers, customer["id"], make="Ford", model="Focus", year="2015")

    resp = await client.get("/v1/vehicles", params={"make": "ford"}, headers=headers)
    assert [v["model"] for v in resp.json()["data"]] == ["Focus"]

    resp = await client.get(
        "/v1/vehicles", params={"customer_id": customer["id"]}, headers=headers
    )
    assert resp.json()["pagination"]["total"] == 2


@pytest.mark.asyncio
async def test_patch_null_clears_optional_fields_only(client: AsyncClient, tenant):
    headers = tenant["headers"]
    customer = await create_customer(client, headers, email="jane@driver.com")

    resp = await client.patch(
        f"/v1/customers/{customer['id']}", json={"email": None}, headers=headers
    )
    assert resp.status_code == 200
    assert resp.json()["email"] is None

    resp = await client.patch(
        f"/v1/customers/{customer['id']}", json={"phone": None}, headers=headers
    )
    assert resp.status_code == 422
    assert resp.json()["code"] == "field_not_nullable"


@pytest.mark.asyncio
async def test_vehicle_year_must_be_four_digits(client: AsyncClient, tenant):
    headers = tenant["headers"]
    customer = await create_customer(client, headers)

    resp = await client.post(
        "/v1/vehicles",
        json={"customer_id": customer["id"], "year": "19", "make": "Ford", "model": "F-150"},
        headers=headers,
    )
    assert resp.status_code == 422
