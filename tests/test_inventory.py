"""Tests for parts, stock levels, transfers and job allocations."""

import uuid

import pytest
from conftest import create_job
from httpx import AsyncClient
from sqlalchemy import update

from app.models.inventory import InventoryItem


async def _part(client: AsyncClient, headers: dict, **overrides) -> dict:
    payload = {
        "part_number": "BP-100",
        "name": "Brake Pads",
        "category": "brakes",
        "default_cost": 20,
        "default_price": 45.5,
        "reorder_point": 2,
    }
    payload.update(overrides)
    resp = await client.post("/v1/parts", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def _stock(
    client: AsyncClient, headers: dict, part_id: str, location: str = "truck-1", qty: int = 10
) -> dict:
    resp = await client.post(
        "/v1/inventory",
        json={"part_id": part_id, "location": location, "quantity_on_hand": qty},
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


async def _allocate(
    client: AsyncClient, headers: dict, part_id: str, job_id: str, qty: int, location: str = "truck-1"
):
    return await client.post(
        "/v1/inventory/allocate",
        json={"part_id": part_id, "location": location, "quantity": qty, "job_id": job_id},
        headers=headers,
    )


@pytest.mark.asyncio
async def test_duplicate_part_number_rejected(client: AsyncClient, tenant):
    headers = tenant["headers"]
    await _part(client, headers)

    resp = await client.post(
        "/v1/parts", json={"part_number": "BP-100", "name": "Other"}, headers=headers
    )
    assert resp.status_code == 409
    assert resp.json()["code"] == "duplicate_part_number"


@pytest.mark.asyncio
async def test_part_detail_lists_stock(client: AsyncClient, tenant):
    headers = tenant["headers"]
    part = await _part(client, headers)
    await _stock(client, headers, part["id"], "truck-1", 4)
    await _stock(client, headers, part["id"], "warehouse", 20)

    resp = await client.get(f"/v1/parts/{part['id']}", headers=headers)
    assert resp.status_code == 200
    stock = {s["location"]: s["quantity_on_hand"] for s in resp.json()["inventory"]}
    assert stock == {"truck-1": 4, "warehouse": 20}


@pytest.mark.asyncio
async def test_duplicate_location_rejected(client: AsyncClient, tenant):
    headers = tenant["headers"]
    part = await _part(client, headers)
    await _stock(client, headers, part["id"])

    resp = await client.post(
        "/v1/inventory",
        json={"part_id": part["id"], "location": "truck-1", "quantity_on_hand": 1},
        headers=headers,
    )
    assert resp.status_code == 409
    assert resp.json()["code"] == "duplicate_inventory"


@pytest.mark.asyncio
async def test_low_stock_filter(client: AsyncClient, tenant):
    headers = tenant["headers"]
    part = await _part(client, headers, reorder_point=5)
    await _stock(client, headers, part["id"], "truck-1", 3)
    await _stock(client, headers, part["id"], "warehouse", 50)

    resp = await client.get("/v1/inventory", params={"low_stock": True}, headers=headers)
    assert [i["location"] for i in resp.json()["data"]] == ["truck-1"]


@pytest.mark.asyncio
async def test_allocate_and_deallocate_restore_state(client: AsyncClient, tenant):
    headers = tenant["headers"]
    part = await _part(client, headers)
    item = await _stock(client, headers, part["id"], qty=10)
    job = await create_job(client, headers, labor_minutes=60, labor_rate=100, tax_rate=10)
    assert job["total"] == 110.0

    resp = await _allocate(client, headers, part["id"], job["id"], 2)
    assert resp.status_code == 201, resp.text
    job_part = resp.json()
    assert job_part["subtotal"] == 91.0

    resp = await client.get(f"/v1/inventory/{item['id']}", headers=headers)
    assert resp.json()["quantity_allocated"] == 2
    assert resp.json()["quantity_available"] == 8

    resp = await client.get(f"/v1/jobs/{job['id']}", headers=headers)
    detail = resp.json()
    assert detail["parts_total"] == 91.0
    assert detail["total"] == 210.1
    assert [p["part_name"] for p in detail["parts"]] == ["Brake Pads"]

    resp = await client.delete(f"/v1/inventory/allocations/{job_part['id']}", headers=headers)
    assert resp.status_code == 204

    resp = await client.get(f"/v1/inventory/{item['id']}", headers=headers)
    assert resp.json()["quantity_allocated"] == 0

    resp = await client.get(f"/v1/jobs/{job['id']}", headers=headers)
    detail = resp.json()
    assert detail["parts_total"] == 0.0
    assert detail["total"] == 110.0
    assert detail["parts"] == []


@pytest.mark.asyncio
async def test_allocate_more_than_available_rejected(client: AsyncClient, tenant):
    headers = tenant["headers"]
    part = await _part(client, headers)
    await _stock(client, headers, part["id"], qty=3)
    job = await create_job(client, headers)

    resp = await _allocate(client, headers, part["id"], job["id"], 2)
    assert resp.status_code == 201

    resp = await _allocate(client, headers, part["id"], job["id"], 2)
    assert resp.status_code == 409
    assert resp.json()["code"] == "insufficient_inventory"

    resp = await client.get(f"/v1/jobs/{job['id']}", headers=headers)
    assert len(resp.json()["parts"]) == 1


@pytest.mark.asyncio
async def test_transfer_moves_stock(client: AsyncClient, tenant):
    headers = tenant["headers"]
    part = await _part(client, headers)
    source = await _stock(client, headers, part["id"], "warehouse", 10)

    resp = await client.post(
        "/v1/inventory/transfer",
        json={"from_inventory_id": source["id"], "to_location": "truck-2", "quantity": 4},
        headers=headers,
    )
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["source"]["quantity_on_hand"] == 6
    assert body["destination"]["quantity_on_hand"] == 4
    assert body["destination"]["location"] == "truck-2"

    # Second transfer tops up the existing destination row
    resp = await client.post(
        "/v1/inventory/transfer",
        json={"from_inventory_id": source["id"], "to_location": "truck-2", "quantity": 6},
        headers=headers,
    )
    body = resp.json()
    assert body["source"]["quantity_on_hand"] == 0
    assert body["destination"]["quantity_on_hand"] == 10

    resp = await client.get("/v1/inventory", params={"part_id": part["id"]}, headers=headers)
    assert sum(i["quantity_on_hand"] for i in resp.json()["data"]) == 10


@pytest.mark.asyncio
async def test_transfer_cannot_move_allocated_stock(client: AsyncClient, tenant):
    headers = tenant["headers"]
    part = await _part(client, headers)
    source = await _stock(client, headers, part["id"], "truck-1", 5)
    job = await create_job(client, headers)
    await _allocate(client, headers, part["id"], job["id"], 4)

    resp = await client.post(
        "/v1/inventory/transfer",
        json={"from_inventory_id": source["id"], "to_location": "warehouse", "quantity": 2},
        headers=headers,
    )
    assert resp.status_code == 409
    assert resp.json()["code"] == "insufficient_inventory"


@pytest.mark.asyncio
async def test_transfer_to_same_location_rejected(client: AsyncClient, tenant):
    headers = tenant["headers"]
    part = await _part(client, headers)
    source = await _stock(client, headers, part["id"], "truck-1", 5)

    resp = await client.post(
        "/v1/inventory/transfer",
        json={"from_inventory_id": source["id"], "to_location": "truck-1", "quantity": 1},
        headers=headers,
    )
    assert resp.status_code == 422
    assert resp.json()["code"] == "same_location"


@pytest.mark.asyncio
async def test_allocated_stock_blocks_delete_and_shrink(client: AsyncClient, tenant):
    headers = tenant["headers"]
    part = await _part(client, headers)
    item = await _stock(client, headers, part["id"], qty=5)
    job = await create_job(client, headers)
    await _allocate(client, headers, part["id"], job["id"], 3)

    resp = await client.delete(f"/v1/inventory/{item['id']}", headers=headers)
    assert resp.status_code == 409
    assert resp.json()["code"] == "inventory_allocated"

    resp = await client.patch(
        f"/v1/inventory/{item['id']}", json={"quantity_on_hand": 2}, headers=headers
    )
    assert resp.status_code == 409
    assert resp.json()["code"] == "below_allocated"

    resp = await client.delete(f"/v1/parts/{part['id']}", headers=headers)
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_restock_sets_last_restocked_at(client: AsyncClient, tenant):
    headers = tenant["headers"]
    part = await _part(client, headers)
    item = await _stock(client, headers, part["id"], qty=1)

    resp = await client.patch(
        f"/v1/inventory/{item['id']}", json={"quantity_on_hand": 8}, headers=headers
    )
    assert resp.status_code == 200
    assert resp.json()["quantity_on_hand"] == 8
    assert resp.json()["last_restocked_at"] is not None


@pytest.mark.asyncio
async def test_deallocate_refuses_when_stock_counter_disagrees(
    client: AsyncClient, tenant, tenant_sessions
):
    headers = tenant["headers"]
    part = await _part(client, headers)
    item = await _stock(client, headers, part["id"], qty=5)
    job = await create_job(client, headers)
    resp = await _allocate(client, headers, part["id"], job["id"], 3)
    job_part = resp.json()

    async with tenant_sessions.for_tenant(tenant["tenant"]["id"]) as session:
        await session.execute(
            update(InventoryItem)
            .where(InventoryItem.id == uuid.UUID(item["id"]))
            .values(quantity_allocated=1)
        )
        await session.commit()

    resp = await client.delete(f"/v1/inventory/allocations/{job_part['id']}", headers=headers)
    assert resp.status_code == 409
    assert resp.json()["code"] == "allocation_mismatch"

    resp = await client.get(f"/v1/jobs/{job['id']}", headers=headers)
    assert [p["id"] for p in resp.json()["parts"]] == [job_part["id"]]
    resp = await client.get(f"/v1/inventory/{item['id']}", headers=headers)
    assert resp.json()["quantity_allocated"] == 1
