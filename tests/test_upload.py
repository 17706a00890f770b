"""Tests for trust artifact upload, browsing and removal."""

import pytest
from conftest import create_job
from httpx import AsyncClient

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


async def _upload(
    client: AsyncClient,
    headers: dict,
    data: dict,
    *,
    content: bytes = PNG,
    content_type: str = "image/png",
    filename: str = "pads.png",
):
    return await client.post(
        "/v1/trust-artifacts",
        data=data,
        files={"file": (filename, content, content_type)},
        headers=headers,
    )


@pytest.mark.asyncio
async def test_upload_photo_to_job(client: AsyncClient, tenant, blob_storage):
    headers = tenant["headers"]
    job = await create_job(client, headers)

    resp = await _upload(client, headers, {
        "artifact_type": "before_photo",
        "title": "Worn pads",
        "job_id": job["id"],
        "metadata": '{"gps": [30.27, -97.74]}',
    })
    assert resp.status_code == 201, resp.text
    artifact = resp.json()
    assert artifact["file_size"] == len(PNG)
    assert artifact["file_type"] == "image/png"
    assert artifact["blob_name"].startswith(f"{tenant['tenant']['id']}/")
    assert artifact["blob_name"].endswith(".png")
    assert artifact["artifact_metadata"] == {"gps": [30.27, -97.74]}
    assert artifact["captured_by_user_id"] == tenant["user"]["id"]
    assert len(blob_storage.blobs) == 1

    resp = await client.get(f"/v1/jobs/{job['id']}", headers=headers)
    assert [a["id"] for a in resp.json()["trust_artifacts"]] == [artifact["id"]]


@pytest.mark.asyncio
async def test_upload_requires_job_or_vehicle(client: AsyncClient, tenant):
    resp = await _upload(client, tenant["headers"], {"artifact_type": "receipt", "title": "Receipt"})
    assert resp.status_code == 422
    assert resp.json()["code"] == "artifact_target_missing"


@pytest.mark.asyncio
async def test_upload_rejects_wrong_file_type(client: AsyncClient, tenant):
    headers = tenant["headers"]
    job = await create_job(client, headers)

    resp = await _upload(
        client,
        headers,
        {"artifact_type": "inspection_video", "title": "Walkaround", "job_id": job["id"]},
    )
    assert resp.status_code == 422
    assert resp.json()["code"] == "invalid_file_type"


@pytest.mark.asyncio
async def test_upload_rejects_oversized_photo(client: AsyncClient, tenant, blob_storage):
    headers = tenant["headers"]
    job = await create_job(client, headers)

    resp = await _upload(
        client,
        headers,
        {"artifact_type": "after_photo", "title": "Huge", "job_id": job["id"]},
        content=b"\x00" * (10 * 1024 * 1024 + 1),
    )
    assert resp.status_code == 422
    assert resp.json()["code"] == "file_too_large"
    assert blob_storage.blobs == {}


@pytest.mark.asyncio
async def test_upload_rejects_invalid_metadata(client: AsyncClient, tenant):
    headers = tenant["headers"]
    job = await create_job(client, headers)

    resp = await _upload(client, headers, {
        "artifact_type": "before_photo", "title": "x", "job_id": job["id"], "metadata": "{nope",
    })
    assert resp.status_code == 422
    assert resp.json()["code"] == "invalid_metadata"


@pytest.mark.asyncio
async def test_storage_outage_surfaces_as_502(client: AsyncClient, tenant, blob_storage):
    headers = tenant["headers"]
    job = await create_job(client, headers)
    blob_storage.fail_uploads = True

    resp = await _upload(
        client, headers, {"artifact_type": "before_photo", "title": "x", "job_id": job["id"]}
    )
    assert resp.status_code == 502
    assert resp.json()["code"] == "storage_unavailable"

    resp = await client.get("/v1/trust-artifacts", headers=headers)
    assert resp.json()["pagination"]["total"] == 0


@pytest.mark.asyncio
async def test_job_summary_and_vehicle_history(client: AsyncClient, tenant):
    headers = tenant["headers"]
    job = await create_job(client, headers)
    target = {"job_id": job["id"], "vehicle_id": job["vehicle_id"]}

    await _upload(client, headers, {"artifact_type": "before_photo", "title": "Before", **target})
    await _upload(client, headers, {"artifact_type": "after_photo", "title": "After", **target})
    await _upload(
        client,
        headers,
        {"artifact_type": "receipt", "title": "Invoice", **target},
        content=b"%PDF-1.4",
        content_type="application/pdf",
        filename="invoice.pdf",
    )

    resp = await client.get(f"/v1/trust-artifacts/jobs/{job['id']}/summary", headers=headers)
    assert resp.status_code == 200
    summary = resp.json()
    assert summary["total_artifacts"] == 3
    assert summary["counts"] == {"before_photo": 1, "after_photo": 1, "receipt": 1}
    assert summary["job"]["job_number"] == job["job_number"]

    resp = await client.get(
        f"/v1/trust-artifacts/vehicles/{job['vehicle_id']}/history", headers=headers
    )
    assert resp.json()["total_artifacts"] == 3


@pytest.mark.asyncio
async def test_delete_soft_deletes_even_when_blob_delete_fails(
    client: AsyncClient, tenant, blob_storage
):
    headers = tenant["headers"]
    job = await create_job(client, headers)
    resp = await _upload(
        client, headers, {"artifact_type": "before_photo", "title": "x", "job_id": job["id"]}
    )
    artifact = resp.json()
    blob_storage.fail_deletes = True

    resp = await client.delete(f"/v1/trust-artifacts/{artifact['id']}", headers=headers)
    assert resp.status_code == 204

    resp = await client.get(f"/v1/trust-artifacts/{artifact['id']}", headers=headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_delete_removes_blob(client: AsyncClient, tenant, blob_storage):
    headers = tenant["headers"]
    job = await create_job(client, headers)
    resp = await _upload(
        client, headers, {"artifact_type": "before_photo", "title": "x", "job_id": job["id"]}
    )

    resp = await client.delete(f"/v1/trust-artifacts/{resp.json()['id']}", headers=headers)
    assert resp.status_code == 204
    assert blob_storage.blobs == {}


@pytest.mark.asyncio
async def test_update_artifact_title(client: AsyncClient, tenant):
    headers = tenant["headers"]
    job = await create_job(client, headers)
    resp = await _upload(
        client, headers, {"artifact_type": "before_photo", "title": "x", "job_id": job["id"]}
    )

    resp = await client.patch(
        f"/v1/trust-artifacts/{resp.json()['id']}", json={"title": "Rotor scoring"}, headers=headers
    )
    assert resp.status_code == 200
    assert resp.json()["title"] == "Rotor scoring"
