"""Inventory stock, transfers and job allocations."""

import uuid

from fastapi import APIRouter, Query, status
from pydantic import BaseModel

from app.api.deps import TenantSession
from app.models.base import Page
from app.models.inventory import (
    InventoryAllocate,
    InventoryCreate,
    InventoryItem,
    InventoryRead,
    InventoryTransfer,
    InventoryUpdate,
    JobPart,
    JobPartRead,
)
from app.models.part import Part
from app.services import inventory as service

router = APIRouter(prefix="/inventory", tags=["inventory"])


# ── Schemas ──────────────────────────────────────────────────

class TransferResponse(BaseModel):
    source: InventoryRead
    destination: InventoryRead


def _to_read(item: InventoryItem, part: Part | None) -> InventoryRead:
    return InventoryRead(
        **item.model_dump(),
        quantity_available=item.quantity_on_hand - item.quantity_allocated,
        part_name=part.name if part else None,
        part_number=part.part_number if part else None,
    )


def _job_part_read(job_part: JobPart, part: Part) -> JobPartRead:
    return JobPartRead(
        **job_part.model_dump(),
        part_name=part.name,
        part_number=part.part_number,
    )


# ── Routes ───────────────────────────────────────────────────

@router.get("", response_model=Page[InventoryRead])
async def list_inventory(
    session: TenantSession,
    part_id: uuid.UUID | None = None,
    location: str | None = None,
    low_stock: bool = False,
    search: str | None = None,
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> Page[InventoryRead]:
    rows, total = await service.list_inventory(
        session,
        part_id=part_id,
        location=location,
        low_stock=low_stock,
        search=search,
        limit=limit,
        offset=offset,
    )
    return Page.build([_to_read(item, part) for item, part in rows], total, limit, offset)


@router.post("", response_model=InventoryRead, status_code=status.HTTP_201_CREATED)
async def add_inventory(body: InventoryCreate, session: TenantSession) -> InventoryRead:
    item, part = await service.add_inventory(session, body)
    return _to_read(item, part)


@router.post("/transfer", response_model=TransferResponse)
async def transfer_inventory(body: InventoryTransfer, session: TenantSession) -> TransferResponse:
    source, destination = await service.transfer_inventory(session, body)
    part = await session.get(Part, source.part_id)
    return TransferResponse(source=_to_read(source, part), destination=_to_read(destination, part))


@router.post("/allocate", response_model=JobPartRead, status_code=status.HTTP_201_CREATED)
async def allocate_inventory(body: InventoryAllocate, session: TenantSession) -> JobPartRead:
    job_part, part = await service.allocate_inventory(session, body)
    return _job_part_read(job_part, part)


@router.delete("/allocations/{job_part_id}", status_code=status.HTTP_204_NO_CONTENT)
async def deallocate_inventory(job_part_id: uuid.UUID, session: TenantSession) -> None:
    await service.deallocate_inventory(session, job_part_id)


@router.get("/{inventory_id}", response_model=InventoryRead)
async def get_inventory_item(inventory_id: uuid.UUID, session: TenantSession) -> InventoryRead:
    item, part = await service.get_inventory_item(session, inventory_id)
    return _to_read(item, part)


@router.patch("/{inventory_id}", response_model=InventoryRead)
async def update_inventory(
    inventory_id: uuid.UUID, body: InventoryUpdate, session: TenantSession
) -> InventoryRead:
    item, part = await service.update_inventory(session, inventory_id, body)
    return _to_read(item, part)


@router.delete("/{inventory_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_inventory(inventory_id: uuid.UUID, session: TenantSession) -> None:
    await service.delete_inventory(session, inventory_id)
