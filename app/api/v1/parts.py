"""Parts catalog CRUD — scoped to the caller's tenant namespace."""

import uuid

from fastapi import APIRouter, Query, status
from pydantic import BaseModel

from app.api.deps import TenantSession
from app.models.base import Page
from app.models.part import PartCreate, PartRead, PartUpdate
from app.services import parts as service

router = APIRouter(prefix="/parts", tags=["parts"])


class StockLevel(BaseModel):
    inventory_id: uuid.UUID
    location: str
    quantity_on_hand: int
    quantity_allocated: int


class PartDetail(PartRead):
    inventory: list[StockLevel]


@router.get("", response_model=Page[PartRead])
async def list_parts(
    session: TenantSession,
    category: str | None = None,
    manufacturer: str | None = None,
    search: str | None = None,
    is_active: bool | None = None,
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> Page[PartRead]:
    rows, total = await service.list_parts(
        session,
        category=category,
        manufacturer=manufacturer,
        search=search,
        is_active=is_active,
        limit=limit,
        offset=offset,
    )
    return Page.build([PartRead.model_validate(p) for p in rows], total, limit, offset)


@router.post("", response_model=PartRead, status_code=status.HTTP_201_CREATED)
async def create_part(body: PartCreate, session: TenantSession) -> PartRead:
    part = await service.create_part(session, body)
    return PartRead.model_validate(part)


@router.get("/{part_id}", response_model=PartDetail)
async def get_part(part_id: uuid.UUID, session: TenantSession) -> PartDetail:
    detail = await service.get_part(session, part_id)
    return PartDetail(
        **PartRead.model_validate(detail.part).model_dump(),
        inventory=[
            StockLevel(
                inventory_id=item.id,
                location=item.location,
                quantity_on_hand=item.quantity_on_hand,
                quantity_allocated=item.quantity_allocated,
            )
            for item in detail.inventory
        ],
    )


@router.patch("/{part_id}", response_model=PartRead)
async def update_part(part_id: uuid.UUID, body: PartUpdate, session: TenantSession) -> PartRead:
    part = await service.update_part(session, part_id, body)
    return PartRead.model_validate(part)


@router.delete("/{part_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_part(part_id: uuid.UUID, session: TenantSession) -> None:
    await service.delete_part(session, part_id)
