"""Vehicle CRUD — scoped to the caller's tenant namespace."""

import uuid

from fastapi import APIRouter, Query, status

from app.api.deps import TenantSession
from app.models.base import Page
from app.models.job import JobRead
from app.models.vehicle import VehicleCreate, VehicleRead, VehicleUpdate
from app.services import vehicles as service

router = APIRouter(prefix="/vehicles", tags=["vehicles"])


class VehicleDetail(VehicleRead):
    service_history: list[JobRead]


@router.get("", response_model=Page[VehicleRead])
async def list_vehicles(
    session: TenantSession,
    customer_id: uuid.UUID | None = None,
    search: str | None = None,
    make: str | None = None,
    model: str | None = None,
    year: str | None = None,
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> Page[VehicleRead]:
    rows, total = await service.list_vehicles(
        session,
        customer_id=customer_id,
        search=search,
        make=make,
        model=model,
        year=year,
        limit=limit,
        offset=offset,
    )
    return Page.build([VehicleRead.model_validate(v) for v in rows], total, limit, offset)


@router.post("", response_model=VehicleRead, status_code=status.HTTP_201_CREATED)
async def create_vehicle(body: VehicleCreate, session: TenantSession) -> VehicleRead:
    vehicle = await service.create_vehicle(session, body)
    return VehicleRead.model_validate(vehicle)


@router.get("/{vehicle_id}", response_model=VehicleDetail)
async def get_vehicle(vehicle_id: uuid.UUID, session: TenantSession) -> VehicleDetail:
    detail = await service.get_vehicle(session, vehicle_id)
    return VehicleDetail(
        **VehicleRead.model_validate(detail.vehicle).model_dump(),
        service_history=[JobRead.model_validate(j) for j in detail.service_history],
    )


@router.patch("/{vehicle_id}", response_model=VehicleRead)
async def update_vehicle(
    vehicle_id: uuid.UUID, body: VehicleUpdate, session: TenantSession
) -> VehicleRead:
    vehicle = await service.update_vehicle(session, vehicle_id, body)
    return VehicleRead.model_validate(vehicle)


@router.delete("/{vehicle_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_vehicle(vehicle_id: uuid.UUID, session: TenantSession) -> None:
    await service.delete_vehicle(session, vehicle_id)
