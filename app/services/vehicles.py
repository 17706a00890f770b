"""Vehicle operations inside one tenant namespace."""

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.errors import ConflictError, NotFoundError
from app.models.base import utcnow
from app.models.job import Job
from app.models.vehicle import Vehicle, VehicleCreate, VehicleUpdate
from app.services.common import (
    count_where,
    get_live_or_404,
    paginate,
    search_clause,
    update_values,
)
from app.services.customers import customer_exists

logger = logging.getLogger(__name__)

SERVICE_HISTORY_LIMIT = 10


@dataclass
class VehicleDetail:
    vehicle: Vehicle
    service_history: list[Job]


async def _ensure_vin_free(
    session: AsyncSession, vin: str, exclude_id: uuid.UUID | None = None
) -> None:
    stmt = select(Vehicle.id).where(Vehicle.vin == vin, Vehicle.deleted_at.is_(None))  # type: ignore[union-attr]
    if exclude_id is not None:
        stmt = stmt.where(Vehicle.id != exclude_id)
    if (await session.execute(stmt)).first() is not None:
        raise ConflictError("Vehicle with this VIN already exists", code="duplicate_vin")


async def list_vehicles(
    session: AsyncSession,
    *,
    customer_id: uuid.UUID | None = None,
    search: str | None = None,
    make: str | None = None,
    model: str | None = None,
    year: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> tuple[list[Vehicle], int]:
    stmt = select(Vehicle).where(Vehicle.deleted_at.is_(None))  # type: ignore[union-attr]
    if customer_id:
        stmt = stmt.where(Vehicle.customer_id == customer_id)
    if search:
        stmt = stmt.where(
            search_clause(search, Vehicle.vin, Vehicle.make, Vehicle.model, Vehicle.license_plate)
        )
    if make:
        stmt = stmt.where(Vehicle.make.ilike(f"%{make}%"))  # type: ignore[attr-defined]
    if model:
        stmt = stmt.where(Vehicle.model.ilike(f"%{model}%"))  # type: ignore[attr-defined]
    if year:
        stmt = stmt.where(Vehicle.year == year)
    stmt = stmt.order_by(Vehicle.created_at.desc())  # type: ignore[attr-defined]
    return await paginate(session, stmt, limit, offset)


async def get_vehicle(session: AsyncSession, vehicle_id: uuid.UUID) -> VehicleDetail:
    vehicle = await get_live_or_404(session, Vehicle, vehicle_id, "Vehicle")
    jobs = await session.execute(
        select(Job)
        .where(Job.vehicle_id == vehicle_id, Job.deleted_at.is_(None))  # type: ignore[union-attr]
        .order_by(Job.created_at.desc())  # type: ignore[attr-defined]
        .limit(SERVICE_HISTORY_LIMIT)
    )
    return VehicleDetail(vehicle=vehicle, service_history=list(jobs.scalars().all()))


async def create_vehicle(session: AsyncSession, body: VehicleCreate) -> Vehicle:
    if not await customer_exists(session, body.customer_id):
        raise NotFoundError("Customer not found")
    if body.vin:
        await _ensure_vin_free(session, body.vin)

    vehicle = Vehicle(**body.model_dump())
    session.add(vehicle)
    await session.commit()
    await session.refresh(vehicle)

    logger.info("Vehicle created: %s", vehicle.id)
    return vehicle


async def update_vehicle(
    session: AsyncSession, vehicle_id: uuid.UUID, body: VehicleUpdate
) -> Vehicle:
    vehicle = await get_live_or_404(session, Vehicle, vehicle_id, "Vehicle")
    update_data = update_values(vehicle, body)

    new_vin = update_data.get("vin")
    if new_vin and new_vin != vehicle.vin:
        await _ensure_vin_free(session, new_vin, exclude_id=vehicle_id)

    for key, value in update_data.items():
        setattr(vehicle, key, value)
    vehicle.updated_at = utcnow()

    session.add(vehicle)
    await session.commit()
    await session.refresh(vehicle)

    logger.info("Vehicle updated: %s", vehicle_id)
    return vehicle


async def delete_vehicle(session: AsyncSession, vehicle_id: uuid.UUID) -> None:
    vehicle = await get_live_or_404(session, Vehicle, vehicle_id, "Vehicle")

    live_jobs = await count_where(
        session,
        Job,
        Job.vehicle_id == vehicle_id,
        Job.deleted_at.is_(None),  # type: ignore[union-attr]
    )
    if live_jobs:
        raise ConflictError(
            "Cannot delete vehicle with associated jobs. Delete or archive jobs first.",
            code="vehicle_has_jobs",
        )

    vehicle.deleted_at = utcnow()
    session.add(vehicle)
    await session.commit()
    logger.info("Vehicle deleted: %s", vehicle_id)
