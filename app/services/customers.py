"""Customer operations inside one tenant namespace."""

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.errors import ConflictError
from app.models.base import utcnow
from app.models.customer import Customer, CustomerCreate, CustomerUpdate
from app.models.job import Job
from app.models.vehicle import Vehicle
from app.services.common import (
    count_where,
    get_live,
    get_live_or_404,
    paginate,
    search_clause,
    update_values,
)

logger = logging.getLogger(__name__)


@dataclass
class CustomerDetail:
    customer: Customer
    vehicles: list[Vehicle]
    recent_jobs: list[Job]


async def _ensure_unique(
    session: AsyncSession,
    *,
    phone: str | None = None,
    email: str | None = None,
    exclude_id: uuid.UUID | None = None,
) -> None:
    checks = (("phone", phone, Customer.phone), ("email", email, Customer.email))
    for label, value, column in checks:
        if not value:
            continue
        stmt = select(Customer.id).where(column == value, Customer.deleted_at.is_(None))  # type: ignore[union-attr]
        if exclude_id is not None:
            stmt = stmt.where(Customer.id != exclude_id)
        if (await session.execute(stmt)).first() is not None:
            raise ConflictError(
                f"Customer with this {label} already exists", code=f"duplicate_{label}"
            )


async def list_customers(
    session: AsyncSession,
    *,
    search: str | None = None,
    email: str | None = None,
    phone: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> tuple[list[Customer], int]:
    stmt = select(Customer).where(Customer.deleted_at.is_(None))  # type: ignore[union-attr]
    if search:
        stmt = stmt.where(
            search_clause(
                search, Customer.first_name, Customer.last_name, Customer.email, Customer.phone
            )
        )
    if email:
        stmt = stmt.where(Customer.email.ilike(f"%{email}%"))  # type: ignore[union-attr]
    if phone:
        stmt = stmt.where(Customer.phone.ilike(f"%{phone}%"))  # type: ignore[attr-defined]
    stmt = stmt.order_by(Customer.created_at.desc())  # type: ignore[attr-defined]
    return await paginate(session, stmt, limit, offset)


async def get_customer(session: AsyncSession, customer_id: uuid.UUID) -> CustomerDetail:
    customer = await get_live_or_404(session, Customer, customer_id, "Customer")

    vehicles = await session.execute(
        select(Vehicle).where(
            Vehicle.customer_id == customer_id,
            Vehicle.deleted_at.is_(None),  # type: ignore[union-attr]
        )
    )
    jobs = await session.execute(
        select(Job)
        .where(Job.customer_id == customer_id, Job.deleted_at.is_(None))  # type: ignore[union-attr]
        .order_by(Job.created_at.desc())  # type: ignore[attr-defined]
        .limit(5)
    )
    return CustomerDetail(
        customer=customer,
        vehicles=list(vehicles.scalars().all()),
        recent_jobs=list(jobs.scalars().all()),
    )


async def create_customer(session: AsyncSession, body: CustomerCreate) -> Customer:
    await _ensure_unique(session, phone=body.phone, email=body.email)

    customer = Customer(**body.model_dump())
    session.add(customer)
    await session.commit()
    await session.refresh(customer)

    logger.info("Customer created: %s", customer.id)
    return customer


async def update_customer(
    session: AsyncSession, customer_id: uuid.UUID, body: CustomerUpdate
) -> Customer:
    customer = await get_live_or_404(session, Customer, customer_id, "Customer")
    update_data = update_values(customer, body)

    await _ensure_unique(
        session,
        phone=update_data.get("phone") if update_data.get("phone") != customer.phone else None,
        email=update_data.get("email") if update_data.get("email") != customer.email else None,
        exclude_id=customer_id,
    )

    for key, value in update_data.items():
        setattr(customer, key, value)
    customer.updated_at = utcnow()

    session.add(customer)
    await session.commit()
    await session.refresh(customer)

    logger.info("Customer updated: %s", customer_id)
    return customer


async def delete_customer(session: AsyncSession, customer_id: uuid.UUID) -> None:
    customer = await get_live_or_404(session, Customer, customer_id, "Customer")

    live_vehicles = await count_where(
        session,
        Vehicle,
        Vehicle.customer_id == customer_id,
        Vehicle.deleted_at.is_(None),  # type: ignore[union-attr]
    )
    if live_vehicles:
        raise ConflictError(
            "Cannot delete customer with associated vehicles. Delete vehicles first.",
            code="customer_has_vehicles",
        )

    live_jobs = await count_where(
        session,
        Job,
        Job.customer_id == customer_id,
        Job.deleted_at.is_(None),  # type: ignore[union-attr]
    )
    if live_jobs:
        raise ConflictError(
            "Cannot delete customer with associated jobs. Delete or archive jobs first.",
            code="customer_has_jobs",
        )

    customer.deleted_at = utcnow()
    session.add(customer)
    await session.commit()
    logger.info("Customer deleted: %s", customer_id)


async def customer_exists(session: AsyncSession, customer_id: uuid.UUID) -> bool:
    return await get_live(session, Customer, customer_id) is not None
