"""Customer CRUD — scoped to the caller's tenant namespace."""

import uuid

from fastapi import APIRouter, Query, status

from app.api.deps import TenantSession
from app.models.base import Page
from app.models.customer import CustomerCreate, CustomerRead, CustomerUpdate
from app.models.job import JobRead
from app.models.vehicle import VehicleRead
from app.services import customers as service

router = APIRouter(prefix="/customers", tags=["customers"])


# ── Schemas ──────────────────────────────────────────────────

class CustomerDetail(CustomerRead):
    vehicles: list[VehicleRead]
    recent_jobs: list[JobRead]


# ── Routes ───────────────────────────────────────────────────

@router.get("", response_model=Page[CustomerRead])
async def list_customers(
    session: TenantSession,
    search: str | None = None,
    email: str | None = None,
    phone: str | None = None,
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> Page[CustomerRead]:
    rows, total = await service.list_customers(
        session, search=search, email=email, phone=phone, limit=limit, offset=offset
    )
    return Page.build([CustomerRead.model_validate(c) for c in rows], total, limit, offset)


@router.post("", response_model=CustomerRead, status_code=status.HTTP_201_CREATED)
async def create_customer(body: CustomerCreate, session: TenantSession) -> CustomerRead:
    customer = await service.create_customer(session, body)
    return CustomerRead.model_validate(customer)


@router.get("/{customer_id}", response_model=CustomerDetail)
async def get_customer(customer_id: uuid.UUID, session: TenantSession) -> CustomerDetail:
    detail = await service.get_customer(session, customer_id)
    return CustomerDetail(
        **CustomerRead.model_validate(detail.customer).model_dump(),
        vehicles=[VehicleRead.model_validate(v) for v in detail.vehicles],
        recent_jobs=[JobRead.model_validate(j) for j in detail.recent_jobs],
    )


@router.patch("/{customer_id}", response_model=CustomerRead)
async def update_customer(
    customer_id: uuid.UUID, body: CustomerUpdate, session: TenantSession
) -> CustomerRead:
    customer = await service.update_customer(session, customer_id, body)
    return CustomerRead.model_validate(customer)


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_customer(customer_id: uuid.UUID, session: TenantSession) -> None:
    await service.delete_customer(session, customer_id)
