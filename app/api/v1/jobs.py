"""Job CRUD and status transitions — scoped to the caller's tenant namespace."""

import uuid
from datetime import datetime

from fastapi import APIRouter, Query, status

from app.api.deps import TenantSession
from app.models.base import Page
from app.models.inventory import JobPartRead
from app.models.job import JobCreate, JobRead, JobStatus, JobStatusUpdate, JobUpdate
from app.models.trust_artifact import TrustArtifactRead
from app.services import jobs as service

router = APIRouter(prefix="/jobs", tags=["jobs"])


class JobDetail(JobRead):
    parts: list[JobPartRead]
    trust_artifacts: list[TrustArtifactRead]


@router.get("", response_model=Page[JobRead])
async def list_jobs(
    session: TenantSession,
    customer_id: uuid.UUID | None = None,
    vehicle_id: uuid.UUID | None = None,
    job_status: list[JobStatus] | None = Query(default=None, alias="status"),
    assigned_mechanic_id: uuid.UUID | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    search: str | None = None,
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> Page[JobRead]:
    rows, total = await service.list_jobs(
        session,
        customer_id=customer_id,
        vehicle_id=vehicle_id,
        statuses=job_status,
        assigned_mechanic_id=assigned_mechanic_id,
        start_date=start_date,
        end_date=end_date,
        search=search,
        limit=limit,
        offset=offset,
    )
    return Page.build([JobRead.model_validate(j) for j in rows], total, limit, offset)


@router.post("", response_model=JobRead, status_code=status.HTTP_201_CREATED)
async def create_job(body: JobCreate, session: TenantSession) -> JobRead:
    job = await service.create_job(session, body)
    return JobRead.model_validate(job)


@router.get("/{job_id}", response_model=JobDetail)
async def get_job(job_id: uuid.UUID, session: TenantSession) -> JobDetail:
    detail = await service.get_job(session, job_id)
    return JobDetail(
        **JobRead.model_validate(detail.job).model_dump(),
        parts=[
            JobPartRead(**jp.model_dump(), part_name=part.name, part_number=part.part_number)
            for jp, part in detail.parts
        ],
        trust_artifacts=[TrustArtifactRead.model_validate(a) for a in detail.trust_artifacts],
    )


@router.patch("/{job_id}", response_model=JobRead)
async def update_job(job_id: uuid.UUID, body: JobUpdate, session: TenantSession) -> JobRead:
    job = await service.update_job(session, job_id, body)
    return JobRead.model_validate(job)


@router.patch("/{job_id}/status", response_model=JobRead)
async def update_job_status(
    job_id: uuid.UUID, body: JobStatusUpdate, session: TenantSession
) -> JobRead:
    job = await service.update_job_status(session, job_id, body.status)
    return JobRead.model_validate(job)


@router.delete("/{job_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_job(job_id: uuid.UUID, session: TenantSession) -> None:
    await service.delete_job(session, job_id)
