"""Job operations inside one tenant namespace."""

import copy
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.errors import ConflictError, NotFoundError
from app.core.pricing import calc_job_total
from app.models.base import utcnow
from app.models.customer import Customer
from app.models.inventory import JobPart
from app.models.job import PRICING_FIELDS, Job, JobCreate, JobStatus, JobUpdate
from app.models.job_template import JobTemplate
from app.models.part import Part
from app.models.trust_artifact import TrustArtifact
from app.models.vehicle import Vehicle
from app.services.common import (
    get_live,
    get_live_or_404,
    paginate,
    search_clause,
    update_values,
)

logger = logging.getLogger(__name__)

JOB_NUMBER_PREFIX = "JOB-"


@dataclass
class JobDetail:
    job: Job
    parts: list[tuple[JobPart, Part]]
    trust_artifacts: list[TrustArtifact]


async def next_job_number(session: AsyncSession, today: datetime | None = None) -> str:
    """``JOB-YYYYMMDD-NNNN``, numbered from 0001 each day."""
    prefix = f"{JOB_NUMBER_PREFIX}{(today or utcnow()).strftime('%Y%m%d')}-"
    stmt = select(func.max(Job.job_number)).where(Job.job_number.like(f"{prefix}%"))  # type: ignore[attr-defined]
    latest = (await session.execute(stmt)).scalar_one_or_none()
    sequence = int(latest.rsplit("-", 1)[1]) + 1 if latest else 1
    return f"{prefix}{sequence:04d}"


def snapshot_template(template: JobTemplate) -> dict:
    """Frozen copy of a template's content, independent of later edits."""
    return copy.deepcopy(
        {
            "name": template.name,
            "steps": template.steps,
            "required_parts": template.required_parts,
            "checklist_items": template.checklist_items,
        }
    )


async def ensure_customer_vehicle(
    session: AsyncSession, customer_id: uuid.UUID, vehicle_id: uuid.UUID
) -> None:
    if await get_live(session, Customer, customer_id) is None:
        raise NotFoundError("Customer not found")
    vehicle = await get_live(session, Vehicle, vehicle_id)
    if vehicle is None or vehicle.customer_id != customer_id:
        raise NotFoundError("Vehicle not found or does not belong to this customer")


def recalculate_total(job: Job) -> None:
    job.total = calc_job_total(
        job.labor_minutes, job.labor_rate, job.parts_total, job.tax_rate, job.discount_amount
    )


async def list_jobs(
    session: AsyncSession,
    *,
    customer_id: uuid.UUID | None = None,
    vehicle_id: uuid.UUID | None = None,
    statuses: list[JobStatus] | None = None,
    assigned_mechanic_id: uuid.UUID | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    search: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> tuple[list[Job], int]:
    stmt = select(Job).where(Job.deleted_at.is_(None))  # type: ignore[union-attr]
    if customer_id:
        stmt = stmt.where(Job.customer_id == customer_id)
    if vehicle_id:
        stmt = stmt.where(Job.vehicle_id == vehicle_id)
    if statuses:
        stmt = stmt.where(Job.status.in_([str(s) for s in statuses]))  # type: ignore[attr-defined]
    if assigned_mechanic_id:
        stmt = stmt.where(Job.assigned_mechanic_id == assigned_mechanic_id)
    if start_date:
        stmt = stmt.where(Job.scheduled_start >= start_date)  # type: ignore[operator]
    if end_date:
        stmt = stmt.where(Job.scheduled_start <= end_date)  # type: ignore[operator]
    if search:
        stmt = stmt.where(search_clause(search, Job.job_number, Job.title, Job.description))
    stmt = stmt.order_by(Job.created_at.desc())  # type: ignore[attr-defined]
    return await paginate(session, stmt, limit, offset)


async def get_job(session: AsyncSession, job_id: uuid.UUID) -> JobDetail:
    job = await get_live_or_404(session, Job, job_id, "Job")

    parts = await session.execute(
        select(JobPart, Part)
        .join(Part, JobPart.part_id == Part.id)
        .where(JobPart.job_id == job_id)
        .order_by(JobPart.created_at)
    )
    artifacts = await session.execute(
        select(TrustArtifact)
        .where(TrustArtifact.job_id == job_id, TrustArtifact.deleted_at.is_(None))  # type: ignore[union-attr]
        .order_by(TrustArtifact.captured_at.desc())  # type: ignore[attr-defined]
    )
    return JobDetail(
        job=job,
        parts=[(jp, part) for jp, part in parts.all()],
        trust_artifacts=list(artifacts.scalars().all()),
    )


async def create_job(session: AsyncSession, body: JobCreate) -> Job:
    await ensure_customer_vehicle(session, body.customer_id, body.vehicle_id)

    snapshot: dict = {}
    if body.job_template_id is not None:
        template = await get_live_or_404(session, JobTemplate, body.job_template_id, "Job template")
        snapshot = snapshot_template(template)

    job = Job(
        **body.model_dump(),
        job_number=await next_job_number(session),
        template_snapshot=snapshot,
    )
    recalculate_total(job)

    session.add(job)
    await session.commit()
    await session.refresh(job)

    logger.info("Job created: %s (%s)", job.job_number, job.id)
    return job


async def update_job(session: AsyncSession, job_id: uuid.UUID, body: JobUpdate) -> Job:
    job = await get_live_or_404(session, Job, job_id, "Job")
    update_data = update_values(job, body)

    for key, value in update_data.items():
        setattr(job, key, value)
    if any(field in update_data for field in PRICING_FIELDS):
        recalculate_total(job)
    job.updated_at = utcnow()

    session.add(job)
    await session.commit()
    await session.refresh(job)

    logger.info("Job updated: %s", job_id)
    return job


async def update_job_status(session: AsyncSession, job_id: uuid.UUID, status: JobStatus) -> Job:
    job = await get_live_or_404(session, Job, job_id, "Job")
    old_status = job.status

    job.status = status
    now = utcnow()
    if status == JobStatus.IN_PROGRESS and job.actual_start is None:
        job.actual_start = now
    if status == JobStatus.COMPLETED and job.actual_end is None:
        job.actual_end = now
    job.updated_at = now

    session.add(job)
    await session.commit()
    await session.refresh(job)

    logger.info("Job %s status %s -> %s", job_id, old_status, status)
    return job


async def delete_job(session: AsyncSession, job_id: uuid.UUID) -> None:
    job = await get_live_or_404(session, Job, job_id, "Job")

    if job.status == JobStatus.COMPLETED:
        raise ConflictError(
            "Cannot delete completed jobs. Cancel the job instead.", code="job_completed"
        )

    job.deleted_at = utcnow()
    session.add(job)
    await session.commit()
    logger.info("Job deleted: %s", job_id)
