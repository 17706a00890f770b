"""Job templates ("Job-in-a-Box") and spawning jobs from them."""

import logging
import uuid
from dataclasses import dataclass, field

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.errors import ConflictError, NotFoundError, ValidationFailedError
from app.core.pricing import labor_total
from app.models.base import utcnow
from app.models.job import Job, JobStatus
from app.models.job_template import JobTemplate, JobTemplateCreate, JobTemplateUpdate
from app.services.common import get_live_or_404, paginate, search_clause, update_values
from app.services.jobs import ensure_customer_vehicle, next_job_number, snapshot_template

logger = logging.getLogger(__name__)


@dataclass
class TemplateUsage:
    template: JobTemplate
    total_jobs: int = 0
    jobs_by_status: dict[str, int] = field(default_factory=dict)
    avg_completion_minutes: int | None = None


async def _ensure_slug_free(
    session: AsyncSession, slug: str, exclude_id: uuid.UUID | None = None
) -> None:
    stmt = select(JobTemplate.id).where(
        JobTemplate.slug == slug,
        JobTemplate.deleted_at.is_(None),  # type: ignore[union-attr]
    )
    if exclude_id is not None:
        stmt = stmt.where(JobTemplate.id != exclude_id)
    if (await session.execute(stmt)).first() is not None:
        raise ConflictError("Job template with this slug already exists", code="duplicate_slug")


async def list_templates(
    session: AsyncSession,
    *,
    category: str | None = None,
    search: str | None = None,
    is_active: bool | None = None,
    is_global: bool | None = None,
    limit: int = 50,
    offset: int = 0,
) -> tuple[list[JobTemplate], int]:
    stmt = select(JobTemplate).where(JobTemplate.deleted_at.is_(None))  # type: ignore[union-attr]
    if category:
        stmt = stmt.where(JobTemplate.category == category)
    if is_active is not None:
        stmt = stmt.where(JobTemplate.is_active.is_(is_active))  # type: ignore[attr-defined]
    if is_global is not None:
        stmt = stmt.where(JobTemplate.is_global.is_(is_global))  # type: ignore[attr-defined]
    if search:
        stmt = stmt.where(search_clause(search, JobTemplate.name, JobTemplate.description))
    stmt = stmt.order_by(JobTemplate.name.asc())  # type: ignore[attr-defined]
    return await paginate(session, stmt, limit, offset)


async def get_template(session: AsyncSession, template_id: uuid.UUID) -> JobTemplate:
    return await get_live_or_404(session, JobTemplate, template_id, "Job template")


async def get_template_by_slug(session: AsyncSession, slug: str) -> JobTemplate:
    stmt = select(JobTemplate).where(
        JobTemplate.slug == slug,
        JobTemplate.deleted_at.is_(None),  # type: ignore[union-attr]
    )
    template = (await session.execute(stmt)).scalar_one_or_none()
    if template is None:
        raise NotFoundError("Job template not found")
    return template


async def create_template(session: AsyncSession, body: JobTemplateCreate) -> JobTemplate:
    await _ensure_slug_free(session, body.slug)

    template = JobTemplate(**body.model_dump())
    session.add(template)
    await session.commit()
    await session.refresh(template)

    logger.info("Job template created: %s (%s)", template.slug, template.id)
    return template


async def update_template(
    session: AsyncSession, template_id: uuid.UUID, body: JobTemplateUpdate
) -> JobTemplate:
    template = await get_template(session, template_id)
    update_data = update_values(template, body)

    new_slug = update_data.get("slug")
    if new_slug and new_slug != template.slug:
        await _ensure_slug_free(session, new_slug, exclude_id=template_id)

    for key, value in update_data.items():
        setattr(template, key, value)
    template.updated_at = utcnow()

    session.add(template)
    await session.commit()
    await session.refresh(template)

    logger.info("Job template updated: %s", template_id)
    return template


async def delete_template(session: AsyncSession, template_id: uuid.UUID) -> None:
    template = await get_template(session, template_id)

    if template.is_global:
        raise ConflictError(
            "Cannot delete global templates. Deactivate instead.", code="template_is_global"
        )

    template.deleted_at = utcnow()
    session.add(template)
    await session.commit()
    logger.info("Job template deleted: %s", template_id)


async def spawn_job(
    session: AsyncSession,
    template_id: uuid.UUID,
    *,
    customer_id: uuid.UUID,
    vehicle_id: uuid.UUID,
    assigned_mechanic_id: uuid.UUID | None = None,
) -> Job:
    """Create a draft job carrying a frozen snapshot of the template."""
    template = await get_template(session, template_id)
    if not template.is_active:
        raise ValidationFailedError(
            "Cannot create job from inactive template", code="template_inactive"
        )
    await ensure_customer_vehicle(session, customer_id, vehicle_id)

    labor_minutes = template.default_labor_minutes or 0
    labor_rate = template.default_labor_rate or 0
    job = Job(
        customer_id=customer_id,
        vehicle_id=vehicle_id,
        job_template_id=template.id,
        assigned_mechanic_id=assigned_mechanic_id,
        job_number=await next_job_number(session),
        title=template.name,
        description=template.description,
        status=JobStatus.DRAFT,
        labor_minutes=labor_minutes,
        labor_rate=labor_rate,
        total=labor_total(labor_minutes, labor_rate),
        template_snapshot=snapshot_template(template),
    )
    session.add(job)
    await session.commit()
    await session.refresh(job)

    logger.info("Job %s spawned from template %s", job.job_number, template.id)
    return job


async def usage_stats(session: AsyncSession, template_id: uuid.UUID) -> TemplateUsage:
    template = await get_template(session, template_id)
    live = (Job.job_template_id == template_id, Job.deleted_at.is_(None))  # type: ignore[union-attr]

    rows = await session.execute(
        select(Job.status, func.count()).where(*live).group_by(Job.status)
    )
    by_status = {str(status): count for status, count in rows.all()}

    completed = await session.execute(
        select(Job.actual_start, Job.actual_end).where(
            *live,
            Job.status == JobStatus.COMPLETED,
            Job.actual_start.is_not(None),  # type: ignore[union-attr]
            Job.actual_end.is_not(None),  # type: ignore[union-attr]
        )
    )
    durations = [(end - start).total_seconds() / 60 for start, end in completed.all()]

    return TemplateUsage(
        template=template,
        total_jobs=sum(by_status.values()),
        jobs_by_status=by_status,
        avg_completion_minutes=round(sum(durations) / len(durations)) if durations else None,
    )
