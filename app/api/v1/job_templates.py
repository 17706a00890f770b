"""Job templates ("Job-in-a-Box"): CRUD, lookup by slug, spawn and usage stats."""

import uuid

from fastapi import APIRouter, Query, status
from pydantic import BaseModel

from app.api.deps import TenantSession
from app.models.base import Page
from app.models.job import JobRead
from app.models.job_template import JobTemplateCreate, JobTemplateRead, JobTemplateUpdate
from app.services import job_templates as service

router = APIRouter(prefix="/job-templates", tags=["job-templates"])


# ── Schemas ──────────────────────────────────────────────────

class SpawnRequest(BaseModel):
    customer_id: uuid.UUID
    vehicle_id: uuid.UUID
    assigned_mechanic_id: uuid.UUID | None = None


class TemplateSummary(BaseModel):
    id: uuid.UUID
    name: str
    category: str | None


class UsageStats(BaseModel):
    total_jobs: int
    jobs_by_status: dict[str, int]
    avg_completion_minutes: int | None


class TemplateUsageResponse(BaseModel):
    template: TemplateSummary
    usage: UsageStats


# ── Routes ───────────────────────────────────────────────────

@router.get("", response_model=Page[JobTemplateRead])
async def list_templates(
    session: TenantSession,
    category: str | None = None,
    search: str | None = None,
    is_active: bool | None = None,
    is_global: bool | None = None,
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> Page[JobTemplateRead]:
    rows, total = await service.list_templates(
        session,
        category=category,
        search=search,
        is_active=is_active,
        is_global=is_global,
        limit=limit,
        offset=offset,
    )
    return Page.build([JobTemplateRead.model_validate(t) for t in rows], total, limit, offset)


@router.post("", response_model=JobTemplateRead, status_code=status.HTTP_201_CREATED)
async def create_template(body: JobTemplateCreate, session: TenantSession) -> JobTemplateRead:
    template = await service.create_template(session, body)
    return JobTemplateRead.model_validate(template)


@router.get("/slug/{slug}", response_model=JobTemplateRead)
async def get_template_by_slug(slug: str, session: TenantSession) -> JobTemplateRead:
    template = await service.get_template_by_slug(session, slug)
    return JobTemplateRead.model_validate(template)


@router.get("/{template_id}", response_model=JobTemplateRead)
async def get_template(template_id: uuid.UUID, session: TenantSession) -> JobTemplateRead:
    template = await service.get_template(session, template_id)
    return JobTemplateRead.model_validate(template)


@router.patch("/{template_id}", response_model=JobTemplateRead)
async def update_template(
    template_id: uuid.UUID, body: JobTemplateUpdate, session: TenantSession
) -> JobTemplateRead:
    template = await service.update_template(session, template_id, body)
    return JobTemplateRead.model_validate(template)


@router.delete("/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_template(template_id: uuid.UUID, session: TenantSession) -> None:
    await service.delete_template(session, template_id)


@router.post("/{template_id}/spawn", response_model=JobRead, status_code=status.HTTP_201_CREATED)
async def spawn_job(template_id: uuid.UUID, body: SpawnRequest, session: TenantSession) -> JobRead:
    """Create a draft job from the template, with a frozen copy of its content."""
    job = await service.spawn_job(
        session,
        template_id,
        customer_id=body.customer_id,
        vehicle_id=body.vehicle_id,
        assigned_mechanic_id=body.assigned_mechanic_id,
    )
    return JobRead.model_validate(job)


@router.get("/{template_id}/stats", response_model=TemplateUsageResponse)
async def template_stats(template_id: uuid.UUID, session: TenantSession) -> TemplateUsageResponse:
    usage = await service.usage_stats(session, template_id)
    return TemplateUsageResponse(
        template=TemplateSummary(
            id=usage.template.id, name=usage.template.name, category=usage.template.category
        ),
        usage=UsageStats(
            total_jobs=usage.total_jobs,
            jobs_by_status=usage.jobs_by_status,
            avg_completion_minutes=usage.avg_completion_minutes,
        ),
    )
