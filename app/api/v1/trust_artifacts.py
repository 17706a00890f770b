"""Trust artifacts: upload, browse and remove job / vehicle evidence files."""

import json
import uuid

from fastapi import APIRouter, Form, Query, UploadFile, status
from pydantic import BaseModel

from app.api.deps import Auth, Storage, TenantSession
from app.core.errors import ValidationFailedError
from app.models.base import Page
from app.models.trust_artifact import ArtifactType, TrustArtifactRead, TrustArtifactUpdate
from app.services import trust_artifacts as service

router = APIRouter(prefix="/trust-artifacts", tags=["trust-artifacts"])


# ── Schemas ──────────────────────────────────────────────────

class JobRef(BaseModel):
    id: uuid.UUID
    job_number: str
    title: str
    status: str


class VehicleRef(BaseModel):
    id: uuid.UUID
    year: str
    make: str
    model: str
    vin: str | None


class JobTrustSummaryResponse(BaseModel):
    job: JobRef
    artifacts: dict[str, list[TrustArtifactRead]]
    counts: dict[str, int]
    total_artifacts: int


class VehicleTrustHistoryResponse(BaseModel):
    vehicle: VehicleRef
    artifacts: list[TrustArtifactRead]
    total_artifacts: int


# ── Routes ───────────────────────────────────────────────────

@router.get("", response_model=Page[TrustArtifactRead])
async def list_artifacts(
    session: TenantSession,
    job_id: uuid.UUID | None = None,
    vehicle_id: uuid.UUID | None = None,
    artifact_type: ArtifactType | None = None,
    search: str | None = None,
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> Page[TrustArtifactRead]:
    rows, total = await service.list_artifacts(
        session,
        job_id=job_id,
        vehicle_id=vehicle_id,
        artifact_type=artifact_type,
        search=search,
        limit=limit,
        offset=offset,
    )
    return Page.build([TrustArtifactRead.model_validate(a) for a in rows], total, limit, offset)


@router.post("", response_model=TrustArtifactRead, status_code=status.HTTP_201_CREATED)
async def upload_artifact(
    file: UploadFile,
    auth: Auth,
    session: TenantSession,
    storage: Storage,
    artifact_type: ArtifactType = Form(...),
    title: str = Form(..., min_length=1, max_length=255),
    description: str | None = Form(None),
    job_id: uuid.UUID | None = Form(None),
    vehicle_id: uuid.UUID | None = Form(None),
    metadata: str | None = Form(None, description="JSON object"),
) -> TrustArtifactRead:
    """Upload a photo, video or document and attach it to a job and/or vehicle."""
    artifact_metadata = None
    if metadata:
        try:
            artifact_metadata = json.loads(metadata)
        except json.JSONDecodeError as exc:
            raise ValidationFailedError("metadata must be valid JSON", code="invalid_metadata") from exc
        if not isinstance(artifact_metadata, dict):
            raise ValidationFailedError("metadata must be a JSON object", code="invalid_metadata")

    artifact = await service.upload_artifact(
        session,
        storage,
        auth.tenant_id,
        artifact_type=artifact_type,
        title=title,
        description=description,
        data=await file.read(),
        filename=file.filename or "",
        content_type=file.content_type or "application/octet-stream",
        job_id=job_id,
        vehicle_id=vehicle_id,
        artifact_metadata=artifact_metadata,
        captured_by_user_id=auth.user_id,
    )
    return TrustArtifactRead.model_validate(artifact)


@router.get("/jobs/{job_id}/summary", response_model=JobTrustSummaryResponse)
async def job_trust_summary(job_id: uuid.UUID, session: TenantSession) -> JobTrustSummaryResponse:
    summary = await service.job_trust_summary(session, job_id)
    job = summary.job
    return JobTrustSummaryResponse(
        job=JobRef(id=job.id, job_number=job.job_number, title=job.title, status=job.status),
        artifacts={
            kind: [TrustArtifactRead.model_validate(a) for a in items]
            for kind, items in summary.artifacts.items()
        },
        counts=summary.counts,
        total_artifacts=summary.total_artifacts,
    )


@router.get("/vehicles/{vehicle_id}/history", response_model=VehicleTrustHistoryResponse)
async def vehicle_trust_history(
    vehicle_id: uuid.UUID, session: TenantSession
) -> VehicleTrustHistoryResponse:
    history = await service.vehicle_trust_history(session, vehicle_id)
    vehicle = history.vehicle
    return VehicleTrustHistoryResponse(
        vehicle=VehicleRef(
            id=vehicle.id, year=vehicle.year, make=vehicle.make, model=vehicle.model, vin=vehicle.vin
        ),
        artifacts=[TrustArtifactRead.model_validate(a) for a in history.artifacts],
        total_artifacts=history.total_artifacts,
    )


@router.get("/{artifact_id}", response_model=TrustArtifactRead)
async def get_artifact(artifact_id: uuid.UUID, session: TenantSession) -> TrustArtifactRead:
    artifact = await service.get_artifact(session, artifact_id)
    return TrustArtifactRead.model_validate(artifact)


@router.patch("/{artifact_id}", response_model=TrustArtifactRead)
async def update_artifact(
    artifact_id: uuid.UUID, body: TrustArtifactUpdate, session: TenantSession
) -> TrustArtifactRead:
    artifact = await service.update_artifact(session, artifact_id, body)
    return TrustArtifactRead.model_validate(artifact)


@router.delete("/{artifact_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_artifact(artifact_id: uuid.UUID, session: TenantSession, storage: Storage) -> None:
    await service.delete_artifact(session, storage, artifact_id)
