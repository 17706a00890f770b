"""Trust artifacts: photo, video and document evidence attached to jobs and vehicles.

Files go to blob storage under ``<tenant-id>/<uuid><ext>``; the row keeps the
blob name and container so the file can be removed again on delete.
"""

import logging
import uuid
from collections import defaultdict
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.config import get_settings
from app.core.errors import NotFoundError, UpstreamServiceError, ValidationFailedError
from app.models.base import utcnow
from app.models.job import Job
from app.models.trust_artifact import ArtifactType, TrustArtifact, TrustArtifactUpdate
from app.models.vehicle import Vehicle
from app.services.common import (
    get_live,
    get_live_or_404,
    paginate,
    search_clause,
    update_values,
)
from app.services.storage import BlobStorage, StorageError, validate_file_size, validate_file_type

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = ["image/jpeg", "image/jpg", "image/png", "image/webp"]
ALLOWED_VIDEO_TYPES = ["video/mp4", "video/quicktime", "video/x-msvideo"]
ALLOWED_DOCUMENT_TYPES = ["application/pdf", "image/jpeg", "image/png"]

MAX_IMAGE_SIZE_MB = 10
MAX_VIDEO_SIZE_MB = 100

PHOTO_TYPES = (ArtifactType.BEFORE_PHOTO, ArtifactType.AFTER_PHOTO)
VIDEO_TYPES = (ArtifactType.INSPECTION_VIDEO,)


@dataclass
class JobTrustSummary:
    job: Job
    artifacts: dict[str, list[TrustArtifact]] = field(default_factory=dict)
    counts: dict[str, int] = field(default_factory=dict)
    total_artifacts: int = 0


@dataclass
class VehicleTrustHistory:
    vehicle: Vehicle
    artifacts: list[TrustArtifact] = field(default_factory=list)
    total_artifacts: int = 0


def upload_rules(artifact_type: ArtifactType) -> tuple[list[str], int]:
    """Allowed content types and max size (MB) for an artifact type."""
    if artifact_type in PHOTO_TYPES:
        return ALLOWED_IMAGE_TYPES, MAX_IMAGE_SIZE_MB
    if artifact_type in VIDEO_TYPES:
        return ALLOWED_VIDEO_TYPES, MAX_VIDEO_SIZE_MB
    return ALLOWED_IMAGE_TYPES + ALLOWED_DOCUMENT_TYPES, MAX_IMAGE_SIZE_MB


async def list_artifacts(
    session: AsyncSession,
    *,
    job_id: uuid.UUID | None = None,
    vehicle_id: uuid.UUID | None = None,
    artifact_type: ArtifactType | None = None,
    search: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> tuple[list[TrustArtifact], int]:
    stmt = select(TrustArtifact).where(TrustArtifact.deleted_at.is_(None))  # type: ignore[union-attr]
    if job_id:
        stmt = stmt.where(TrustArtifact.job_id == job_id)
    if vehicle_id:
        stmt = stmt.where(TrustArtifact.vehicle_id == vehicle_id)
    if artifact_type:
        stmt = stmt.where(TrustArtifact.artifact_type == str(artifact_type))
    if search:
        stmt = stmt.where(search_clause(search, TrustArtifact.title, TrustArtifact.description))
    stmt = stmt.order_by(TrustArtifact.created_at.desc())  # type: ignore[attr-defined]
    return await paginate(session, stmt, limit, offset)


async def get_artifact(session: AsyncSession, artifact_id: uuid.UUID) -> TrustArtifact:
    return await get_live_or_404(session, TrustArtifact, artifact_id, "Trust artifact")


async def upload_artifact(
    session: AsyncSession,
    storage: BlobStorage,
    tenant_id: uuid.UUID,
    *,
    artifact_type: ArtifactType,
    title: str,
    data: bytes,
    filename: str,
    content_type: str,
    job_id: uuid.UUID | None = None,
    vehicle_id: uuid.UUID | None = None,
    description: str | None = None,
    artifact_metadata: dict | None = None,
    captured_by_user_id: uuid.UUID | None = None,
) -> TrustArtifact:
    if job_id is None and vehicle_id is None:
        raise ValidationFailedError(
            "Either job_id or vehicle_id must be provided", code="artifact_target_missing"
        )
    if job_id is not None and await get_live(session, Job, job_id) is None:
        raise NotFoundError("Job not found")
    if vehicle_id is not None and await get_live(session, Vehicle, vehicle_id) is None:
        raise NotFoundError("Vehicle not found")

    allowed_types, max_size_mb = upload_rules(artifact_type)
    if not validate_file_type(content_type, allowed_types):
        raise ValidationFailedError(
            f"Invalid file type for {artifact_type}. Allowed types: {', '.join(allowed_types)}",
            code="invalid_file_type",
        )
    if not validate_file_size(len(data), max_size_mb):
        raise ValidationFailedError(
            f"File size exceeds maximum of {max_size_mb}MB", code="file_too_large"
        )

    container = get_settings().storage_bucket
    try:
        blob = await storage.upload(container, data, filename, content_type, tenant_id)
    except StorageError as exc:
        raise UpstreamServiceError("Failed to upload file", code="storage_unavailable") from exc

    artifact = TrustArtifact(
        job_id=job_id,
        vehicle_id=vehicle_id,
        artifact_type=artifact_type,
        title=title,
        description=description,
        file_url=blob.url,
        file_type=content_type,
        file_size=blob.size,
        blob_name=blob.blob_name,
        container_name=container,
        artifact_metadata=artifact_metadata,
        captured_by_user_id=captured_by_user_id,
    )
    session.add(artifact)
    await session.commit()
    await session.refresh(artifact)

    logger.info(
        "Trust artifact created: %s (%s)",
        artifact.id,
        artifact_type,
        extra={"tenant_id": str(tenant_id)},
    )
    return artifact


async def update_artifact(
    session: AsyncSession, artifact_id: uuid.UUID, body: TrustArtifactUpdate
) -> TrustArtifact:
    artifact = await get_artifact(session, artifact_id)

    for key, value in update_values(artifact, body).items():
        setattr(artifact, key, value)
    artifact.updated_at = utcnow()

    session.add(artifact)
    await session.commit()
    await session.refresh(artifact)
    return artifact


async def delete_artifact(
    session: AsyncSession, storage: BlobStorage, artifact_id: uuid.UUID
) -> None:
    """Soft-delete the row and remove its blob. A failing blob delete is logged only."""
    artifact = await get_artifact(session, artifact_id)

    if artifact.blob_name and artifact.container_name:
        try:
            await storage.delete(artifact.container_name, artifact.blob_name)
        except StorageError:
            logger.exception(
                "Failed to delete blob %s, continuing with soft delete", artifact.blob_name
            )

    artifact.deleted_at = utcnow()
    session.add(artifact)
    await session.commit()
    logger.info("Trust artifact deleted: %s", artifact_id)


async def job_trust_summary(session: AsyncSession, job_id: uuid.UUID) -> JobTrustSummary:
    job = await get_live_or_404(session, Job, job_id, "Job")
    result = await session.execute(
        select(TrustArtifact)
        .where(TrustArtifact.job_id == job_id, TrustArtifact.deleted_at.is_(None))  # type: ignore[union-attr]
        .order_by(TrustArtifact.created_at.asc())  # type: ignore[attr-defined]
    )
    artifacts = result.scalars().all()

    grouped: dict[str, list[TrustArtifact]] = defaultdict(list)
    for artifact in artifacts:
        grouped[str(artifact.artifact_type)].append(artifact)

    return JobTrustSummary(
        job=job,
        artifacts=dict(grouped),
        counts={kind: len(items) for kind, items in grouped.items()},
        total_artifacts=len(artifacts),
    )


async def vehicle_trust_history(
    session: AsyncSession, vehicle_id: uuid.UUID
) -> VehicleTrustHistory:
    vehicle = await get_live_or_404(session, Vehicle, vehicle_id, "Vehicle")
    result = await session.execute(
        select(TrustArtifact)
        .where(TrustArtifact.vehicle_id == vehicle_id, TrustArtifact.deleted_at.is_(None))  # type: ignore[union-attr]
        .order_by(TrustArtifact.created_at.desc())  # type: ignore[attr-defined]
    )
    artifacts = list(result.scalars().all())
    return VehicleTrustHistory(vehicle=vehicle, artifacts=artifacts, total_artifacts=len(artifacts))
