"""Trust artifact model — photos, videos and documents evidencing work."""

import uuid
from datetime import datetime
from enum import StrEnum

from sqlalchemy import JSON, BigInteger, DateTime, String, Text
from sqlmodel import Column, Field, SQLModel

from app.models.base import (
    TENANT_SCHEMA,
    SoftDeleteMixin,
    TimestampMixin,
    new_uuid,
    tenant_fk,
    utcnow,
)


class ArtifactType(StrEnum):
    BEFORE_PHOTO = "before_photo"
    AFTER_PHOTO = "after_photo"
    INSPECTION_VIDEO = "inspection_video"
    DIAGNOSTIC_REPORT = "diagnostic_report"
    CUSTOMER_APPROVAL = "customer_approval"
    RECEIPT = "receipt"
    OTHER = "other"


class TrustArtifact(TimestampMixin, SoftDeleteMixin, SQLModel, table=True):
    __tablename__ = "trust_artifacts"
    __table_args__ = {"schema": TENANT_SCHEMA}

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    job_id: uuid.UUID | None = Field(
        default=None, foreign_key=tenant_fk("jobs"), ondelete="CASCADE", nullable=True, index=True,
    )
    vehicle_id: uuid.UUID | None = Field(
        default=None, foreign_key=tenant_fk("vehicles"), nullable=True, index=True,
    )

    artifact_type: str = Field(sa_type=String(30), nullable=False, index=True)
    title: str = Field(max_length=255, nullable=False)
    description: str | None = Field(default=None, sa_column=Column(Text))

    # Blob storage
    file_url: str | None = Field(default=None, max_length=500)
    file_type: str | None = Field(default=None, max_length=100)
    file_size: int | None = Field(default=None, sa_type=BigInteger)
    blob_name: str | None = Field(default=None, max_length=500)
    container_name: str | None = Field(default=None, max_length=100)

    artifact_metadata: dict | None = Field(default=None, sa_column=Column(JSON, nullable=True))
    captured_at: datetime = Field(
        sa_type=DateTime(timezone=True), default_factory=utcnow, nullable=False
    )
    captured_by_user_id: uuid.UUID | None = Field(default=None, nullable=True)


# ── Pydantic schemas ─────────────────────────────────────────

class TrustArtifactUpdate(SQLModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    artifact_metadata: dict | None = None


class TrustArtifactRead(SQLModel):
    id: uuid.UUID
    job_id: uuid.UUID | None
    vehicle_id: uuid.UUID | None
    artifact_type: ArtifactType
    title: str
    description: str | None
    file_url: str | None
    file_type: str | None
    file_size: int | None
    blob_name: str | None
    artifact_metadata: dict | None
    captured_at: datetime
    captured_by_user_id: uuid.UUID | None
    created_at: datetime
    updated_at: datetime
