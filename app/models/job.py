"""Job model — a unit of work on a customer's vehicle."""

import uuid
from datetime import datetime
from enum import StrEnum

from sqlalchemy import JSON, DateTime, String, Text
from sqlmodel import Column, Field, SQLModel

from app.models.base import TENANT_SCHEMA, SoftDeleteMixin, TimestampMixin, new_uuid, tenant_fk


class JobStatus(StrEnum):
    DRAFT = "draft"
    ESTIMATE = "estimate"
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    ON_HOLD = "on_hold"


# Fields whose change triggers a total recomputation
PRICING_FIELDS = ("labor_minutes", "labor_rate", "parts_total", "tax_rate", "discount_amount")


class Job(TimestampMixin, SoftDeleteMixin, SQLModel, table=True):
    __tablename__ = "jobs"
    __table_args__ = {"schema": TENANT_SCHEMA}

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    customer_id: uuid.UUID = Field(foreign_key=tenant_fk("customers"), nullable=False, index=True)
    vehicle_id: uuid.UUID = Field(foreign_key=tenant_fk("vehicles"), nullable=False, index=True)
    job_template_id: uuid.UUID | None = Field(
        default=None, foreign_key=tenant_fk("job_templates"), nullable=True, index=True,
    )
    # public.users id, no FK across schemas
    assigned_mechanic_id: uuid.UUID | None = Field(default=None, nullable=True, index=True)

    job_number: str = Field(max_length=50, unique=True, nullable=False, index=True)
    title: str = Field(max_length=255, nullable=False)
    description: str | None = Field(default=None, sa_column=Column(Text))
    status: str = Field(default=JobStatus.DRAFT, sa_type=String(20), index=True)

    # Scheduling
    scheduled_start: datetime | None = Field(
        sa_type=DateTime(timezone=True), default=None, index=True
    )
    scheduled_end: datetime | None = Field(sa_type=DateTime(timezone=True), default=None)
    actual_start: datetime | None = Field(sa_type=DateTime(timezone=True), default=None)
    actual_end: datetime | None = Field(sa_type=DateTime(timezone=True), default=None)
    estimated_duration_minutes: int | None = Field(default=None)

    # Location
    service_location_address: str | None = Field(default=None, max_length=500)
    service_location_lat: float | None = Field(default=None)
    service_location_lng: float | None = Field(default=None)

    # Pricing
    labor_minutes: float = Field(default=0)
    labor_rate: float = Field(default=0)
    parts_total: float = Field(default=0)
    tax_rate: float = Field(default=0)
    discount_amount: float = Field(default=0)
    total: float = Field(default=0)

    # Job-in-a-Box: frozen copy of the template taken at creation time
    template_snapshot: dict = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    completed_steps: list = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    checklist_results: list = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    notes: str | None = Field(default=None, sa_column=Column(Text))


# ── Pydantic schemas ─────────────────────────────────────────

class JobCreate(SQLModel):
    customer_id: uuid.UUID
    vehicle_id: uuid.UUID
    job_template_id: uuid.UUID | None = None
    assigned_mechanic_id: uuid.UUID | None = None
    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    status: JobStatus = JobStatus.DRAFT
    scheduled_start: datetime | None = None
    scheduled_end: datetime | None = None
    estimated_duration_minutes: int | None = Field(default=None, ge=0)
    service_location_address: str | None = Field(default=None, max_length=500)
    service_location_lat: float | None = Field(default=None, ge=-90, le=90)
    service_location_lng: float | None = Field(default=None, ge=-180, le=180)
    labor_minutes: float = Field(default=0, ge=0)
    labor_rate: float = Field(default=0, ge=0)
    parts_total: float = Field(default=0, ge=0)
    tax_rate: float = Field(default=0, ge=0, le=100)
    discount_amount: float = Field(default=0, ge=0)
    notes: str | None = None


class JobUpdate(SQLModel):
    assigned_mechanic_id: uuid.UUID | None = None
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    scheduled_start: datetime | None = None
    scheduled_end: datetime | None = None
    estimated_duration_minutes: int | None = Field(default=None, ge=0)
    service_location_address: str | None = Field(default=None, max_length=500)
    service_location_lat: float | None = Field(default=None, ge=-90, le=90)
    service_location_lng: float | None = Field(default=None, ge=-180, le=180)
    labor_minutes: float | None = Field(default=None, ge=0)
    labor_rate: float | None = Field(default=None, ge=0)
    parts_total: float | None = Field(default=None, ge=0)
    tax_rate: float | None = Field(default=None, ge=0, le=100)
    discount_amount: float | None = Field(default=None, ge=0)
    completed_steps: list | None = None
    checklist_results: list | None = None
    notes: str | None = None


class JobStatusUpdate(SQLModel):
    status: JobStatus


class JobRead(SQLModel):
    id: uuid.UUID
    customer_id: uuid.UUID
    vehicle_id: uuid.UUID
    job_template_id: uuid.UUID | None
    assigned_mechanic_id: uuid.UUID | None
    job_number: str
    title: str
    description: str | None
    status: JobStatus
    scheduled_start: datetime | None
    scheduled_end: datetime | None
    actual_start: datetime | None
    actual_end: datetime | None
    estimated_duration_minutes: int | None
    service_location_address: str | None
    service_location_lat: float | None
    service_location_lng: float | None
    labor_minutes: float
    labor_rate: float
    parts_total: float
    tax_rate: float
    discount_amount: float
    total: float
    template_snapshot: dict
    completed_steps: list
    checklist_results: list
    notes: str | None
    created_at: datetime
    updated_at: datetime
