"""Job template model — reusable "Job-in-a-Box" definitions."""

import uuid
from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import JSON, Text
from sqlmodel import Column, Field, SQLModel

from app.models.base import TENANT_SCHEMA, SoftDeleteMixin, TimestampMixin, new_uuid


class TemplateStep(BaseModel):
    order: int
    title: str
    description: str | None = None
    estimated_minutes: int | None = None


class RequiredPart(BaseModel):
    part_number: str | None = None
    name: str
    quantity: int = 1
    estimated_cost: float | None = None


class ChecklistItem(BaseModel):
    category: str
    item: str
    required: bool = False


class JobTemplate(TimestampMixin, SoftDeleteMixin, SQLModel, table=True):
    __tablename__ = "job_templates"
    __table_args__ = {"schema": TENANT_SCHEMA}

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    name: str = Field(max_length=255, nullable=False)
    slug: str = Field(max_length=255, nullable=False, index=True)
    description: str | None = Field(default=None, sa_column=Column(Text))
    category: str | None = Field(default=None, max_length=100, index=True)

    # Pricing defaults copied onto spawned jobs
    default_labor_minutes: float | None = Field(default=None)
    default_labor_rate: float | None = Field(default=None)
    default_parts_markup_percent: float = Field(default=30)

    steps: list = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    required_parts: list = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    checklist_items: list = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    is_active: bool = Field(default=True)
    is_global: bool = Field(default=False)  # system-provided vs custom


# ── Pydantic schemas ─────────────────────────────────────────

class JobTemplateCreate(SQLModel):
    name: str = Field(min_length=1, max_length=255)
    slug: str = Field(max_length=255, regex=r"^[a-z0-9\-]+$")
    description: str | None = None
    category: str | None = Field(default=None, max_length=100)
    default_labor_minutes: float | None = Field(default=None, ge=0)
    default_labor_rate: float | None = Field(default=None, ge=0)
    default_parts_markup_percent: float = Field(default=30, ge=0)
    steps: list[TemplateStep] = Field(default_factory=list)
    required_parts: list[RequiredPart] = Field(default_factory=list)
    checklist_items: list[ChecklistItem] = Field(default_factory=list)
    is_active: bool = True
    is_global: bool = False


class JobTemplateUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    slug: str | None = Field(default=None, max_length=255, regex=r"^[a-z0-9\-]+$")
    description: str | None = None
    category: str | None = Field(default=None, max_length=100)
    default_labor_minutes: float | None = Field(default=None, ge=0)
    default_labor_rate: float | None = Field(default=None, ge=0)
    default_parts_markup_percent: float | None = Field(default=None, ge=0)
    steps: list[TemplateStep] | None = None
    required_parts: list[RequiredPart] | None = None
    checklist_items: list[ChecklistItem] | None = None
    is_active: bool | None = None


class JobTemplateRead(SQLModel):
    id: uuid.UUID
    name: str
    slug: str
    description: str | None
    category: str | None
    default_labor_minutes: float | None
    default_labor_rate: float | None
    default_parts_markup_percent: float
    steps: list
    required_parts: list
    checklist_items: list
    is_active: bool
    is_global: bool
    created_at: datetime
    updated_at: datetime
