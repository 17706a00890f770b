"""Tenant model — top-level isolation boundary (public schema)."""

import uuid
from datetime import datetime
from enum import StrEnum

from sqlalchemy import JSON, DateTime
from sqlmodel import Column, Field, SQLModel

from app.models.base import SoftDeleteMixin, TimestampMixin, new_uuid


class TenantPlan(StrEnum):
    FREE = "free"
    STARTER = "starter"
    PROFESSIONAL = "professional"
    ENTERPRISE = "enterprise"


class TenantStatus(StrEnum):
    ACTIVE = "active"
    SUSPENDED = "suspended"
    CANCELLED = "cancelled"
    TRIAL = "trial"


# Statuses that may still log in
LOGIN_ALLOWED_STATUSES = (TenantStatus.ACTIVE, TenantStatus.TRIAL)


class Tenant(TimestampMixin, SoftDeleteMixin, SQLModel, table=True):
    __tablename__ = "tenants"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    slug: str = Field(max_length=100, unique=True, nullable=False, index=True)
    business_name: str = Field(max_length=255, nullable=False)
    contact_email: str = Field(max_length=255, nullable=False)
    contact_phone: str | None = Field(default=None, max_length=50)

    # Subscription and billing
    plan: TenantPlan = Field(default=TenantPlan.FREE)
    status: TenantStatus = Field(default=TenantStatus.TRIAL)
    trial_ends_at: datetime | None = Field(sa_type=DateTime(timezone=True), default=None)
    subscription_starts_at: datetime | None = Field(sa_type=DateTime(timezone=True), default=None)
    subscription_ends_at: datetime | None = Field(sa_type=DateTime(timezone=True), default=None)

    settings: dict = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    timezone: str = Field(default="America/New_York", max_length=100)
    currency: str = Field(default="USD", max_length=3)


# ── Pydantic schemas ─────────────────────────────────────────

class TenantRead(SQLModel):
    id: uuid.UUID
    slug: str
    business_name: str
    contact_email: str
    contact_phone: str | None
    plan: TenantPlan
    status: TenantStatus
    trial_ends_at: datetime | None
    timezone: str
    currency: str
    settings: dict


class TenantUpdate(SQLModel):
    business_name: str | None = Field(default=None, min_length=1, max_length=255)
    contact_email: str | None = Field(default=None, max_length=255)
    contact_phone: str | None = Field(default=None, max_length=50)
    timezone: str | None = Field(default=None, max_length=100)
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    settings: dict | None = None
