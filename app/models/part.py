"""Part model — the tenant's parts catalog."""

import uuid
from datetime import datetime

from sqlalchemy import JSON, Text
from sqlmodel import Column, Field, SQLModel

from app.models.base import TENANT_SCHEMA, SoftDeleteMixin, TimestampMixin, new_uuid


class Part(TimestampMixin, SoftDeleteMixin, SQLModel, table=True):
    __tablename__ = "parts"
    __table_args__ = {"schema": TENANT_SCHEMA}

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    part_number: str | None = Field(default=None, max_length=100, index=True)
    name: str = Field(max_length=255, nullable=False)
    description: str | None = Field(default=None, sa_column=Column(Text))
    category: str | None = Field(default=None, max_length=100, index=True)
    manufacturer: str | None = Field(default=None, max_length=100)
    manufacturer_part_number: str | None = Field(default=None, max_length=100)

    default_cost: float | None = Field(default=None)
    default_price: float | None = Field(default=None)

    # Replenishment thresholds
    minimum_stock: int = Field(default=0)
    reorder_point: int = Field(default=0)

    specifications: dict | None = Field(default=None, sa_column=Column(JSON, nullable=True))
    is_active: bool = Field(default=True)


# ── Pydantic schemas ─────────────────────────────────────────

class PartCreate(SQLModel):
    part_number: str | None = Field(default=None, max_length=100)
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    category: str | None = Field(default=None, max_length=100)
    manufacturer: str | None = Field(default=None, max_length=100)
    manufacturer_part_number: str | None = Field(default=None, max_length=100)
    default_cost: float | None = Field(default=None, ge=0)
    default_price: float | None = Field(default=None, ge=0)
    minimum_stock: int = Field(default=0, ge=0)
    reorder_point: int = Field(default=0, ge=0)
    specifications: dict | None = None


class PartUpdate(SQLModel):
    part_number: str | None = Field(default=None, max_length=100)
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    category: str | None = Field(default=None, max_length=100)
    manufacturer: str | None = Field(default=None, max_length=100)
    manufacturer_part_number: str | None = Field(default=None, max_length=100)
    default_cost: float | None = Field(default=None, ge=0)
    default_price: float | None = Field(default=None, ge=0)
    minimum_stock: int | None = Field(default=None, ge=0)
    reorder_point: int | None = Field(default=None, ge=0)
    specifications: dict | None = None
    is_active: bool | None = None


class PartRead(SQLModel):
    id: uuid.UUID
    part_number: str | None
    name: str
    description: str | None
    category: str | None
    manufacturer: str | None
    manufacturer_part_number: str | None
    default_cost: float | None
    default_price: float | None
    minimum_stock: int
    reorder_point: int
    specifications: dict | None
    is_active: bool
    created_at: datetime
    updated_at: datetime
