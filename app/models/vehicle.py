"""Vehicle model — owned by a customer, optionally part of a fleet."""

import uuid
from datetime import datetime

from sqlalchemy import Text
from sqlmodel import Column, Field, SQLModel

from app.models.base import TENANT_SCHEMA, SoftDeleteMixin, TimestampMixin, new_uuid, tenant_fk


class Vehicle(TimestampMixin, SoftDeleteMixin, SQLModel, table=True):
    __tablename__ = "vehicles"
    __table_args__ = {"schema": TENANT_SCHEMA}

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    customer_id: uuid.UUID = Field(
        foreign_key=tenant_fk("customers"), ondelete="CASCADE", nullable=False, index=True,
    )
    fleet_id: uuid.UUID | None = Field(
        default=None, foreign_key=tenant_fk("fleets"), nullable=True, index=True,
    )

    vin: str | None = Field(default=None, max_length=17, index=True)
    year: str = Field(max_length=4, nullable=False)
    make: str = Field(max_length=100, nullable=False)
    model: str = Field(max_length=100, nullable=False)
    trim: str | None = Field(default=None, max_length=100)
    color: str | None = Field(default=None, max_length=50)
    license_plate: str | None = Field(default=None, max_length=50, index=True)
    license_plate_state: str | None = Field(default=None, max_length=2)
    odometer: int | None = Field(default=None)
    engine: str | None = Field(default=None, max_length=100)
    transmission: str | None = Field(default=None, max_length=100)

    notes: str | None = Field(default=None, sa_column=Column(Text))


# ── Pydantic schemas ─────────────────────────────────────────

class VehicleCreate(SQLModel):
    customer_id: uuid.UUID
    fleet_id: uuid.UUID | None = None
    vin: str | None = Field(default=None, min_length=17, max_length=17)
    year: str = Field(regex=r"^\d{4}$")
    make: str = Field(min_length=1, max_length=100)
    model: str = Field(min_length=1, max_length=100)
    trim: str | None = Field(default=None, max_length=100)
    color: str | None = Field(default=None, max_length=50)
    license_plate: str | None = Field(default=None, max_length=50)
    license_plate_state: str | None = Field(default=None, max_length=2)
    odometer: int | None = Field(default=None, ge=0)
    engine: str | None = Field(default=None, max_length=100)
    transmission: str | None = Field(default=None, max_length=100)
    notes: str | None = None


class VehicleUpdate(SQLModel):
    fleet_id: uuid.UUID | None = None
    vin: str | None = Field(default=None, min_length=17, max_length=17)
    year: str | None = Field(default=None, regex=r"^\d{4}$")
    make: str | None = Field(default=None, min_length=1, max_length=100)
    model: str | None = Field(default=None, min_length=1, max_length=100)
    trim: str | None = Field(default=None, max_length=100)
    color: str | None = Field(default=None, max_length=50)
    license_plate: str | None = Field(default=None, max_length=50)
    license_plate_state: str | None = Field(default=None, max_length=2)
    odometer: int | None = Field(default=None, ge=0)
    engine: str | None = Field(default=None, max_length=100)
    transmission: str | None = Field(default=None, max_length=100)
    notes: str | None = None


class VehicleRead(SQLModel):
    id: uuid.UUID
    customer_id: uuid.UUID
    fleet_id: uuid.UUID | None
    vin: str | None
    year: str
    make: str
    model: str
    trim: str | None
    color: str | None
    license_plate: str | None
    license_plate_state: str | None
    odometer: int | None
    engine: str | None
    transmission: str | None
    notes: str | None
    created_at: datetime
    updated_at: datetime
