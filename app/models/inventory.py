"""Inventory models — stock per part per location, and parts used on jobs."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Text
from sqlmodel import Column, Field, SQLModel

from app.models.base import TENANT_SCHEMA, SoftDeleteMixin, TimestampMixin, new_uuid, tenant_fk


class InventoryItem(TimestampMixin, SoftDeleteMixin, SQLModel, table=True):
    """Stock of one part at one location (``Van #1``, ``Shop``...).

    ``quantity_on_hand - quantity_allocated`` is what can still be put on a
    job; allocation never lets ``quantity_allocated`` exceed on-hand stock.
    """

    __tablename__ = "inventory_items"
    __table_args__ = {"schema": TENANT_SCHEMA}

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    part_id: uuid.UUID = Field(foreign_key=tenant_fk("parts"), nullable=False, index=True)
    location: str = Field(max_length=100, nullable=False, index=True)
    bin_location: str | None = Field(default=None, max_length=100)
    notes: str | None = Field(default=None, sa_column=Column(Text))

    quantity_on_hand: int = Field(default=0, nullable=False)
    quantity_allocated: int = Field(default=0, nullable=False)
    last_restocked_at: datetime | None = Field(sa_type=DateTime(timezone=True), default=None)


class JobPart(TimestampMixin, SQLModel, table=True):
    __tablename__ = "job_parts"
    __table_args__ = {"schema": TENANT_SCHEMA}

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    job_id: uuid.UUID = Field(
        foreign_key=tenant_fk("jobs"), ondelete="CASCADE", nullable=False, index=True,
    )
    part_id: uuid.UUID = Field(foreign_key=tenant_fk("parts"), nullable=False, index=True)
    inventory_item_id: uuid.UUID | None = Field(
        default=None, foreign_key=tenant_fk("inventory_items"), nullable=True,
    )

    quantity: int = Field(default=1, nullable=False)
    unit_cost: float = Field(default=0, nullable=False)
    unit_price: float = Field(default=0, nullable=False)
    subtotal: float = Field(default=0, nullable=False)

    is_customer_supplied: bool = Field(default=False)
    notes: str | None = Field(default=None, sa_column=Column(Text))


# ── Pydantic schemas ─────────────────────────────────────────

class InventoryCreate(SQLModel):
    part_id: uuid.UUID
    location: str = Field(min_length=1, max_length=100)
    quantity_on_hand: int = Field(ge=0)
    bin_location: str | None = Field(default=None, max_length=100)
    notes: str | None = None


class InventoryUpdate(SQLModel):
    quantity_on_hand: int | None = Field(default=None, ge=0)
    bin_location: str | None = Field(default=None, max_length=100)
    notes: str | None = None


class InventoryTransfer(SQLModel):
    from_inventory_id: uuid.UUID
    to_location: str = Field(min_length=1, max_length=100)
    quantity: int = Field(gt=0)
    notes: str | None = None


class InventoryAllocate(SQLModel):
    part_id: uuid.UUID
    location: str = Field(min_length=1, max_length=100)
    quantity: int = Field(gt=0)
    job_id: uuid.UUID


class InventoryRead(SQLModel):
    id: uuid.UUID
    part_id: uuid.UUID
    location: str
    bin_location: str | None
    notes: str | None
    quantity_on_hand: int
    quantity_allocated: int
    quantity_available: int = 0
    last_restocked_at: datetime | None
    part_name: str | None = None
    part_number: str | None = None
    created_at: datetime
    updated_at: datetime


class JobPartRead(SQLModel):
    id: uuid.UUID
    job_id: uuid.UUID
    part_id: uuid.UUID
    inventory_item_id: uuid.UUID | None
    quantity: int
    unit_cost: float
    unit_price: float
    subtotal: float
    is_customer_supplied: bool
    notes: str | None
    part_name: str | None = None
    part_number: str | None = None
    created_at: datetime
