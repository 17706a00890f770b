"""Customer model — tenant-scoped."""

import uuid
from datetime import datetime

from pydantic import EmailStr
from sqlalchemy import JSON, Text
from sqlmodel import Column, Field, SQLModel

from app.models.base import TENANT_SCHEMA, SoftDeleteMixin, TimestampMixin, new_uuid


class Customer(TimestampMixin, SoftDeleteMixin, SQLModel, table=True):
    __tablename__ = "customers"
    __table_args__ = {"schema": TENANT_SCHEMA}

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    first_name: str = Field(max_length=100, nullable=False)
    last_name: str = Field(max_length=100, nullable=False)
    email: str | None = Field(default=None, max_length=255, index=True)
    phone: str = Field(max_length=50, nullable=False, index=True)

    address_line1: str | None = Field(default=None, max_length=255)
    address_line2: str | None = Field(default=None, max_length=255)
    city: str | None = Field(default=None, max_length=100)
    state: str | None = Field(default=None, max_length=50)
    postal_code: str | None = Field(default=None, max_length=20)

    notes: str | None = Field(default=None, sa_column=Column(Text))
    custom_fields: dict = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))


# ── Pydantic schemas ─────────────────────────────────────────

class CustomerCreate(SQLModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: EmailStr | None = None
    phone: str = Field(min_length=1, max_length=50)
    address_line1: str | None = Field(default=None, max_length=255)
    address_line2: str | None = Field(default=None, max_length=255)
    city: str | None = Field(default=None, max_length=100)
    state: str | None = Field(default=None, max_length=50)
    postal_code: str | None = Field(default=None, max_length=20)
    notes: str | None = None
    custom_fields: dict = Field(default_factory=dict)


class CustomerUpdate(SQLModel):
    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, min_length=1, max_length=50)
    address_line1: str | None = Field(default=None, max_length=255)
    address_line2: str | None = Field(default=None, max_length=255)
    city: str | None = Field(default=None, max_length=100)
    state: str | None = Field(default=None, max_length=50)
    postal_code: str | None = Field(default=None, max_length=20)
    notes: str | None = None
    custom_fields: dict | None = None


class CustomerRead(SQLModel):
    id: uuid.UUID
    first_name: str
    last_name: str
    email: str | None
    phone: str
    address_line1: str | None
    address_line2: str | None
    city: str | None
    state: str | None
    postal_code: str | None
    notes: str | None
    custom_fields: dict
    created_at: datetime
    updated_at: datetime
