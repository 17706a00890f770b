"""Fleet model — groups vehicles of a fleet customer."""

import uuid

from sqlalchemy import Text
from sqlmodel import Column, Field, SQLModel

from app.models.base import TENANT_SCHEMA, SoftDeleteMixin, TimestampMixin, new_uuid, tenant_fk


class Fleet(TimestampMixin, SoftDeleteMixin, SQLModel, table=True):
    __tablename__ = "fleets"
    __table_args__ = {"schema": TENANT_SCHEMA}

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    name: str = Field(max_length=255, nullable=False)
    customer_id: uuid.UUID | None = Field(
        default=None, foreign_key=tenant_fk("customers"), nullable=True, index=True,
    )

    contact_name: str | None = Field(default=None, max_length=255)
    contact_email: str | None = Field(default=None, max_length=255)
    contact_phone: str | None = Field(default=None, max_length=50)

    notes: str | None = Field(default=None, sa_column=Column(Text))
