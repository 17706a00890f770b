"""Shared base fields for all models."""

import uuid
from datetime import datetime, timezone
from typing import Generic, TypeVar

from pydantic import BaseModel
from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

# Placeholder schema for every tenant-scoped table. It is rewritten to the
# real ``tenant_<uuid>`` namespace per session; see app.core.tenancy.
TENANT_SCHEMA = "tenant"

T = TypeVar("T")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_uuid() -> uuid.UUID:
    return uuid.uuid4()


def tenant_fk(table: str) -> str:
    """Foreign key target inside the same tenant schema."""
    return f"{TENANT_SCHEMA}.{table}.id"


class TimestampMixin(SQLModel):
    """Created / updated timestamps injected into every table."""

    created_at: datetime = Field(
        sa_type=DateTime(timezone=True), default_factory=utcnow, nullable=False
    )
    updated_at: datetime = Field(
        sa_type=DateTime(timezone=True), default_factory=utcnow, nullable=False
    )


class SoftDeleteMixin(SQLModel):
    """Rows are hidden, not removed, once ``deleted_at`` is set."""

    deleted_at: datetime | None = Field(
        sa_type=DateTime(timezone=True), default=None, nullable=True
    )


# ── List envelopes ───────────────────────────────────────────

class Pagination(BaseModel):
    total: int
    limit: int
    offset: int
    has_more: bool


class Page(BaseModel, Generic[T]):
    data: list[T]
    pagination: Pagination

    @classmethod
    def build(cls, data: list, total: int, limit: int, offset: int) -> "Page":
        return cls(
            data=data,
            pagination=Pagination(
                total=total,
                limit=limit,
                offset=offset,
                has_more=offset + len(data) < total,
            ),
        )
