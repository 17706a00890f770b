"""Route plan model — a mechanic's ordered stops for one day."""

import uuid
from datetime import date

from sqlalchemy import JSON, String
from sqlmodel import Column, Field, SQLModel

from app.models.base import TENANT_SCHEMA, TimestampMixin, new_uuid


class RoutePlan(TimestampMixin, SQLModel, table=True):
    __tablename__ = "route_plans"
    __table_args__ = {"schema": TENANT_SCHEMA}

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    assigned_mechanic_id: uuid.UUID = Field(nullable=False, index=True)  # public.users
    route_date: date = Field(nullable=False, index=True)

    # Ordered job ids and part pickup locations
    stops: list = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    total_distance_miles: float = Field(default=0)
    estimated_duration_minutes: int = Field(default=0)
    status: str = Field(default="draft", sa_type=String(20))
