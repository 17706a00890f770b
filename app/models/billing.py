"""Billing models — invoices, payments and customer memberships."""

import uuid
from datetime import date, datetime

from sqlalchemy import JSON, DateTime, String, Text
from sqlmodel import Column, Field, SQLModel

from app.models.base import TENANT_SCHEMA, SoftDeleteMixin, TimestampMixin, new_uuid, tenant_fk


class Invoice(TimestampMixin, SoftDeleteMixin, SQLModel, table=True):
    __tablename__ = "invoices"
    __table_args__ = {"schema": TENANT_SCHEMA}

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    customer_id: uuid.UUID = Field(foreign_key=tenant_fk("customers"), nullable=False, index=True)
    invoice_number: str = Field(max_length=50, unique=True, nullable=False, index=True)

    job_ids: list = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    subtotal: float = Field(nullable=False)
    tax_amount: float = Field(default=0)
    discount_amount: float = Field(default=0)
    total: float = Field(nullable=False)
    amount_paid: float = Field(default=0)
    amount_due: float = Field(nullable=False)

    # draft | sent | paid | partial | overdue | cancelled
    status: str = Field(default="draft", sa_type=String(20), index=True)

    issue_date: date = Field(nullable=False)
    due_date: date = Field(nullable=False)
    paid_at: datetime | None = Field(sa_type=DateTime(timezone=True), default=None)

    notes: str | None = Field(default=None, sa_column=Column(Text))
    terms: str | None = Field(default=None, sa_column=Column(Text))


class Payment(TimestampMixin, SQLModel, table=True):
    __tablename__ = "payments"
    __table_args__ = {"schema": TENANT_SCHEMA}

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    invoice_id: uuid.UUID = Field(foreign_key=tenant_fk("invoices"), nullable=False, index=True)
    customer_id: uuid.UUID = Field(foreign_key=tenant_fk("customers"), nullable=False, index=True)

    amount: float = Field(nullable=False)
    method: str = Field(sa_type=String(20), nullable=False)  # cash | check | card | stripe | other
    status: str = Field(default="completed", sa_type=String(20))

    payment_date: date = Field(nullable=False, index=True)
    reference_number: str | None = Field(default=None, max_length=100)
    stripe_payment_intent_id: str | None = Field(default=None, max_length=255)
    notes: str | None = Field(default=None, sa_column=Column(Text))


class Membership(TimestampMixin, SQLModel, table=True):
    __tablename__ = "memberships"
    __table_args__ = {"schema": TENANT_SCHEMA}

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    customer_id: uuid.UUID = Field(foreign_key=tenant_fk("customers"), nullable=False, index=True)

    plan_name: str = Field(max_length=255, nullable=False)
    monthly_fee: float = Field(nullable=False)
    included_services_per_month: int = Field(default=0)
    discount_percent: float = Field(default=0)

    # active | paused | cancelled | expired
    status: str = Field(default="active", sa_type=String(20), index=True)
    start_date: date = Field(nullable=False)
    end_date: date | None = Field(default=None)
    next_billing_date: date | None = Field(default=None)

    services_used_this_month: int = Field(default=0)
    usage_period_start: date | None = Field(default=None)
