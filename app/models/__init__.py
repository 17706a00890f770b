"""Import all models so SQLModel.metadata picks them up."""

from sqlalchemy import Table
from sqlmodel import SQLModel

from app.models.base import TENANT_SCHEMA, Page, Pagination
from app.models.billing import Invoice, Membership, Payment
from app.models.customer import Customer, CustomerCreate, CustomerRead, CustomerUpdate
from app.models.fleet import Fleet
from app.models.inventory import (
    InventoryAllocate,
    InventoryCreate,
    InventoryItem,
    InventoryRead,
    InventoryTransfer,
    InventoryUpdate,
    JobPart,
    JobPartRead,
)
from app.models.job import Job, JobCreate, JobRead, JobStatus, JobStatusUpdate, JobUpdate
from app.models.job_template import (
    JobTemplate,
    JobTemplateCreate,
    JobTemplateRead,
    JobTemplateUpdate,
)
from app.models.part import Part, PartCreate, PartRead, PartUpdate
from app.models.refresh_token import RefreshToken
from app.models.route_plan import RoutePlan
from app.models.tenant import Tenant, TenantPlan, TenantRead, TenantStatus, TenantUpdate
from app.models.trust_artifact import (
    ArtifactType,
    TrustArtifact,
    TrustArtifactRead,
    TrustArtifactUpdate,
)
from app.models.user import User, UserRead, UserRole
from app.models.vehicle import Vehicle, VehicleCreate, VehicleRead, VehicleUpdate


def public_tables() -> list[Table]:
    """Tables of the shared public schema (tenants, users, refresh tokens)."""
    return [t for t in SQLModel.metadata.sorted_tables if t.schema is None]


def tenant_tables() -> list[Table]:
    """Tables created inside every tenant schema, in dependency order."""
    return [t for t in SQLModel.metadata.sorted_tables if t.schema == TENANT_SCHEMA]


__all__ = [
    "ArtifactType",
    "Customer",
    "CustomerCreate",
    "CustomerRead",
    "CustomerUpdate",
    "Fleet",
    "InventoryAllocate",
    "InventoryCreate",
    "InventoryItem",
    "InventoryRead",
    "InventoryTransfer",
    "InventoryUpdate",
    "Invoice",
    "Job",
    "JobCreate",
    "JobPart",
    "JobPartRead",
    "JobRead",
    "JobStatus",
    "JobStatusUpdate",
    "JobTemplate",
    "JobTemplateCreate",
    "JobTemplateRead",
    "JobTemplateUpdate",
    "JobUpdate",
    "Membership",
    "Page",
    "Pagination",
    "Part",
    "PartCreate",
    "PartRead",
    "PartUpdate",
    "Payment",
    "RefreshToken",
    "RoutePlan",
    "Tenant",
    "TenantPlan",
    "TenantRead",
    "TenantStatus",
    "TenantUpdate",
    "TrustArtifact",
    "TrustArtifactRead",
    "TrustArtifactUpdate",
    "User",
    "UserRead",
    "UserRole",
    "Vehicle",
    "VehicleCreate",
    "VehicleRead",
    "VehicleUpdate",
    "public_tables",
    "tenant_tables",
]
