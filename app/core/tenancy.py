"""Tenant-scoped data access.

Every tenant table is declared in the placeholder schema ``tenant``. A
tenant session is bound to an engine proxy carrying a
``schema_translate_map`` that rewrites that placeholder to the tenant's own
namespace, so the same query code runs against whichever tenant the
session was built for. Nothing is set on the connection itself (no
``search_path``), so pooled connections never carry one tenant's scope
into another request.
"""

import uuid

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from app.models.base import TENANT_SCHEMA

SCHEMA_PREFIX = "tenant_"


class InvalidTenantIdError(ValueError):
    """Raised when a tenant id is not a well-formed UUID."""


def normalize_tenant_id(tenant_id: uuid.UUID | str) -> uuid.UUID:
    if isinstance(tenant_id, uuid.UUID):
        return tenant_id
    try:
        parsed = uuid.UUID(str(tenant_id))
    except (TypeError, ValueError) as exc:
        raise InvalidTenantIdError(f"Invalid tenant id: {tenant_id!r}") from exc
    # uuid.UUID() also accepts braces, urn: prefixes and bare hex; only the
    # canonical hyphenated form is allowed to reach a schema name.
    if str(parsed) != str(tenant_id).lower():
        raise InvalidTenantIdError(f"Invalid tenant id: {tenant_id!r}")
    return parsed


def schema_name_for(tenant_id: uuid.UUID | str) -> str:
    """Return the namespace name for a tenant, e.g. ``tenant_0b6f...``."""
    return f"{SCHEMA_PREFIX}{normalize_tenant_id(tenant_id)}"


def tenant_execution_options(tenant_id: uuid.UUID | str) -> dict:
    return {"schema_translate_map": {TENANT_SCHEMA: schema_name_for(tenant_id)}}


class TenantSessionFactory:
    """Builds sessions whose statements resolve inside one tenant's schema."""

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine

    def bind_for(self, tenant_id: uuid.UUID | str) -> AsyncEngine:
        return self.engine.execution_options(**tenant_execution_options(tenant_id))

    def for_tenant(self, tenant_id: uuid.UUID | str) -> AsyncSession:
        return AsyncSession(bind=self.bind_for(tenant_id), expire_on_commit=False)
