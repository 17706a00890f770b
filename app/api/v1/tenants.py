"""Current tenant profile endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.deps import Auth, AuthContext, Session, require_roles
from app.core.errors import NotFoundError
from app.models.base import utcnow
from app.models.tenant import Tenant, TenantRead, TenantUpdate
from app.models.user import UserRole
from app.services.common import update_values

router = APIRouter(prefix="/tenants", tags=["tenants"])

Elevated = Annotated[AuthContext, Depends(require_roles(UserRole.OWNER, UserRole.ADMIN))]


async def _get_tenant_or_404(session, tenant_id) -> Tenant:
    tenant = await session.get(Tenant, tenant_id)
    if tenant is None or tenant.deleted_at is not None:
        raise NotFoundError("Tenant not found")
    return tenant


@router.get("/me", response_model=TenantRead, summary="Get current tenant info")
async def get_current_tenant(auth: Auth, session: Session) -> TenantRead:
    """Returns the tenant associated with the authenticated token."""
    tenant = await _get_tenant_or_404(session, auth.tenant_id)
    return TenantRead.model_validate(tenant)


@router.patch("/me", response_model=TenantRead, summary="Update current tenant profile")
async def update_current_tenant(body: TenantUpdate, auth: Elevated, session: Session) -> TenantRead:
    tenant = await _get_tenant_or_404(session, auth.tenant_id)

    for key, value in update_values(tenant, body).items():
        setattr(tenant, key, value)
    tenant.updated_at = utcnow()

    session.add(tenant)
    await session.commit()
    await session.refresh(tenant)
    return TenantRead.model_validate(tenant)
