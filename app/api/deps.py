"""FastAPI dependencies for authentication and tenant resolution."""

import logging
import uuid
from collections.abc import AsyncGenerator, Callable
from typing import Annotated

from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import engine, get_session
from app.core.errors import AuthenticationError, PermissionDeniedError
from app.core.security import decode_access_token
from app.core.tenancy import InvalidTenantIdError, TenantSessionFactory, normalize_tenant_id
from app.services.provisioning import SchemaProvisioner
from app.services.storage import BlobStorage, get_blob_storage

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


class AuthContext:
    """Resolved identity carried through a request."""

    __slots__ = ("tenant_id", "user_id", "email", "user_role")

    def __init__(
        self,
        tenant_id: uuid.UUID,
        user_id: uuid.UUID,
        email: str,
        user_role: str,
    ) -> None:
        self.tenant_id = tenant_id
        self.user_id = user_id
        self.email = email
        self.user_role = user_role


def _resolve_jwt(token: str) -> AuthContext:
    """Decode an access token and extract tenant_id + user_id."""
    try:
        payload = decode_access_token(token)
    except JWTError as exc:
        logger.warning("Authentication failed: %s", exc)
        raise AuthenticationError("Invalid or expired token", code="invalid_token") from exc

    try:
        return AuthContext(
            tenant_id=normalize_tenant_id(payload["tid"]),
            user_id=uuid.UUID(payload["sub"]),
            email=payload.get("email", ""),
            user_role=payload.get("role", "mechanic"),
        )
    except (KeyError, ValueError, InvalidTenantIdError) as exc:
        raise AuthenticationError("Malformed token payload", code="invalid_token") from exc


async def get_auth_context(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> AuthContext:
    if credentials is None:
        raise AuthenticationError(
            "Missing or invalid Authorization header", code="missing_token"
        )
    return _resolve_jwt(credentials.credentials)


def require_roles(*roles: str) -> Callable:
    """Dependency factory: reject callers whose role is not in *roles*."""

    async def _check(auth: Annotated[AuthContext, Depends(get_auth_context)]) -> AuthContext:
        if auth.user_role not in roles:
            logger.warning(
                "Authorization failed for role %s (needs one of %s)",
                auth.user_role,
                ", ".join(roles),
                extra={"user_id": str(auth.user_id)},
            )
            raise PermissionDeniedError("Insufficient permissions", code="insufficient_role")
        return auth

    return _check


# ── Tenant scoping ───────────────────────────────────────────

def get_provisioner() -> SchemaProvisioner:
    return SchemaProvisioner(engine)


def get_tenant_session_factory() -> TenantSessionFactory:
    return TenantSessionFactory(engine)


async def get_tenant_session(
    auth: Annotated[AuthContext, Depends(get_auth_context)],
    factory: Annotated[TenantSessionFactory, Depends(get_tenant_session_factory)],
    x_tenant_id: Annotated[str | None, Header(alias="X-Tenant-ID")] = None,
) -> AsyncGenerator[AsyncSession, None]:
    """Session whose queries resolve inside the caller's tenant namespace.

    The tenant always comes from the token. An ``X-Tenant-ID`` header is
    accepted only if it names the same tenant.
    """
    if x_tenant_id is not None and x_tenant_id.strip().lower() != str(auth.tenant_id):
        logger.warning(
            "Tenant header %s does not match token tenant %s", x_tenant_id, auth.tenant_id
        )
        raise PermissionDeniedError("Tenant mismatch", code="tenant_mismatch")

    async with factory.for_tenant(auth.tenant_id) as session:
        yield session


# Typed shorthand for use in route signatures
Auth = Annotated[AuthContext, Depends(get_auth_context)]
Session = Annotated[AsyncSession, Depends(get_session)]
TenantSession = Annotated[AsyncSession, Depends(get_tenant_session)]
Provisioner = Annotated[SchemaProvisioner, Depends(get_provisioner)]
Storage = Annotated[BlobStorage, Depends(get_blob_storage)]
