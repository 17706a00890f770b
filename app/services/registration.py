"""Tenant registry: registration, login and token lifecycle.

Registration is the only flow that touches both the public schema and a
tenant namespace. The tenant row and its owner are committed first, then the
namespace is provisioned. If provisioning fails the two rows are deleted
again (best effort: a failing compensation is logged, not retried) so the
slug and email can be reused.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import timedelta

from jose import JWTError
from pydantic import BaseModel
from sqlalchemy import delete, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.config import get_settings
from app.core.errors import (
    AuthenticationError,
    ConflictError,
    PermissionDeniedError,
    ProvisioningFailedError,
    ValidationFailedError,
)
from app.core.password_policy import validate_password
from app.core.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    hash_password,
    hash_refresh_token,
    verify_password,
)
from app.models.base import new_uuid, utcnow
from app.models.refresh_token import RefreshToken
from app.models.tenant import LOGIN_ALLOWED_STATUSES, Tenant, TenantPlan, TenantStatus
from app.models.user import User, UserRole
from app.services.provisioning import SchemaProvisioner, SchemaProvisioningError

logger = logging.getLogger(__name__)


class AuthTokens(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # access token lifetime, seconds


@dataclass
class AuthResult:
    user: User
    tenant: Tenant
    tokens: AuthTokens


# ── Tokens ────────────────────────────────────────────────────

async def issue_tokens(session: AsyncSession, user: User) -> AuthTokens:
    """Sign an access token and persist a new refresh token for *user*."""
    settings = get_settings()
    token_id = new_uuid()
    expires_at = utcnow() + timedelta(days=settings.refresh_token_expire_days)
    raw_refresh = create_refresh_token(user.id, token_id, expires_at)

    session.add(
        RefreshToken(
            id=token_id,
            user_id=user.id,
            token_hash=hash_refresh_token(raw_refresh),
            expires_at=expires_at,
        )
    )
    await session.commit()

    return AuthTokens(
        access_token=create_access_token(user.id, user.tenant_id, user.email, user.role),
        refresh_token=raw_refresh,
        expires_in=settings.access_token_expire_minutes * 60,
    )


# ── Registration ──────────────────────────────────────────────

async def register(
    session: AsyncSession,
    provisioner: SchemaProvisioner,
    *,
    business_name: str,
    slug: str,
    contact_email: str,
    full_name: str,
    email: str,
    password: str,
    contact_phone: str | None = None,
) -> AuthResult:
    settings = get_settings()

    errors = validate_password(password)
    if errors:
        raise ValidationFailedError(
            "Password does not meet security requirements",
            code="weak_password",
            errors=errors,
        )

    existing = await session.execute(select(Tenant.id).where(Tenant.slug == slug))
    if existing.first() is not None:
        raise ConflictError("Business slug already taken", code="slug_taken")

    existing = await session.execute(select(User.id).where(User.email == email))
    if existing.first() is not None:
        raise ConflictError("Email already registered", code="email_taken")

    password_hash = hash_password(password)

    tenant = Tenant(
        slug=slug,
        business_name=business_name,
        contact_email=contact_email,
        contact_phone=contact_phone,
        plan=TenantPlan.FREE,
        status=TenantStatus.TRIAL,
        trial_ends_at=utcnow() + timedelta(days=settings.trial_days),
        timezone=settings.default_timezone,
        currency=settings.default_currency,
    )
    user = User(
        tenant_id=tenant.id,
        email=email,
        password_hash=password_hash,
        full_name=full_name,
        role=UserRole.OWNER,
        is_active=True,
        email_verified=False,
    )
    session.add(tenant)
    session.add(user)
    await session.commit()

    try:
        await provisioner.provision(tenant.id)
    except Exception as exc:
        step = exc.step if isinstance(exc, SchemaProvisioningError) else "unknown"
        logger.error(
            "Failed to provision tenant workspace for %s at step %s",
            tenant.slug,
            step,
            extra={"tenant_id": str(tenant.id), "step": step},
        )
        await _discard_registration(session, tenant.id, user.id)
        raise ProvisioningFailedError("Failed to provision tenant workspace") from exc

    tokens = await issue_tokens(session, user)

    logger.info(
        "New tenant registered: %s",
        tenant.slug,
        extra={"tenant_id": str(tenant.id), "user_id": str(user.id)},
    )
    return AuthResult(user=user, tenant=tenant, tokens=tokens)


async def _discard_registration(
    session: AsyncSession, tenant_id: uuid.UUID, user_id: uuid.UUID
) -> None:
    try:
        await session.execute(delete(User).where(User.id == user_id))
        await session.execute(delete(Tenant).where(Tenant.id == tenant_id))
        await session.commit()
    except Exception:
        await session.rollback()
        logger.exception(
            "Could not remove tenant %s after failed provisioning",
            tenant_id,
            extra={"tenant_id": str(tenant_id)},
        )


# ── Login / refresh / logout ──────────────────────────────────

async def login(
    session: AsyncSession,
    *,
    email: str,
    password: str,
    tenant_id: uuid.UUID | None = None,
) -> AuthResult:
    stmt = select(User).where(User.email == email, User.deleted_at.is_(None))  # type: ignore[union-attr]
    if tenant_id is not None:
        stmt = stmt.where(User.tenant_id == tenant_id)
    result = await session.execute(stmt.order_by(User.created_at))
    user = result.scalars().first()

    if user is None or not verify_password(password, user.password_hash):
        raise AuthenticationError("Invalid email or password", code="invalid_credentials")

    tenant = await session.get(Tenant, user.tenant_id)
    if tenant is None or tenant.deleted_at is not None or tenant.status not in LOGIN_ALLOWED_STATUSES:
        raise PermissionDeniedError("Account is suspended or cancelled", code="tenant_inactive")

    if not user.is_active:
        raise PermissionDeniedError("User account is disabled", code="user_inactive")

    user.last_login_at = utcnow()
    session.add(user)
    tokens = await issue_tokens(session, user)

    logger.info(
        "User logged in: %s",
        user.email,
        extra={"tenant_id": str(tenant.id), "user_id": str(user.id)},
    )
    return AuthResult(user=user, tenant=tenant, tokens=tokens)


async def _active_refresh_row(session: AsyncSession, raw_token: str) -> tuple[dict, RefreshToken]:
    try:
        payload = decode_refresh_token(raw_token)
        token_id = uuid.UUID(payload["jti"])
    except (JWTError, KeyError, ValueError) as exc:
        raise AuthenticationError(
            "Invalid or expired refresh token", code="invalid_refresh_token"
        ) from exc

    stmt = select(RefreshToken).where(
        RefreshToken.id == token_id,
        RefreshToken.token_hash == hash_refresh_token(raw_token),
        RefreshToken.revoked.is_(False),  # type: ignore[union-attr]
        RefreshToken.expires_at > utcnow(),
    )
    row = (await session.execute(stmt)).scalar_one_or_none()
    if row is None:
        raise AuthenticationError(
            "Invalid or expired refresh token", code="invalid_refresh_token"
        )
    return payload, row


async def refresh(session: AsyncSession, raw_token: str) -> AuthTokens:
    """Mint a new access token. The refresh token itself is kept."""
    _payload, row = await _active_refresh_row(session, raw_token)

    user = await session.get(User, row.user_id)
    if user is None or not user.is_active or user.deleted_at is not None:
        raise AuthenticationError("User not found or inactive", code="user_inactive")

    settings = get_settings()
    return AuthTokens(
        access_token=create_access_token(user.id, user.tenant_id, user.email, user.role),
        refresh_token=raw_token,
        expires_in=settings.access_token_expire_minutes * 60,
    )


async def logout(session: AsyncSession, raw_token: str) -> None:
    """Revoke a refresh token. Unknown or invalid tokens are ignored."""
    try:
        payload = decode_refresh_token(raw_token)
        token_id = uuid.UUID(payload["jti"])
    except (JWTError, KeyError, ValueError):
        logger.warning("Logout with invalid token attempted")
        return

    await session.execute(
        update(RefreshToken).where(RefreshToken.id == token_id).values(revoked=True)
    )
    await session.commit()
    logger.info("User logged out", extra={"user_id": payload.get("sub")})
