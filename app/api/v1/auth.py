"""Authentication endpoints — register, login, token refresh, logout, current user."""

import uuid

from fastapi import APIRouter, status
from pydantic import BaseModel, EmailStr, Field

from app.api.deps import Auth, Provisioner, Session
from app.core.errors import NotFoundError
from app.models.tenant import Tenant, TenantRead
from app.models.user import User, UserRead
from app.services import registration
from app.services.registration import AuthResult, AuthTokens

router = APIRouter(prefix="/auth", tags=["auth"])


# ── Schemas ──────────────────────────────────────────────────

class RegisterRequest(BaseModel):
    business_name: str = Field(min_length=1, max_length=255)
    slug: str = Field(min_length=1, max_length=100, pattern=r"^[a-z0-9\-]+$")
    contact_email: EmailStr
    contact_phone: str | None = Field(default=None, max_length=50)
    full_name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str


class LoginRequest(BaseModel):
    email: EmailStr
    password: str
    tenant_id: uuid.UUID | None = None


class RefreshRequest(BaseModel):
    refresh_token: str


class AuthResponse(BaseModel):
    user: UserRead
    tenant: TenantRead
    tokens: AuthTokens


class MeResponse(BaseModel):
    user: UserRead
    tenant: TenantRead


def _to_response(result: AuthResult) -> AuthResponse:
    return AuthResponse(
        user=UserRead.model_validate(result.user),
        tenant=TenantRead.model_validate(result.tenant),
        tokens=result.tokens,
    )


# ── Routes ───────────────────────────────────────────────────

@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, session: Session, provisioner: Provisioner) -> AuthResponse:
    """Create a tenant with its owner account and provision its workspace."""
    result = await registration.register(session, provisioner, **body.model_dump())
    return _to_response(result)


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, session: Session) -> AuthResponse:
    """Authenticate with email + password, receive access and refresh tokens."""
    result = await registration.login(
        session, email=body.email, password=body.password, tenant_id=body.tenant_id
    )
    return _to_response(result)


@router.post("/refresh", response_model=AuthTokens)
async def refresh(body: RefreshRequest, session: Session) -> AuthTokens:
    return await registration.refresh(session, body.refresh_token)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(body: RefreshRequest, session: Session) -> None:
    await registration.logout(session, body.refresh_token)


@router.get("/me", response_model=MeResponse)
async def get_me(auth: Auth, session: Session) -> MeResponse:
    """Return the current authenticated user and their tenant."""
    user = await session.get(User, auth.user_id)
    if user is None or user.deleted_at is not None:
        raise NotFoundError("User not found")

    tenant = await session.get(Tenant, auth.tenant_id)
    if tenant is None or tenant.deleted_at is not None:
        raise NotFoundError("Tenant not found")

    return MeResponse(
        user=UserRead.model_validate(user),
        tenant=TenantRead.model_validate(tenant),
    )
