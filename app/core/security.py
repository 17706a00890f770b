"""Security utilities: password hashing and access / refresh tokens."""

import hashlib
import uuid
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import get_settings

settings = get_settings()

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

# ── Password hashing (Argon2) ────────────────────────────────

pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
    argon2__rounds=settings.password_hash_rounds,
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


# ── Refresh token hashing (SHA-256, deterministic for lookups) ─

def hash_refresh_token(raw_token: str) -> str:
    """One-way SHA-256 hash for refresh token storage.

    Refresh tokens are signed JWTs with high entropy, so a fast
    deterministic hash is enough and lets us look them up directly.
    """
    return hashlib.sha256(raw_token.encode()).hexdigest()


# ── JWT ───────────────────────────────────────────────────────

def create_access_token(
    user_id: uuid.UUID | str,
    tenant_id: uuid.UUID | str,
    email: str,
    role: str,
    expires_delta: timedelta | None = None,
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    payload = {
        "sub": str(user_id),
        "tid": str(tenant_id),
        "email": email,
        "role": str(role),
        "type": ACCESS_TOKEN_TYPE,
        "exp": expire,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_refresh_token(
    user_id: uuid.UUID | str,
    token_id: uuid.UUID | str,
    expires_at: datetime,
) -> str:
    payload = {
        "sub": str(user_id),
        "jti": str(token_id),
        "type": REFRESH_TOKEN_TYPE,
        "exp": expires_at,
    }
    return jwt.encode(
        payload, settings.refresh_token_secret_key, algorithm=settings.jwt_algorithm
    )


def decode_access_token(token: str) -> dict:
    """Decode and verify an access token. Raises jose.JWTError on failure."""
    payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise JWTError("Not an access token")
    return payload


def decode_refresh_token(token: str) -> dict:
    """Decode and verify a refresh token. Raises jose.JWTError on failure."""
    payload = jwt.decode(
        token, settings.refresh_token_secret_key, algorithms=[settings.jwt_algorithm]
    )
    if payload.get("type") != REFRESH_TOKEN_TYPE:
        raise JWTError("Not a refresh token")
    return payload
