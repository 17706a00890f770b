"""Refresh token model — persisted so refresh tokens can be revoked."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from app.models.base import TimestampMixin, new_uuid


class RefreshToken(TimestampMixin, SQLModel, table=True):
    __tablename__ = "refresh_tokens"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    user_id: uuid.UUID = Field(
        foreign_key="users.id", ondelete="CASCADE", nullable=False, index=True,
    )

    # SHA-256 of the signed token; the raw token is only ever returned once
    token_hash: str = Field(max_length=64, nullable=False, unique=True, index=True)

    expires_at: datetime = Field(sa_type=DateTime(timezone=True), nullable=False)
    revoked: bool = Field(default=False)
