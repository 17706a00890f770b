"""Query helpers shared by the tenant domain services."""

import uuid
from typing import Any, TypeVar

from pydantic import BaseModel
from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select
from sqlmodel.sql.expression import SelectOfScalar

from app.core.errors import NotFoundError, ValidationFailedError

ModelT = TypeVar("ModelT", bound=SQLModel)

DEFAULT_LIMIT = 50
MAX_LIMIT = 100


async def get_live(
    session: AsyncSession, model: type[ModelT], obj_id: uuid.UUID
) -> ModelT | None:
    """Fetch a row by id, treating soft-deleted rows as missing."""
    stmt = select(model).where(model.id == obj_id, model.deleted_at.is_(None))  # type: ignore[attr-defined]
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_live_or_404(
    session: AsyncSession, model: type[ModelT], obj_id: uuid.UUID, label: str
) -> ModelT:
    obj = await get_live(session, model, obj_id)
    if obj is None:
        raise NotFoundError(f"{label} not found")
    return obj


async def paginate(
    session: AsyncSession,
    stmt: SelectOfScalar,
    limit: int,
    offset: int,
) -> tuple[list[Any], int]:
    """Run *stmt* for one page and count all rows it would match."""
    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    total = (await session.execute(count_stmt)).scalar_one()
    result = await session.execute(stmt.limit(limit).offset(offset))
    return list(result.scalars().all()), total


async def count_where(session: AsyncSession, model: type[SQLModel], *criteria) -> int:
    stmt = select(func.count()).select_from(model).where(*criteria)
    return (await session.execute(stmt)).scalar_one()


def search_clause(term: str, *columns):
    """Case-insensitive substring match on any of *columns*."""
    pattern = f"%{term}%"
    return or_(*(col.ilike(pattern) for col in columns))


def update_values(obj: SQLModel, body: BaseModel) -> dict[str, Any]:
    """Fields the client sent in a PATCH body.

    An explicit ``null`` is accepted only for nullable columns; for the rest
    it is rejected up front rather than failing on the NOT NULL constraint.
    """
    data = body.model_dump(exclude_unset=True)
    columns = type(obj).__table__.columns  # type: ignore[attr-defined]
    rejected = sorted(
        key
        for key, value in data.items()
        if value is None and key in columns and not columns[key].nullable
    )
    if rejected:
        raise ValidationFailedError(
            "Fields cannot be cleared",
            code="field_not_nullable",
            errors=[f"{key} cannot be null" for key in rejected],
        )
    return data
