"""Parts catalog operations inside one tenant namespace."""

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.errors import ConflictError
from app.models.base import utcnow
from app.models.inventory import InventoryItem, JobPart
from app.models.part import Part, PartCreate, PartUpdate
from app.services.common import (
    count_where,
    get_live_or_404,
    paginate,
    search_clause,
    update_values,
)

logger = logging.getLogger(__name__)


@dataclass
class PartDetail:
    part: Part
    inventory: list[InventoryItem]


async def _ensure_part_number_free(
    session: AsyncSession, part_number: str, exclude_id: uuid.UUID | None = None
) -> None:
    stmt = select(Part.id).where(Part.part_number == part_number, Part.deleted_at.is_(None))  # type: ignore[union-attr]
    if exclude_id is not None:
        stmt = stmt.where(Part.id != exclude_id)
    if (await session.execute(stmt)).first() is not None:
        raise ConflictError("Part with this part number already exists", code="duplicate_part_number")


async def list_parts(
    session: AsyncSession,
    *,
    category: str | None = None,
    manufacturer: str | None = None,
    search: str | None = None,
    is_active: bool | None = None,
    limit: int = 50,
    offset: int = 0,
) -> tuple[list[Part], int]:
    stmt = select(Part).where(Part.deleted_at.is_(None))  # type: ignore[union-attr]
    if category:
        stmt = stmt.where(Part.category == category)
    if manufacturer:
        stmt = stmt.where(Part.manufacturer.ilike(f"%{manufacturer}%"))  # type: ignore[union-attr]
    if is_active is not None:
        stmt = stmt.where(Part.is_active.is_(is_active))  # type: ignore[attr-defined]
    if search:
        stmt = stmt.where(
            search_clause(
                search, Part.name, Part.part_number, Part.description, Part.manufacturer_part_number
            )
        )
    stmt = stmt.order_by(Part.name.asc())  # type: ignore[attr-defined]
    return await paginate(session, stmt, limit, offset)


async def get_part(session: AsyncSession, part_id: uuid.UUID) -> PartDetail:
    part = await get_live_or_404(session, Part, part_id, "Part")
    levels = await session.execute(
        select(InventoryItem)
        .where(InventoryItem.part_id == part_id, InventoryItem.deleted_at.is_(None))  # type: ignore[union-attr]
        .order_by(InventoryItem.location)
    )
    return PartDetail(part=part, inventory=list(levels.scalars().all()))


async def create_part(session: AsyncSession, body: PartCreate) -> Part:
    if body.part_number:
        await _ensure_part_number_free(session, body.part_number)

    part = Part(**body.model_dump())
    session.add(part)
    await session.commit()
    await session.refresh(part)

    logger.info("Part created: %s", part.id)
    return part


async def update_part(session: AsyncSession, part_id: uuid.UUID, body: PartUpdate) -> Part:
    part = await get_live_or_404(session, Part, part_id, "Part")
    update_data = update_values(part, body)

    new_number = update_data.get("part_number")
    if new_number and new_number != part.part_number:
        await _ensure_part_number_free(session, new_number, exclude_id=part_id)

    for key, value in update_data.items():
        setattr(part, key, value)
    part.updated_at = utcnow()

    session.add(part)
    await session.commit()
    await session.refresh(part)

    logger.info("Part updated: %s", part_id)
    return part


async def delete_part(session: AsyncSession, part_id: uuid.UUID) -> None:
    part = await get_live_or_404(session, Part, part_id, "Part")

    stocked = await count_where(
        session,
        InventoryItem,
        InventoryItem.part_id == part_id,
        InventoryItem.deleted_at.is_(None),  # type: ignore[union-attr]
    )
    if stocked:
        raise ConflictError(
            "Cannot delete part that has inventory items. Deactivate instead.",
            code="part_has_inventory",
        )

    if await count_where(session, JobPart, JobPart.part_id == part_id):
        raise ConflictError(
            "Cannot delete part that has been used in jobs. Deactivate instead.",
            code="part_used_in_jobs",
        )

    part.deleted_at = utcnow()
    session.add(part)
    await session.commit()
    logger.info("Part deleted: %s", part_id)
