"""Inventory stock, transfers and job allocations inside one tenant namespace.

Stock counters are only ever changed with conditional UPDATE statements so
concurrent requests cannot push ``quantity_allocated`` above
``quantity_on_hand`` or transfer stock that is already promised to a job.
Allocation, deallocation and transfer each run in a single transaction.
"""

import logging
import uuid

from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.errors import ConflictError, NotFoundError, ValidationFailedError
from app.core.pricing import add_money, calc_job_total, line_subtotal, sub_money
from app.models.base import utcnow
from app.models.inventory import (
    InventoryAllocate,
    InventoryCreate,
    InventoryItem,
    InventoryTransfer,
    InventoryUpdate,
    JobPart,
)
from app.models.job import Job
from app.models.part import Part
from app.services.common import get_live_or_404, search_clause, update_values

logger = logging.getLogger(__name__)

_live = InventoryItem.deleted_at.is_(None)  # type: ignore[union-attr]


async def _item_at(session: AsyncSession, part_id: uuid.UUID, location: str) -> InventoryItem | None:
    stmt = select(InventoryItem).where(
        InventoryItem.part_id == part_id, InventoryItem.location == location, _live
    )
    return (await session.execute(stmt)).scalar_one_or_none()


async def _lock_job(session: AsyncSession, job_id: uuid.UUID, *, live_only: bool = True) -> Job:
    stmt = select(Job).where(Job.id == job_id).with_for_update()
    if live_only:
        stmt = stmt.where(Job.deleted_at.is_(None))  # type: ignore[union-attr]
    job = (await session.execute(stmt)).scalar_one_or_none()
    if job is None:
        raise NotFoundError("Job not found")
    return job


def _apply_parts_total(job: Job, parts_total: float) -> None:
    job.parts_total = parts_total
    job.total = calc_job_total(
        job.labor_minutes, job.labor_rate, job.parts_total, job.tax_rate, job.discount_amount
    )
    job.updated_at = utcnow()


# ── Stock ─────────────────────────────────────────────────────

async def list_inventory(
    session: AsyncSession,
    *,
    part_id: uuid.UUID | None = None,
    location: str | None = None,
    low_stock: bool = False,
    search: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> tuple[list[tuple[InventoryItem, Part]], int]:
    stmt = select(InventoryItem, Part).join(Part, InventoryItem.part_id == Part.id).where(_live)
    if part_id:
        stmt = stmt.where(InventoryItem.part_id == part_id)
    if location:
        stmt = stmt.where(InventoryItem.location.ilike(f"%{location}%"))  # type: ignore[attr-defined]
    if low_stock:
        stmt = stmt.where(InventoryItem.quantity_on_hand <= Part.reorder_point)
    if search:
        stmt = stmt.where(
            search_clause(
                search, Part.name, Part.part_number, InventoryItem.location, InventoryItem.bin_location
            )
        )

    count_stmt = select(func.count()).select_from(stmt.subquery())
    total = (await session.execute(count_stmt)).scalar_one()

    stmt = stmt.order_by(InventoryItem.location.asc(), Part.name.asc())  # type: ignore[attr-defined]
    result = await session.execute(stmt.limit(limit).offset(offset))
    return [(item, part) for item, part in result.all()], total


async def get_inventory_item(
    session: AsyncSession, inventory_id: uuid.UUID
) -> tuple[InventoryItem, Part]:
    item = await get_live_or_404(session, InventoryItem, inventory_id, "Inventory item")
    part = await session.get(Part, item.part_id)
    return item, part


async def add_inventory(session: AsyncSession, body: InventoryCreate) -> tuple[InventoryItem, Part]:
    part = await get_live_or_404(session, Part, body.part_id, "Part")

    if await _item_at(session, body.part_id, body.location) is not None:
        raise ConflictError(
            "Inventory for this part already exists at this location. Use update instead.",
            code="duplicate_inventory",
        )

    item = InventoryItem(**body.model_dump(), quantity_allocated=0)
    session.add(item)
    await session.commit()
    await session.refresh(item)

    logger.info("Inventory added: %s (part %s at %s)", item.id, part.id, item.location)
    return item, part


async def update_inventory(
    session: AsyncSession, inventory_id: uuid.UUID, body: InventoryUpdate
) -> tuple[InventoryItem, Part]:
    item = await get_live_or_404(session, InventoryItem, inventory_id, "Inventory item")
    update_data = update_values(item, body)

    new_on_hand = update_data.get("quantity_on_hand")
    if new_on_hand is not None:
        if new_on_hand < item.quantity_allocated:
            raise ConflictError(
                f"Quantity on hand cannot drop below allocated quantity ({item.quantity_allocated})",
                code="below_allocated",
            )
        if new_on_hand > item.quantity_on_hand:
            item.last_restocked_at = utcnow()

    for key, value in update_data.items():
        setattr(item, key, value)
    item.updated_at = utcnow()

    session.add(item)
    await session.commit()
    await session.refresh(item)

    logger.info("Inventory updated: %s", inventory_id)
    return item, await session.get(Part, item.part_id)


async def transfer_inventory(
    session: AsyncSession, body: InventoryTransfer
) -> tuple[InventoryItem, InventoryItem]:
    """Move available stock to another location. Returns (source, destination)."""
    source = await get_live_or_404(session, InventoryItem, body.from_inventory_id, "Source inventory")
    if body.to_location == source.location:
        raise ValidationFailedError(
            "Source and destination locations are the same", code="same_location"
        )

    result = await session.execute(
        update(InventoryItem)
        .where(
            InventoryItem.id == source.id,
            _live,
            InventoryItem.quantity_on_hand - InventoryItem.quantity_allocated >= body.quantity,
        )
        .values(
            quantity_on_hand=InventoryItem.quantity_on_hand - body.quantity,
            updated_at=utcnow(),
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        available = source.quantity_on_hand - source.quantity_allocated
        await session.rollback()
        raise ConflictError(
            f"Insufficient available inventory. Available: {available}, requested: {body.quantity}",
            code="insufficient_inventory",
        )

    destination = await _item_at(session, source.part_id, body.to_location)
    if destination is not None:
        await session.execute(
            update(InventoryItem)
            .where(InventoryItem.id == destination.id)
            .values(
                quantity_on_hand=InventoryItem.quantity_on_hand + body.quantity,
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
    else:
        destination = InventoryItem(
            part_id=source.part_id,
            location=body.to_location,
            quantity_on_hand=body.quantity,
            quantity_allocated=0,
            notes=body.notes,
        )
        session.add(destination)

    await session.commit()
    await session.refresh(source)
    await session.refresh(destination)

    logger.info(
        "Inventory transferred: %d of part %s from %s to %s",
        body.quantity,
        source.part_id,
        source.location,
        body.to_location,
    )
    return source, destination


async def delete_inventory(session: AsyncSession, inventory_id: uuid.UUID) -> None:
    item = await get_live_or_404(session, InventoryItem, inventory_id, "Inventory item")

    if item.quantity_allocated > 0:
        raise ConflictError(
            "Cannot delete inventory with allocated quantity. Deallocate first.",
            code="inventory_allocated",
        )

    item.deleted_at = utcnow()
    session.add(item)
    await session.commit()
    logger.info("Inventory deleted: %s", inventory_id)


# ── Job allocations ───────────────────────────────────────────

async def allocate_inventory(
    session: AsyncSession, body: InventoryAllocate
) -> tuple[JobPart, Part]:
    """Reserve stock for a job and add it as a priced job part."""
    part = await get_live_or_404(session, Part, body.part_id, "Part")
    item = await _item_at(session, body.part_id, body.location)
    if item is None:
        raise NotFoundError("Inventory not found for this part at this location")
    job = await _lock_job(session, body.job_id)

    result = await session.execute(
        update(InventoryItem)
        .where(
            InventoryItem.id == item.id,
            _live,
            InventoryItem.quantity_allocated + body.quantity <= InventoryItem.quantity_on_hand,
        )
        .values(
            quantity_allocated=InventoryItem.quantity_allocated + body.quantity,
            updated_at=utcnow(),
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        available = item.quantity_on_hand - item.quantity_allocated
        await session.rollback()
        raise ConflictError(
            f"Insufficient available inventory. Available: {available}, requested: {body.quantity}",
            code="insufficient_inventory",
        )

    unit_price = part.default_price or 0
    job_part = JobPart(
        job_id=job.id,
        part_id=part.id,
        inventory_item_id=item.id,
        quantity=body.quantity,
        unit_cost=part.default_cost or 0,
        unit_price=unit_price,
        subtotal=line_subtotal(unit_price, body.quantity),
    )
    session.add(job_part)
    _apply_parts_total(job, add_money(job.parts_total, job_part.subtotal))
    session.add(job)

    await session.commit()
    await session.refresh(job_part)

    logger.info(
        "Inventory allocated to job %s: %d of part %s",
        job.id,
        body.quantity,
        part.id,
    )
    return job_part, part


async def deallocate_inventory(session: AsyncSession, job_part_id: uuid.UUID) -> None:
    """Exact inverse of allocate: release stock, drop the line, restore totals."""
    job_part = await session.get(JobPart, job_part_id)
    if job_part is None:
        raise NotFoundError("Job part not found")
    job = await _lock_job(session, job_part.job_id, live_only=False)

    if job_part.inventory_item_id is not None:
        result = await session.execute(
            update(InventoryItem)
            .where(
                InventoryItem.id == job_part.inventory_item_id,
                InventoryItem.quantity_allocated >= job_part.quantity,
            )
            .values(
                quantity_allocated=InventoryItem.quantity_allocated - job_part.quantity,
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            logger.error(
                "Allocation mismatch releasing job part %s from inventory item %s",
                job_part_id,
                job_part.inventory_item_id,
            )
            await session.rollback()
            raise ConflictError(
                "Stock record no longer holds this allocation", code="allocation_mismatch"
            )

    quantity, part_id = job_part.quantity, job_part.part_id
    _apply_parts_total(job, sub_money(job.parts_total, job_part.subtotal))
    session.add(job)
    await session.delete(job_part)
    await session.commit()

    logger.info(
        "Inventory deallocated from job %s: %d of part %s", job.id, quantity, part_id
    )
