"""
School Units Repository

Database operations for school units and their homologation events.
Only data access lives here; parsing, defaults and error mapping belong to
the service.

Listing uses keyset pagination on the primary key: the cursor is the id of
the last row already returned, and the next page starts strictly after it.
"""

from typing import Any

from sqlalchemy import Select, delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from school_registry.modules.catalog.models import Municipality

from .helpers import ORDER_DESC
from .models import Homologation, HomologationAction, SchoolUnit


def _with_relations(query: Select) -> Select:
    return query.options(
        selectinload(SchoolUnit.municipality).selectinload(Municipality.nte),
        selectinload(SchoolUnit.typology),
    )


def build_page_query(cursor: int | None, order: str, limit: int) -> Select:
    """
    Build the keyset query for one page.

    Args:
        cursor: Id of the last row of the previous page, or None for the first page
        order: "asc" or "desc" on id
        limit: Number of rows to fetch (page size + 1 to detect a next page)
    """
    query = _with_relations(select(SchoolUnit))

    if order == ORDER_DESC:
        if cursor is not None:
            query = query.where(SchoolUnit.id < cursor)
        query = query.order_by(SchoolUnit.id.desc())
    else:
        if cursor is not None:
            query = query.where(SchoolUnit.id > cursor)
        query = query.order_by(SchoolUnit.id.asc())

    return query.limit(limit)


async def list_page(db: AsyncSession, cursor: int | None, order: str, limit: int) -> list[SchoolUnit]:
    """Fetch up to `limit` units after `cursor` with their relations loaded."""
    result = await db.execute(build_page_query(cursor, order, limit))
    return list(result.scalars().all())


async def get_by_id(db: AsyncSession, unit_id: int) -> SchoolUnit | None:
    """Get a unit with municipality, NTE and typology loaded."""
    query = (
        _with_relations(select(SchoolUnit))
        .where(SchoolUnit.id == unit_id)
        .execution_options(populate_existing=True)
    )
    result = await db.execute(query)
    return result.scalars().first()


async def exists(db: AsyncSession, unit_id: int) -> bool:
    result = await db.execute(select(SchoolUnit.id).where(SchoolUnit.id == unit_id))
    return result.scalar_one_or_none() is not None


async def create(db: AsyncSession, fields: dict[str, Any]) -> SchoolUnit:
    """
    Insert a new unit.

    Returns:
        The stored unit, reloaded with its relations
    """
    unit = SchoolUnit(**fields)
    db.add(unit)
    await db.commit()

    return await get_by_id(db, unit.id)


async def update(db: AsyncSession, unit: SchoolUnit, changes: dict[str, Any]) -> SchoolUnit:
    """Apply `changes` to an existing unit and reload it with its relations."""
    for field, value in changes.items():
        setattr(unit, field, value)

    await db.commit()

    return await get_by_id(db, unit.id)


async def delete_by_id(db: AsyncSession, unit_id: int) -> bool:
    """
    Physically delete a unit. Its events are removed by the FK cascade.

    Returns:
        True if a row was deleted, False if none matched
    """
    result = await db.execute(delete(SchoolUnit).where(SchoolUnit.id == unit_id))
    await db.commit()
    return result.rowcount > 0


# ============================================
# Homologation events
# ============================================


def build_history_query(unit_id: int, limit: int | None = None) -> Select:
    """Events of one unit, newest first. Ties on created_at go to the higher id."""
    query = (
        select(Homologation)
        .where(Homologation.school_unit_id == unit_id)
        .order_by(Homologation.created_at.desc(), Homologation.id.desc())
    )
    if limit is not None:
        query = query.limit(limit)
    return query


async def list_homologations(
    db: AsyncSession,
    unit_id: int,
    limit: int | None = None,
) -> list[Homologation]:
    result = await db.execute(build_history_query(unit_id, limit))
    return list(result.scalars().all())


async def get_latest_homologation(db: AsyncSession, unit_id: int) -> Homologation | None:
    events = await list_homologations(db, unit_id, limit=1)
    return events[0] if events else None


async def create_homologation(
    db: AsyncSession,
    unit_id: int,
    action: HomologationAction,
    reason: str | None,
    performed_by: str | None,
) -> Homologation:
    """Append an event. created_at is assigned by the database."""
    event = Homologation(
        school_unit_id=unit_id,
        action=action,
        reason=reason,
        performed_by=performed_by,
    )
    db.add(event)
    await db.commit()
    await db.refresh(event)

    return event
