"""
Catalog Repository

Read-only queries over NTEs, municipalities and typologies.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Municipality, Nte, Typology


async def list_ntes(db: AsyncSession) -> list[Nte]:
    """All NTEs ordered by name."""
    result = await db.execute(select(Nte).order_by(Nte.name, Nte.id))
    return list(result.scalars().all())


async def list_municipalities_by_nte(db: AsyncSession, nte_id: int) -> list[Municipality]:
    """Municipalities belonging to one NTE, ordered by name."""
    result = await db.execute(
        select(Municipality)
        .where(Municipality.nte_id == nte_id)
        .order_by(Municipality.name, Municipality.id)
    )
    return list(result.scalars().all())


async def get_municipality(db: AsyncSession, municipality_id: int) -> Municipality | None:
    return await db.get(Municipality, municipality_id)


async def list_typologies(db: AsyncSession) -> list[Typology]:
    """All typologies ordered by name."""
    result = await db.execute(select(Typology).order_by(Typology.name, Typology.id))
    return list(result.scalars().all())


async def get_typology(db: AsyncSession, typology_id: int) -> Typology | None:
    return await db.get(Typology, typology_id)


async def find_typology_by_name(db: AsyncSession, name: str) -> Typology | None:
    """
    First typology whose name matches exactly (case-sensitive).

    Lowest id wins when several rows share a name.
    """
    result = await db.execute(
        select(Typology).where(Typology.name == name).order_by(Typology.id).limit(1)
    )
    return result.scalars().first()
