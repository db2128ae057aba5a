"""
Catalog Service

Lookup lists for the school unit forms. Ids are returned as strings.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from school_registry.modules.catalog import repository
from school_registry.modules.catalog.schemas import LookupItem
from school_registry.modules.shared.errors import StoreError, ValidationError

logger = logging.getLogger(__name__)


def _to_lookup(rows) -> list[LookupItem]:
    return [LookupItem(id=str(row.id), name=row.name) for row in rows]


async def list_ntes(db: AsyncSession) -> list[LookupItem]:
    """All NTEs as lookup items."""
    try:
        ntes = await repository.list_ntes(db)
    except SQLAlchemyError as e:
        logger.exception(f"Failed to load NTEs: {e}")
        raise StoreError() from e
    return _to_lookup(ntes)


async def list_municipalities(db: AsyncSession, nte_id: str | None) -> list[LookupItem]:
    """
    Municipalities of one NTE.

    A missing `nte_id` yields an empty list rather than an error, so a form
    can render the municipality select before an NTE is chosen.

    Raises:
        ValidationError: If `nte_id` is not an integer
    """
    if nte_id is None or nte_id.strip() == "":
        return []

    try:
        parsed_id = int(nte_id)
    except ValueError as e:
        logger.warning(f"Rejected municipalities lookup with nteId={nte_id!r}")
        raise ValidationError("Invalid nteId") from e

    try:
        municipalities = await repository.list_municipalities_by_nte(db, parsed_id)
    except SQLAlchemyError as e:
        logger.exception(f"Failed to load municipalities for NTE {parsed_id}: {e}")
        raise StoreError() from e
    return _to_lookup(municipalities)


async def list_typologies(db: AsyncSession) -> list[LookupItem]:
    """All typologies as lookup items."""
    try:
        typologies = await repository.list_typologies(db)
    except SQLAlchemyError as e:
        logger.exception(f"Failed to load typologies: {e}")
        raise StoreError() from e
    return _to_lookup(typologies)
