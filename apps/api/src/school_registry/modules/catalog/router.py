"""
Catalog Router

Lookup endpoints feeding the school unit forms. Each returns a bare list of
`{id, name}` items with string ids.

Endpoints:
- GET /ntes - All NTEs
- GET /municipalities?nteId= - Municipalities of one NTE (empty without nteId)
- GET /typologies - All typologies
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_registry.core.auth import get_current_user
from school_registry.core.database import get_db
from school_registry.modules.catalog import service
from school_registry.modules.catalog.schemas import LookupItem
from school_registry.modules.shared.errors import ServiceError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Lookups"], dependencies=[Depends(get_current_user)])


def _handle_service_error(e: ServiceError) -> None:
    """Convert service errors to HTTPExceptions."""
    raise HTTPException(
        status_code=e.status_code,
        detail={
            "error": e.error_code,
            "message": e.message,
        },
    ) from e


def _internal_error() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred. Please try again later.",
        },
    )


@router.get("/ntes", response_model=list[LookupItem], summary="List NTEs")
async def list_ntes(db: AsyncSession = Depends(get_db)) -> list[LookupItem]:
    try:
        return await service.list_ntes(db)
    except ServiceError as e:
        _handle_service_error(e)
    except Exception as e:
        logger.exception(f"Unexpected error listing NTEs: {e}")
        raise _internal_error() from e


@router.get(
    "/municipalities",
    response_model=list[LookupItem],
    summary="List Municipalities of an NTE",
    responses={400: {"description": "nteId is not an integer"}},
)
async def list_municipalities(
    nte_id: str | None = Query(None, alias="nteId"),
    db: AsyncSession = Depends(get_db),
) -> list[LookupItem]:
    try:
        return await service.list_municipalities(db, nte_id)
    except ServiceError as e:
        _handle_service_error(e)
    except Exception as e:
        logger.exception(f"Unexpected error listing municipalities: {e}")
        raise _internal_error() from e


@router.get("/typologies", response_model=list[LookupItem], summary="List Typologies")
async def list_typologies(db: AsyncSession = Depends(get_db)) -> list[LookupItem]:
    try:
        return await service.list_typologies(db)
    except ServiceError as e:
        _handle_service_error(e)
    except Exception as e:
        logger.exception(f"Unexpected error listing typologies: {e}")
        raise _internal_error() from e
