"""
School Units Router

API endpoints for browsing and maintaining school units and their
homologation history. Every endpoint requires an authenticated session;
writes are rate limited per user.

Endpoints:
- GET /school_units - Cursor-paginated list
- POST /school_units - Create a unit
- GET /school_units/{id} - Unit detail with recent homologation history
- PUT /school_units/{id} - Partial update
- DELETE /school_units/{id} - Physical delete
- GET /school_units/{id}/homologations - Full history, newest first (empty for unknown units)
- POST /school_units/{id}/homologations - Append a homologation event
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_registry.core.auth import CurrentUser, get_current_user
from school_registry.core.database import get_db
from school_registry.core.rate_limit import mutation_rate_limit
from school_registry.modules.school_units import service
from school_registry.modules.school_units.schemas import (
    DeleteResponse,
    HomologationCreate,
    HomologationListResponse,
    HomologationResponse,
    SchoolUnitCreate,
    SchoolUnitDetailResponse,
    SchoolUnitListResponse,
    SchoolUnitResponse,
    SchoolUnitUpdate,
)
from school_registry.modules.shared.errors import ServiceError

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/school_units",
    tags=["School Units"],
    dependencies=[Depends(get_current_user)],
)


# ============================================
# Helper Functions
# ============================================


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


# ============================================
# Listing & Detail
# ============================================


@router.get(
    "",
    response_model=SchoolUnitListResponse,
    summary="List School Units",
    description="""
Cursor-paginated list of school units.

- `pageSize`: rows per page (default 50, max 100; invalid values use the default)
- `cursor`: `nextCursor` from the previous page
- `order`: `asc` (default) or `desc` on id
""",
)
async def list_school_units(
    page_size: str | None = Query(None, alias="pageSize"),
    cursor: str | None = Query(None),
    order: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
) -> SchoolUnitListResponse:
    try:
        return await service.list_school_units(db, page_size, cursor, order)
    except ServiceError as e:
        _handle_service_error(e)
    except Exception as e:
        logger.exception(f"Unexpected error listing school units: {e}")
        raise _internal_error() from e


@router.get(
    "/{unit_id}",
    response_model=SchoolUnitDetailResponse,
    summary="Get School Unit",
    responses={404: {"description": "School unit not found"}},
)
async def get_school_unit(
    unit_id: int,
    db: AsyncSession = Depends(get_db),
) -> SchoolUnitDetailResponse:
    try:
        detail = await service.get_school_unit_detail(db, unit_id)
        return SchoolUnitDetailResponse(data=detail)
    except ServiceError as e:
        _handle_service_error(e)
    except Exception as e:
        logger.exception(f"Unexpected error loading school unit {unit_id}: {e}")
        raise _internal_error() from e


# ============================================
# Mutations
# ============================================


@router.post(
    "",
    response_model=SchoolUnitResponse,
    summary="Create School Unit",
    dependencies=[Depends(mutation_rate_limit)],
    responses={400: {"description": "Missing or invalid fields"}},
)
async def create_school_unit(
    data: SchoolUnitCreate,
    db: AsyncSession = Depends(get_db),
) -> SchoolUnitResponse:
    try:
        summary = await service.create_school_unit(db, data)
        return SchoolUnitResponse(data=summary)
    except ServiceError as e:
        _handle_service_error(e)
    except Exception as e:
        logger.exception(f"Unexpected error creating school unit: {e}")
        raise _internal_error() from e


@router.put(
    "/{unit_id}",
    response_model=SchoolUnitResponse,
    summary="Update School Unit",
    dependencies=[Depends(mutation_rate_limit)],
    responses={
        400: {"description": "Invalid id or body"},
        404: {"description": "School unit not found"},
    },
)
async def update_school_unit(
    unit_id: int,
    data: SchoolUnitUpdate,
    db: AsyncSession = Depends(get_db),
) -> SchoolUnitResponse:
    try:
        summary = await service.update_school_unit(db, unit_id, data)
        return SchoolUnitResponse(data=summary)
    except ServiceError as e:
        _handle_service_error(e)
    except Exception as e:
        logger.exception(f"Unexpected error updating school unit {unit_id}: {e}")
        raise _internal_error() from e


@router.delete(
    "/{unit_id}",
    response_model=DeleteResponse,
    summary="Delete School Unit",
    dependencies=[Depends(mutation_rate_limit)],
    responses={404: {"description": "School unit not found"}},
)
async def delete_school_unit(
    unit_id: int,
    db: AsyncSession = Depends(get_db),
) -> DeleteResponse:
    try:
        await service.delete_school_unit(db, unit_id)
        return DeleteResponse(ok=True)
    except ServiceError as e:
        _handle_service_error(e)
    except Exception as e:
        logger.exception(f"Unexpected error deleting school unit {unit_id}: {e}")
        raise _internal_error() from e


# ============================================
# Homologation
# ============================================


@router.get(
    "/{unit_id}/homologations",
    response_model=HomologationListResponse,
    summary="List Homologation History",
)
async def list_homologations(
    unit_id: int,
    db: AsyncSession = Depends(get_db),
) -> HomologationListResponse:
    try:
        events = await service.list_homologations(db, unit_id)
        return HomologationListResponse(data=events)
    except ServiceError as e:
        _handle_service_error(e)
    except Exception as e:
        logger.exception(f"Unexpected error listing homologations for {unit_id}: {e}")
        raise _internal_error() from e


@router.post(
    "/{unit_id}/homologations",
    response_model=HomologationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record Homologation",
    description="""
Append a homologation event.

- `HOMOLOGATED`: reason optional
- `UNHOMOLOGATED`: reason required

`performedBy` defaults to the caller's email.
""",
    dependencies=[Depends(mutation_rate_limit)],
    responses={
        400: {"description": "Invalid action or missing reason"},
        404: {"description": "School unit not found"},
        409: {"description": "Action does not toggle the current state (strict mode)"},
    },
)
async def record_homologation(
    unit_id: int,
    data: HomologationCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> HomologationResponse:
    try:
        event = await service.record_homologation(db, unit_id, data, actor=user)
        return HomologationResponse(data=event)
    except ServiceError as e:
        _handle_service_error(e)
    except Exception as e:
        logger.exception(f"Unexpected error recording homologation for {unit_id}: {e}")
        raise _internal_error() from e
