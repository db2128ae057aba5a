"""
School Units Service Layer

Business logic for school units and their homologation history.

This module implements:
1. Listing:
   - Keyset pagination on id with a configurable page size (capped)
   - Flattened summary rows with empty strings for missing relations

2. Mutations:
   - Create / partial update / physical delete
   - Typology resolution by id or exact name; unresolvable references are ignored
   - Municipality references must point at an existing municipality

3. Homologation:
   - Append-only event log, newest event is the current approval state
   - UNHOMOLOGATED requires a reason
   - Optional strict mode rejecting actions that do not toggle the current state

Database failures are logged and surfaced as StoreError with a generic message.
"""

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from school_registry.core.auth import CurrentUser
from school_registry.core.config import settings
from school_registry.modules.catalog import repository as catalog_repository
from school_registry.modules.school_units import repository
from school_registry.modules.school_units.helpers import (
    current_homologation_state,
    expected_next_action,
    parse_cursor,
    parse_typology_ref,
    reason_is_missing,
    resolve_order,
    resolve_page_size,
    to_summary,
)
from school_registry.modules.school_units.models import STATUS_ACTIVE, HomologationAction
from school_registry.modules.school_units.schemas import (
    HomologationCreate,
    HomologationRead,
    SchoolUnitCreate,
    SchoolUnitDetail,
    SchoolUnitListResponse,
    SchoolUnitSummary,
    SchoolUnitUpdate,
)
from school_registry.modules.shared.errors import (
    ConflictError,
    NotFoundError,
    StoreError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Number of events embedded in the detail view
DETAIL_HISTORY_LIMIT = 20

RESOURCE_NAME = "School unit"


class ReasonRequiredError(ValidationError):
    """Raised when an UNHOMOLOGATED event is submitted without a reason."""

    def __init__(self):
        super().__init__("A reason is required to remove a homologation.")
        self.error_code = "REASON_REQUIRED"


class OutOfSequenceError(ConflictError):
    """Raised in strict mode when an action does not toggle the current state."""

    def __init__(self, current: str, expected: str):
        super().__init__(
            message=f"School unit is already {current}; expected action {expected}.",
            error_code="OUT_OF_SEQUENCE",
        )


# ============================================
# Internal helpers
# ============================================


async def _resolve_typology_id(db: AsyncSession, ref: int | str | None) -> int | None:
    """
    Resolve a typology reference to an existing typology id.

    Returns:
        The typology id, or None when the reference is blank or matches nothing
    """
    parsed = parse_typology_ref(ref)
    if parsed is None:
        return None

    if isinstance(parsed, int):
        typology = await catalog_repository.get_typology(db, parsed)
    else:
        typology = await catalog_repository.find_typology_by_name(db, parsed)

    if typology is None:
        logger.info(f"Typology reference {ref!r} did not match any typology; ignoring")
        return None
    return typology.id


async def _require_municipality(db: AsyncSession, municipality_id: int) -> None:
    municipality = await catalog_repository.get_municipality(db, municipality_id)
    if municipality is None:
        logger.warning(f"Rejected reference to unknown municipality {municipality_id}")
        raise ValidationError(f"Municipality {municipality_id} does not exist")


# ============================================
# Listing and detail
# ============================================


async def list_school_units(
    db: AsyncSession,
    page_size: str | None = None,
    cursor: str | None = None,
    order: str | None = None,
) -> SchoolUnitListResponse:
    """
    Return one page of school units.

    One extra row is fetched to tell whether another page follows; it is
    never returned.

    Raises:
        ValidationError: If the cursor is not an integer
        StoreError: If the database query fails
    """
    size = resolve_page_size(page_size)
    direction = resolve_order(order)
    after_id = parse_cursor(cursor)

    try:
        rows = await repository.list_page(db, after_id, direction, size + 1)
    except SQLAlchemyError as e:
        logger.exception(f"Failed to list school units: {e}")
        raise StoreError() from e

    has_next = len(rows) > size
    if has_next:
        rows = rows[:size]

    return SchoolUnitListResponse(
        data=[to_summary(unit) for unit in rows],
        next_cursor=str(rows[-1].id) if has_next else None,
        has_next=has_next,
    )


async def get_school_unit_detail(db: AsyncSession, unit_id: int) -> SchoolUnitDetail:
    """
    Unit summary plus relation ids, approval state and the latest events.

    Raises:
        NotFoundError: If the unit does not exist
        StoreError: If the database query fails
    """
    try:
        unit = await repository.get_by_id(db, unit_id)
        if unit is None:
            raise NotFoundError(RESOURCE_NAME, unit_id)
        history = await repository.list_homologations(db, unit_id, limit=DETAIL_HISTORY_LIMIT)
    except SQLAlchemyError as e:
        logger.exception(f"Failed to load school unit {unit_id}: {e}")
        raise StoreError() from e

    state = current_homologation_state(history)
    summary = to_summary(unit)

    return SchoolUnitDetail(
        **summary.model_dump(),
        uo_code=unit.uo_code,
        municipality_id=unit.municipality_id,
        nte_id=unit.municipality.nte_id if unit.municipality is not None else None,
        typology_id=unit.typology_id,
        homologation_state=state,
        homologated=state == HomologationAction.HOMOLOGATED,
        history=[HomologationRead.model_validate(event) for event in history],
    )


# ============================================
# Mutations
# ============================================


async def create_school_unit(db: AsyncSession, data: SchoolUnitCreate) -> SchoolUnitSummary:
    """
    Create a school unit.

    Raises:
        ValidationError: If the municipality does not exist
        StoreError: If the database operation fails
    """
    try:
        await _require_municipality(db, data.municipality)
        typology_id = await _resolve_typology_id(db, data.typology)

        fields: dict[str, Any] = {
            "name": data.name,
            "sec_code": data.sec_code if data.sec_code is not None else "",
            "uo_code": data.uo_code,
            "status": data.status if data.status is not None else STATUS_ACTIVE,
            "municipality_id": data.municipality,
            "typology_id": typology_id,
        }
        unit = await repository.create(db, fields)
    except SQLAlchemyError as e:
        logger.exception(f"Failed to create school unit: {e}")
        raise StoreError() from e

    logger.info(f"Created school unit {unit.id} ({unit.name})")
    return to_summary(unit)


async def update_school_unit(
    db: AsyncSession,
    unit_id: int,
    data: SchoolUnitUpdate,
) -> SchoolUnitSummary:
    """
    Apply a partial update. Fields absent from the request are left untouched.

    A blank or unresolvable typology reference keeps the current typology.

    Raises:
        NotFoundError: If the unit does not exist
        ValidationError: If the municipality does not exist
        StoreError: If the database operation fails
    """
    provided = data.model_dump(exclude_unset=True)

    try:
        unit = await repository.get_by_id(db, unit_id)
        if unit is None:
            raise NotFoundError(RESOURCE_NAME, unit_id)

        changes: dict[str, Any] = {}
        for field in ("name", "sec_code", "uo_code", "status"):
            if field in provided:
                changes[field] = provided[field]

        if provided.get("municipality") is not None:
            await _require_municipality(db, provided["municipality"])
            changes["municipality_id"] = provided["municipality"]

        if "typology" in provided:
            typology_id = await _resolve_typology_id(db, provided["typology"])
            if typology_id is not None:
                changes["typology_id"] = typology_id

        if not changes:
            return to_summary(unit)

        unit = await repository.update(db, unit, changes)
    except SQLAlchemyError as e:
        logger.exception(f"Failed to update school unit {unit_id}: {e}")
        raise StoreError() from e

    logger.info(f"Updated school unit {unit_id}: {sorted(changes)}")
    return to_summary(unit)


async def delete_school_unit(db: AsyncSession, unit_id: int) -> None:
    """
    Physically delete a unit and its homologation history.

    Raises:
        NotFoundError: If the unit does not exist (also on repeated deletes)
        StoreError: If the database operation fails
    """
    try:
        deleted = await repository.delete_by_id(db, unit_id)
    except SQLAlchemyError as e:
        logger.exception(f"Failed to delete school unit {unit_id}: {e}")
        raise StoreError() from e

    if not deleted:
        raise NotFoundError(RESOURCE_NAME, unit_id)

    logger.info(f"Deleted school unit {unit_id}")


# ============================================
# Homologation
# ============================================


async def list_homologations(db: AsyncSession, unit_id: int) -> list[HomologationRead]:
    """
    Full history of a unit, newest first.

    An unknown unit has no events, so the list is empty rather than an error.

    Raises:
        StoreError: If the database query fails
    """
    try:
        events = await repository.list_homologations(db, unit_id)
    except SQLAlchemyError as e:
        logger.exception(f"Failed to list homologations for unit {unit_id}: {e}")
        raise StoreError() from e

    return [HomologationRead.model_validate(event) for event in events]


async def record_homologation(
    db: AsyncSession,
    unit_id: int,
    data: HomologationCreate,
    actor: CurrentUser,
    enforce_sequence: bool | None = None,
) -> HomologationRead:
    """
    Append a homologation event.

    Args:
        db: Database session
        unit_id: Target unit
        data: Action, optional reason and optional performer
        actor: Authenticated caller; their email is the default performer
        enforce_sequence: Reject actions that do not toggle the current state.
            Defaults to the HOMOLOGATION_ENFORCE_SEQUENCE setting.

    Raises:
        ReasonRequiredError: If UNHOMOLOGATED comes without a reason
        NotFoundError: If the unit does not exist
        OutOfSequenceError: In strict mode, if the action repeats the current state
        StoreError: If the database operation fails
    """
    if reason_is_missing(data.action, data.reason):
        raise ReasonRequiredError()

    if enforce_sequence is None:
        enforce_sequence = settings.homologation_enforce_sequence

    reason = data.reason.strip() if data.reason and data.reason.strip() else None
    performed_by = (data.performed_by or "").strip() or actor.email or None

    try:
        if not await repository.exists(db, unit_id):
            raise NotFoundError(RESOURCE_NAME, unit_id)

        if enforce_sequence:
            latest = await repository.get_latest_homologation(db, unit_id)
            state = current_homologation_state([latest] if latest else [])
            expected = expected_next_action(state)
            if data.action != expected:
                raise OutOfSequenceError(state.value, expected.value)

        event = await repository.create_homologation(
            db,
            unit_id=unit_id,
            action=data.action,
            reason=reason,
            performed_by=performed_by,
        )
    except SQLAlchemyError as e:
        logger.exception(f"Failed to record homologation for unit {unit_id}: {e}")
        raise StoreError() from e

    logger.info(f"Recorded {data.action.value} for school unit {unit_id} by {performed_by}")
    return HomologationRead.model_validate(event)
