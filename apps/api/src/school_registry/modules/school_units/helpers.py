"""
School Units Helpers

Pure functions shared by the service and its tests: listing parameter
parsing, typology reference parsing, summary projection and homologation
state derivation. None of them touch the database.
"""

from collections.abc import Sequence

from school_registry.core.config import settings
from school_registry.modules.school_units.models import (
    Homologation,
    HomologationAction,
    SchoolUnit,
)
from school_registry.modules.school_units.schemas import SchoolUnitSummary
from school_registry.modules.shared.errors import ValidationError

ORDER_ASC = "asc"
ORDER_DESC = "desc"


def resolve_page_size(raw: str | int | None) -> int:
    """
    Effective page size for a listing request.

    Absent, non-numeric, zero or negative values fall back to the default.
    Larger values are capped at the maximum.
    """
    if raw is None:
        return settings.default_page_size

    try:
        requested = int(raw)
    except (TypeError, ValueError):
        return settings.default_page_size

    if requested <= 0:
        return settings.default_page_size
    return min(requested, settings.max_page_size)


def resolve_order(raw: str | None) -> str:
    """'desc' (any case) sorts descending; everything else ascending."""
    if raw is not None and raw.strip().lower() == ORDER_DESC:
        return ORDER_DESC
    return ORDER_ASC


def parse_cursor(raw: str | None) -> int | None:
    """
    Parse the opaque cursor returned by a previous page.

    Raises:
        ValidationError: If the cursor is present but not an integer
    """
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError as e:
        raise ValidationError("Invalid cursor") from e


def parse_typology_ref(ref: int | str | None) -> int | str | None:
    """
    Classify a typology reference as an id (int) or a name (str).

    Numeric strings are ids. Blank references mean "no typology".
    """
    if ref is None or isinstance(ref, bool):
        return None
    if isinstance(ref, int):
        return ref

    value = ref.strip()
    if value == "":
        return None
    if value.lstrip("-").isdigit():
        return int(value)
    return value


def to_summary(unit: SchoolUnit) -> SchoolUnitSummary:
    """Flatten a unit and its loaded relations. Missing relations become ""."""
    municipality = unit.municipality
    nte = municipality.nte if municipality is not None else None
    typology = unit.typology

    return SchoolUnitSummary(
        id=unit.id,
        name=unit.name,
        sec_code=unit.sec_code or "",
        status=unit.status or "",
        typology_name=typology.name if typology is not None else "",
        municipality_name=municipality.name if municipality is not None else "",
        nte_name=nte.name if nte is not None else "",
    )


def current_homologation_state(events: Sequence[Homologation]) -> HomologationAction:
    """
    Approval state derived from a history ordered newest first.

    A unit without events is UNHOMOLOGATED.
    """
    if not events:
        return HomologationAction.UNHOMOLOGATED
    return HomologationAction(events[0].action)


def expected_next_action(state: HomologationAction) -> HomologationAction:
    """The toggle of the current state."""
    if state == HomologationAction.HOMOLOGATED:
        return HomologationAction.UNHOMOLOGATED
    return HomologationAction.HOMOLOGATED


def reason_is_missing(action: HomologationAction, reason: str | None) -> bool:
    """Retracting a homologation requires a non-blank reason."""
    return action == HomologationAction.UNHOMOLOGATED and not (reason and reason.strip())
