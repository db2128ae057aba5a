"""
School Units Schemas

Pydantic schemas for request validation and response serialization.
JSON field names are camelCase; request bodies also accept the snake_case
names older clients send (sec_code, performed_by). Unknown fields are rejected.
"""

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from school_registry.modules.school_units.models import HomologationAction


class CamelModel(BaseModel):
    """Base schema serialized with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class RequestModel(CamelModel):
    """Base schema for request bodies."""

    model_config = ConfigDict(extra="forbid")


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and value.strip() == "":
        return None
    return value


# ============================================
# Response schemas
# ============================================


class SchoolUnitSummary(CamelModel):
    """Flattened school unit row shared by list, create and update responses."""

    id: int
    name: str
    sec_code: str = ""
    status: str = ""
    typology_name: str = ""
    municipality_name: str = ""
    nte_name: str = ""


class HomologationRead(CamelModel):
    """A homologation event."""

    id: int
    school_unit_id: int
    action: HomologationAction
    reason: str | None = None
    performed_by: str | None = None
    created_at: datetime


class SchoolUnitDetail(SchoolUnitSummary):
    """School unit with its relation ids, approval state and recent history."""

    uo_code: str | None = None
    municipality_id: int
    nte_id: int | None = None
    typology_id: int | None = None
    homologation_state: HomologationAction
    homologated: bool
    history: list[HomologationRead] = Field(default_factory=list)


class SchoolUnitListResponse(CamelModel):
    """Response for GET /school_units."""

    data: list[SchoolUnitSummary]
    next_cursor: str | None = None
    has_next: bool = False


class SchoolUnitResponse(CamelModel):
    data: SchoolUnitSummary


class SchoolUnitDetailResponse(CamelModel):
    data: SchoolUnitDetail


class DeleteResponse(BaseModel):
    ok: bool = True


class HomologationListResponse(CamelModel):
    """History ordered newest first."""

    data: list[HomologationRead]


class HomologationResponse(CamelModel):
    data: HomologationRead


# ============================================
# Request schemas
# ============================================


class SchoolUnitCreate(RequestModel):
    """Request body for POST /school_units."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        validation_alias=AliasChoices("schoolUnit", "name"),
    )
    sec_code: str | None = Field(
        None, max_length=50, validation_alias=AliasChoices("secCode", "sec_code")
    )
    uo_code: str | None = Field(
        None, max_length=50, validation_alias=AliasChoices("uoCode", "uo_code")
    )
    municipality: int = Field(
        ..., validation_alias=AliasChoices("municipality", "municipalityId")
    )
    # Numeric id, or a typology name matched exactly
    typology: int | str | None = None
    status: str | None = Field(None, max_length=10)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("municipality", "typology", mode="before")
    @classmethod
    def blank_is_missing(cls, value: Any) -> Any:
        return _blank_to_none(value)


class SchoolUnitUpdate(RequestModel):
    """
    Request body for PUT /school_units/{id}.

    Only the fields present in the body are applied.
    """

    name: str | None = Field(
        None,
        min_length=1,
        max_length=255,
        validation_alias=AliasChoices("schoolUnit", "name"),
    )
    sec_code: str | None = Field(
        None, max_length=50, validation_alias=AliasChoices("secCode", "sec_code")
    )
    uo_code: str | None = Field(
        None, max_length=50, validation_alias=AliasChoices("uoCode", "uo_code")
    )
    municipality: int | None = Field(
        None, validation_alias=AliasChoices("municipality", "municipalityId")
    )
    typology: int | str | None = None
    status: str | None = Field(None, max_length=10)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("municipality", "typology", mode="before")
    @classmethod
    def blank_is_missing(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("name", "sec_code", "status")
    @classmethod
    def not_null(cls, value: str | None) -> str | None:
        # Only runs for fields present in the body
        if value is None:
            raise ValueError("field cannot be null")
        return value


class HomologationCreate(RequestModel):
    """
    Request body for POST /school_units/{id}/homologations.

    The reason requirement for UNHOMOLOGATED is checked by the service.
    """

    action: HomologationAction
    reason: str | None = Field(None, max_length=2000)
    performed_by: str | None = Field(
        None,
        max_length=255,
        validation_alias=AliasChoices("performedBy", "performed_by"),
    )
