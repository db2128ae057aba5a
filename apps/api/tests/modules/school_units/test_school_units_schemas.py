"""
Tests for school units request and response schemas.
"""

import pytest
from pydantic import ValidationError

from school_registry.modules.school_units.models import HomologationAction
from school_registry.modules.school_units.schemas import (
    HomologationCreate,
    SchoolUnitCreate,
    SchoolUnitListResponse,
    SchoolUnitUpdate,
)


class TestSchoolUnitCreate:
    """Tests for SchoolUnitCreate."""

    def test_accepts_form_field_names(self):
        data = SchoolUnitCreate.model_validate(
            {
                "schoolUnit": "  Escola Municipal  ",
                "secCode": "29000001",
                "uoCode": "UO-1",
                "municipality": "12",
                "typology": "SEDE",
                "status": "0",
            }
        )

        assert data.name == "Escola Municipal"
        assert data.sec_code == "29000001"
        assert data.uo_code == "UO-1"
        assert data.municipality == 12
        assert data.typology == "SEDE"
        assert data.status == "0"

    def test_accepts_snake_case_sec_code(self):
        data = SchoolUnitCreate.model_validate(
            {"name": "Escola", "sec_code": "1", "municipalityId": 3}
        )

        assert data.sec_code == "1"
        assert data.municipality == 3

    def test_typology_keeps_numbers_and_names(self):
        by_id = SchoolUnitCreate.model_validate(
            {"schoolUnit": "Escola", "municipality": 1, "typology": 4}
        )
        by_name = SchoolUnitCreate.model_validate(
            {"schoolUnit": "Escola", "municipality": 1, "typology": "ANEXO"}
        )

        assert by_id.typology == 4
        assert by_name.typology == "ANEXO"

    def test_blank_typology_is_none(self):
        data = SchoolUnitCreate.model_validate(
            {"schoolUnit": "Escola", "municipality": 1, "typology": ""}
        )

        assert data.typology is None

    @pytest.mark.parametrize(
        "payload",
        [
            {"municipality": 1},
            {"schoolUnit": "", "municipality": 1},
            {"schoolUnit": "   ", "municipality": 1},
            {"schoolUnit": "Escola"},
            {"schoolUnit": "Escola", "municipality": ""},
            {"schoolUnit": "Escola", "municipality": "abc"},
        ],
    )
    def test_missing_or_invalid_required_fields(self, payload):
        with pytest.raises(ValidationError):
            SchoolUnitCreate.model_validate(payload)

    def test_unknown_fields_are_rejected(self):
        with pytest.raises(ValidationError):
            SchoolUnitCreate.model_validate(
                {"schoolUnit": "Escola", "municipality": 1, "foo": "bar"}
            )


class TestSchoolUnitUpdate:
    """Tests for SchoolUnitUpdate."""

    def test_only_present_fields_are_set(self):
        data = SchoolUnitUpdate.model_validate({"status": "0"})

        assert data.model_dump(exclude_unset=True) == {"status": "0"}

    def test_uo_code_can_be_cleared(self):
        data = SchoolUnitUpdate.model_validate({"uoCode": None})

        assert data.model_dump(exclude_unset=True) == {"uo_code": None}

    @pytest.mark.parametrize("field", ["name", "secCode", "status"])
    def test_required_columns_cannot_be_nulled(self, field):
        with pytest.raises(ValidationError):
            SchoolUnitUpdate.model_validate({field: None})

    def test_non_numeric_municipality_is_rejected(self):
        with pytest.raises(ValidationError):
            SchoolUnitUpdate.model_validate({"municipality": "abc"})


class TestHomologationCreate:
    """Tests for HomologationCreate."""

    def test_accepts_both_performer_spellings(self):
        camel = HomologationCreate.model_validate(
            {"action": "HOMOLOGATED", "performedBy": "a@example.org"}
        )
        snake = HomologationCreate.model_validate(
            {"action": "HOMOLOGATED", "performed_by": "b@example.org"}
        )

        assert camel.performed_by == "a@example.org"
        assert snake.performed_by == "b@example.org"
        assert camel.action == HomologationAction.HOMOLOGATED

    def test_unknown_action_is_rejected(self):
        with pytest.raises(ValidationError):
            HomologationCreate.model_validate({"action": "APPROVED"})

    def test_action_is_required(self):
        with pytest.raises(ValidationError):
            HomologationCreate.model_validate({"reason": "x"})


class TestSchoolUnitListResponse:
    def test_serializes_camel_case(self):
        payload = SchoolUnitListResponse(data=[], next_cursor=None, has_next=False).model_dump(
            by_alias=True
        )

        assert payload == {"data": [], "nextCursor": None, "hasNext": False}
