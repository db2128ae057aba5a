"""
HTTP-level tests for the school units router.

The service layer is patched; these tests cover routing, status codes,
request validation, camelCase serialization and the session guard.
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from school_registry.core.database import get_db
from school_registry.core.rate_limit import mutation_rate_limit
from school_registry.core.security import create_session_token
from school_registry.main import app
from school_registry.modules.school_units.models import HomologationAction
from school_registry.modules.school_units.schemas import (
    HomologationRead,
    SchoolUnitListResponse,
    SchoolUnitSummary,
)
from school_registry.modules.shared.errors import NotFoundError, StoreError

ROUTER_SERVICE = "school_registry.modules.school_units.router.service"


async def _override_db():
    yield MagicMock()


async def _no_rate_limit():
    return None


@pytest.fixture
def client():
    app.dependency_overrides[get_db] = _override_db
    app.dependency_overrides[mutation_rate_limit] = _no_rate_limit
    token = create_session_token(
        subject="7",
        additional_claims={"email": "editor@example.org", "name": "Editor"},
    )
    with_session = TestClient(app, headers={"Authorization": f"Bearer {token}"})
    yield with_session
    app.dependency_overrides.clear()


@pytest.fixture
def anonymous_client():
    return TestClient(app)


def _summary(unit_id: int = 1) -> SchoolUnitSummary:
    return SchoolUnitSummary(
        id=unit_id,
        name="Colegio Estadual Central",
        sec_code="29000001",
        status="1",
        typology_name="SEDE",
        municipality_name="Salvador",
        nte_name="NTE 26",
    )


class TestSessionGuard:
    """Requests without a session are redirected to the login page."""

    def test_redirect_keeps_query_string(self, anonymous_client):
        response = anonymous_client.get(
            "/api/school_units?pageSize=10&order=desc", follow_redirects=False
        )

        assert response.status_code == 307
        assert response.headers["location"] == "/login?pageSize=10&order=desc"

    def test_redirect_without_query_string(self, anonymous_client):
        response = anonymous_client.delete("/api/school_units/1", follow_redirects=False)

        assert response.status_code == 307
        assert response.headers["location"] == "/login"

    def test_invalid_token_is_redirected(self):
        response = TestClient(app, headers={"Authorization": "Bearer not-a-jwt"}).get(
            "/api/ntes", follow_redirects=False
        )

        assert response.status_code == 307

    def test_public_paths_pass(self, anonymous_client):
        assert anonymous_client.get("/health").status_code == 200

        login = anonymous_client.get("/login?next=%2Fschool_units")
        assert login.status_code == 200
        assert login.json()["query"] == "next=%2Fschool_units"


class TestListing:
    def test_list_passes_raw_query_values(self, client):
        page = SchoolUnitListResponse(data=[_summary()], next_cursor="1", has_next=True)

        with patch(ROUTER_SERVICE) as mock_service:
            mock_service.list_school_units = AsyncMock(return_value=page)

            response = client.get("/api/school_units?pageSize=abc&cursor=5&order=DESC")

        assert response.status_code == 200
        args = mock_service.list_school_units.call_args.args
        assert args[1:] == ("abc", "5", "DESC")
        body = response.json()
        assert body["hasNext"] is True
        assert body["nextCursor"] == "1"
        assert body["data"][0]["municipalityName"] == "Salvador"
        assert body["data"][0]["secCode"] == "29000001"

    def test_store_error_is_500(self, client):
        with patch(ROUTER_SERVICE) as mock_service:
            mock_service.list_school_units = AsyncMock(side_effect=StoreError())

            response = client.get("/api/school_units")

        assert response.status_code == 500
        assert response.json()["detail"]["error"] == "STORE_ERROR"

    def test_unexpected_error_is_generic_500(self, client):
        with patch(ROUTER_SERVICE) as mock_service:
            mock_service.list_school_units = AsyncMock(side_effect=RuntimeError("boom"))

            response = client.get("/api/school_units")

        assert response.status_code == 500
        assert response.json()["detail"]["error"] == "INTERNAL_ERROR"
        assert "boom" not in response.text


class TestMutations:
    def test_create(self, client):
        with patch(ROUTER_SERVICE) as mock_service:
            mock_service.create_school_unit = AsyncMock(return_value=_summary(12))

            response = client.post(
                "/api/school_units",
                json={"schoolUnit": "Escola", "secCode": "1", "municipality": "10"},
            )

        assert response.status_code == 200
        assert response.json()["data"]["id"] == 12
        data = mock_service.create_school_unit.call_args.args[1]
        assert data.municipality == 10

    @pytest.mark.parametrize(
        "payload",
        [
            {"secCode": "1", "municipality": 10},
            {"schoolUnit": "Escola", "municipality": "abc"},
            {"schoolUnit": "Escola", "municipality": 10, "unexpected": True},
        ],
    )
    def test_create_invalid_body_is_400(self, client, payload):
        with patch(ROUTER_SERVICE) as mock_service:
            mock_service.create_school_unit = AsyncMock()

            response = client.post("/api/school_units", json=payload)

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "VALIDATION_ERROR"
        mock_service.create_school_unit.assert_not_called()

    def test_update_not_found(self, client):
        with patch(ROUTER_SERVICE) as mock_service:
            mock_service.update_school_unit = AsyncMock(
                side_effect=NotFoundError("School unit", 99)
            )

            response = client.put("/api/school_units/99", json={"status": "0"})

        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "NOT_FOUND"

    def test_non_integer_id_is_400(self, client):
        response = client.put("/api/school_units/abc", json={"status": "0"})

        assert response.status_code == 400

    def test_delete(self, client):
        with patch(ROUTER_SERVICE) as mock_service:
            mock_service.delete_school_unit = AsyncMock(return_value=None)

            response = client.delete("/api/school_units/3")

        assert response.status_code == 200
        assert response.json() == {"ok": True}

    def test_delete_missing_is_404(self, client):
        with patch(ROUTER_SERVICE) as mock_service:
            mock_service.delete_school_unit = AsyncMock(
                side_effect=NotFoundError("School unit", 3)
            )

            response = client.delete("/api/school_units/3")

        assert response.status_code == 404


class TestHomologations:
    def test_record_returns_201_with_caller_as_actor(self, client):
        event = HomologationRead(
            id=5,
            school_unit_id=3,
            action=HomologationAction.HOMOLOGATED,
            reason=None,
            performed_by="editor@example.org",
            created_at=datetime(2026, 3, 1, tzinfo=UTC),
        )

        with patch(ROUTER_SERVICE) as mock_service:
            mock_service.record_homologation = AsyncMock(return_value=event)

            response = client.post(
                "/api/school_units/3/homologations", json={"action": "HOMOLOGATED"}
            )

        assert response.status_code == 201
        body = response.json()["data"]
        assert body["performedBy"] == "editor@example.org"
        assert body["schoolUnitId"] == 3
        actor = mock_service.record_homologation.call_args.kwargs["actor"]
        assert actor.id == 7
        assert actor.email == "editor@example.org"

    def test_invalid_action_is_400(self, client):
        response = client.post("/api/school_units/3/homologations", json={"action": "MAYBE"})

        assert response.status_code == 400

    def test_history(self, client):
        with patch(ROUTER_SERVICE) as mock_service:
            mock_service.list_homologations = AsyncMock(return_value=[])

            response = client.get("/api/school_units/3/homologations")

        assert response.status_code == 200
        assert response.json() == {"data": []}
