"""
Tests for agency routes in wayfare/domains/agencies/routes.py

Route functions are called directly with a patched service; HTTP status
mapping is exercised through the test client with dependency overrides.
"""

import inspect
from unittest.mock import AsyncMock, Mock, patch

import pytest
from fastapi.testclient import TestClient

from tests.helpers.route_testing import override_auth
from wayfare.domains.agencies.models import (
    AgencyCreate,
    AgencyResponse,
    AgencyStats,
    CreateAgencyResponse,
)
from wayfare.domains.auth.models import Caller
from wayfare.main import app
from wayfare.shared.exceptions import AgencyNotFoundError, PermissionDeniedError


@pytest.fixture
def agency_response(test_agency_id: str) -> AgencyResponse:
    return AgencyResponse(
        id=test_agency_id,
        name="Blue Horizon Travel",
        description=None,
        logo=None,
        website=None,
        email=None,
        phone=None,
        social_media=None,
        tax_id=None,
        owner_id="owner-user-id",
        created_at=None,
        updated_at=None,
    )


class TestCreateAgencyRoute:
    @pytest.mark.asyncio
    async def test_create_agency_delegates_to_service(
        self, owner_caller: Caller, agency_response: AgencyResponse
    ):
        from wayfare.domains.agencies.routes import create_agency

        expected = CreateAgencyResponse(agency=agency_response, role="owner")
        payload = AgencyCreate(name="Blue Horizon Travel")
        mock_db = Mock()

        with patch(
            "wayfare.domains.agencies.routes.AgencyService"
        ) as mock_service_class:
            mock_service_class.return_value.create_agency = AsyncMock(
                return_value=expected
            )

            result = await create_agency(payload, caller=owner_caller, db=mock_db)

        assert result == expected
        mock_service_class.assert_called_once_with(mock_db)
        mock_service_class.return_value.create_agency.assert_called_once_with(
            payload, owner_caller
        )

    def test_create_agency_http_201(
        self, client: TestClient, owner_caller: Caller, agency_response: AgencyResponse
    ):
        expected = CreateAgencyResponse(agency=agency_response, role="owner")

        with (
            override_auth(app, owner_caller),
            patch(
                "wayfare.domains.agencies.routes.AgencyService"
            ) as mock_service_class,
        ):
            mock_service_class.return_value.create_agency = AsyncMock(
                return_value=expected
            )
            response = client.put(
                "/api/v1/agencies/", json={"name": "Blue Horizon Travel"}
            )

        assert response.status_code == 201
        assert response.json()["role"] == "owner"

    def test_create_agency_requires_name(self, client: TestClient, owner_caller: Caller):
        with override_auth(app, owner_caller):
            response = client.put("/api/v1/agencies/", json={"description": "x"})

        assert response.status_code == 422


class TestAgencyErrorMapping:
    def test_missing_agency_is_404(self, client: TestClient, owner_caller: Caller):
        with (
            override_auth(app, owner_caller),
            patch(
                "wayfare.domains.agencies.routes.AgencyService"
            ) as mock_service_class,
        ):
            mock_service_class.return_value.get_agency = AsyncMock(
                side_effect=AgencyNotFoundError()
            )
            response = client.get("/api/v1/agencies/missing")

        assert response.status_code == 404
        assert response.json()["detail"] == "Agency not found"

    def test_non_owner_delete_is_403(
        self, client: TestClient, agent_caller: Caller, test_agency_id: str
    ):
        with (
            override_auth(app, agent_caller),
            patch(
                "wayfare.domains.agencies.routes.AgencyService"
            ) as mock_service_class,
        ):
            mock_service_class.return_value.delete_agency = AsyncMock(
                side_effect=PermissionDeniedError(
                    "Only the agency owner can perform this action"
                )
            )
            response = client.delete(f"/api/v1/agencies/{test_agency_id}")

        assert response.status_code == 403

    def test_unauthenticated_request_is_401(self, client: TestClient):
        response = client.get("/api/v1/agencies/")
        assert response.status_code == 401


class TestAgencyStatsRoute:
    def test_stats_route_uses_permission_dependency(self):
        from wayfare.domains.agencies.routes import get_agency_stats

        membership_param = inspect.signature(get_agency_stats).parameters.get(
            "membership"
        )
        assert membership_param is not None
        assert hasattr(membership_param.default, "dependency")

    @pytest.mark.asyncio
    async def test_stats_returned(self, mock_owner_member: Mock, test_agency_id: str):
        from wayfare.domains.agencies.routes import get_agency_stats

        stats = AgencyStats(total_members=3, pending_invitations=1)
        with patch(
            "wayfare.domains.agencies.routes.AgencyService"
        ) as mock_service_class:
            mock_service_class.return_value.get_agency_stats = AsyncMock(
                return_value=stats
            )
            result = await get_agency_stats(
                agency_id=test_agency_id, membership=mock_owner_member, db=Mock()
            )

        assert result == stats
