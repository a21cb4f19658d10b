"""
Tests for permission checks in wayfare/shared/permissions/services.py
"""

from typing import Optional
from unittest.mock import Mock

import pytest

from tests.fixtures.auth_fixtures import build_mock_member
from wayfare.db.enums import AgencyRole, MemberStatus
from wayfare.domains.auth.models import Caller
from wayfare.shared.exceptions import PermissionDeniedError, UnauthenticatedError
from wayfare.shared.permissions.models import Permission, PermissionSet
from wayfare.shared.permissions.services import (
    authorize,
    check_permission,
    has_permission,
    require_owner,
)


def _returns_membership(mock_db: Mock, member: Optional[Mock]) -> None:
    result = Mock()
    result.scalar_one_or_none.return_value = member
    mock_db.execute.return_value = result


class TestHasPermission:
    def test_none_membership_denied(self):
        assert has_permission(None, Permission.VIEW_ANALYTICS) is False

    def test_active_member_with_flag(self, mock_agent_member: Mock):
        assert has_permission(mock_agent_member, Permission.CREATE_BOOKINGS) is True

    def test_active_member_without_flag(self, mock_agent_member: Mock):
        assert has_permission(mock_agent_member, Permission.MANAGE_MEMBERS) is False

    @pytest.mark.parametrize("status", [MemberStatus.inactive, MemberStatus.pending])
    def test_non_active_member_denied_even_with_flag(self, status: MemberStatus):
        member = build_mock_member(
            role=AgencyRole.admin, status=status, permissions=PermissionSet.full()
        )
        assert has_permission(member, Permission.VIEW_ANALYTICS) is False

    def test_stored_flags_win_over_role(self):
        """Permissions are read from the membership, not recomputed from the role."""
        member = build_mock_member(
            role=AgencyRole.viewer,
            permissions=PermissionSet(manage_members=True),
        )
        assert has_permission(member, Permission.MANAGE_MEMBERS) is True
        assert has_permission(member, Permission.VIEW_ANALYTICS) is False


class TestAuthorize:
    @pytest.mark.asyncio
    async def test_anonymous_caller_unauthenticated(
        self, mock_db: Mock, test_agency_id: str
    ):
        with pytest.raises(UnauthenticatedError) as exc_info:
            await authorize(mock_db, test_agency_id, None, Permission.VIEW_ANALYTICS)

        assert exc_info.value.status_code == 401
        mock_db.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_returns_membership_when_allowed(
        self,
        mock_db: Mock,
        owner_caller: Caller,
        mock_owner_member: Mock,
        test_agency_id: str,
    ):
        _returns_membership(mock_db, mock_owner_member)

        result = await authorize(
            mock_db, test_agency_id, owner_caller, Permission.MANAGE_MEMBERS
        )

        assert result is mock_owner_member

    @pytest.mark.asyncio
    async def test_non_member_denied(
        self, mock_db: Mock, agent_caller: Caller, test_agency_id: str
    ):
        _returns_membership(mock_db, None)

        with pytest.raises(PermissionDeniedError) as exc_info:
            await authorize(
                mock_db, test_agency_id, agent_caller, Permission.VIEW_ANALYTICS
            )

        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_missing_flag_names_permission(
        self,
        mock_db: Mock,
        agent_caller: Caller,
        mock_agent_member: Mock,
        test_agency_id: str,
    ):
        _returns_membership(mock_db, mock_agent_member)

        with pytest.raises(PermissionDeniedError) as exc_info:
            await authorize(
                mock_db, test_agency_id, agent_caller, Permission.MANAGE_MEMBERS
            )

        assert exc_info.value.detail == (
            "Insufficient permissions: manage_members required"
        )

    @pytest.mark.asyncio
    async def test_inactive_member_denied(
        self, mock_db: Mock, agent_caller: Caller, test_agency_id: str
    ):
        member = build_mock_member(
            role=AgencyRole.agent, status=MemberStatus.inactive
        )
        _returns_membership(mock_db, member)

        with pytest.raises(PermissionDeniedError):
            await authorize(
                mock_db, test_agency_id, agent_caller, Permission.CREATE_BOOKINGS
            )


class TestRequireOwner:
    def test_owner_passes(self, owner_caller: Caller):
        agency = Mock(owner_id=owner_caller.user_id)
        require_owner(agency, owner_caller)

    def test_admin_is_not_owner(self, agent_caller: Caller):
        agency = Mock(owner_id="owner-user-id")
        with pytest.raises(PermissionDeniedError):
            require_owner(agency, agent_caller)

    def test_anonymous_unauthenticated(self):
        with pytest.raises(UnauthenticatedError):
            require_owner(Mock(owner_id="owner-user-id"), None)


class TestCheckPermission:
    @pytest.mark.asyncio
    async def test_anonymous_is_false(self, mock_db: Mock, test_agency_id: str):
        assert (
            await check_permission(mock_db, test_agency_id, None, "view_analytics")
            is False
        )

    @pytest.mark.asyncio
    async def test_unknown_permission_is_false(
        self, mock_db: Mock, owner_caller: Caller, test_agency_id: str
    ):
        result = await check_permission(
            mock_db, test_agency_id, owner_caller, "launch_rockets"
        )

        assert result is False
        mock_db.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_granted_permission_is_true(
        self,
        mock_db: Mock,
        agent_caller: Caller,
        mock_agent_member: Mock,
        test_agency_id: str,
    ):
        _returns_membership(mock_db, mock_agent_member)

        assert (
            await check_permission(
                mock_db, test_agency_id, agent_caller, "create_bookings"
            )
            is True
        )

    @pytest.mark.asyncio
    async def test_non_member_is_false(
        self, mock_db: Mock, agent_caller: Caller, test_agency_id: str
    ):
        _returns_membership(mock_db, None)

        assert (
            await check_permission(mock_db, test_agency_id, agent_caller, "edit_trips")
            is False
        )
