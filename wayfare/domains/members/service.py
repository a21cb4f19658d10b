# wayfare/domains/members/service.py
import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wayfare.db.enums import AgencyRole, MemberStatus
from wayfare.db.models import Member, User, utcnow
from wayfare.domains.auth.models import Caller
from wayfare.domains.members.models import MemberResponse, UpdateMemberRequest
from wayfare.shared.exceptions import (
    InvalidOperationError,
    MemberNotFoundError,
    PermissionDeniedError,
    UnauthenticatedError,
)
from wayfare.shared.permissions import (
    Permission,
    PermissionSet,
    authorize,
    check_permission,
)
from wayfare.shared.permissions.services import get_membership

logger = logging.getLogger(__name__)


class MembershipService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_owner_membership(self, agency_id: str, user_id: str) -> Member:
        """
        Add the owner membership for a freshly created agency.

        The member is flushed but not committed; agency creation commits both
        rows together.
        """
        now = utcnow()
        member = Member(
            agency_id=agency_id,
            user_id=user_id,
            role=AgencyRole.owner,
            permissions=PermissionSet.full().model_dump(),
            status=MemberStatus.active,
            joined_at=now,
            last_active_at=now,
        )
        self.db.add(member)
        await self.db.flush()
        return member

    async def get_membership(self, agency_id: str, user_id: str) -> Optional[Member]:
        return await get_membership(self.db, agency_id, user_id)

    async def get_caller_membership(
        self, agency_id: str, caller: Optional[Caller]
    ) -> MemberResponse:
        if caller is None:
            raise UnauthenticatedError()
        member = await self.get_membership(agency_id, caller.user_id)
        if not member:
            raise MemberNotFoundError("You are not a member of this agency")
        return MemberResponse.from_member(member)

    async def list_members(
        self, agency_id: str, caller: Optional[Caller]
    ) -> List[MemberResponse]:
        """
        List all members of an agency with basic user info.

        Any active member of the agency may list its members.
        """
        if caller is None:
            raise UnauthenticatedError()
        membership = await self.get_membership(agency_id, caller.user_id)
        if not membership or membership.status != MemberStatus.active:
            raise PermissionDeniedError("Access denied to agency")

        result = await self.db.execute(
            select(Member, User)
            .join(User, User.id == Member.user_id)
            .where(Member.agency_id == agency_id)
            .order_by(Member.joined_at)
        )
        return [MemberResponse.from_member(member, user) for member, user in result.all()]

    async def update_member(
        self,
        member_id: str,
        updates: UpdateMemberRequest,
        caller: Optional[Caller],
    ) -> MemberResponse:
        """
        Apply a partial update to a member's role, permissions, assignments or status.

        Raises:
            UnauthenticatedError: If there is no caller
            MemberNotFoundError: If the member does not exist
            InvalidOperationError: If the member is the agency owner
            PermissionDeniedError: If the caller cannot manage members
        """
        member = await self._get_mutable_member(member_id, caller, "modify")
        await authorize(self.db, member.agency_id, caller, Permission.MANAGE_MEMBERS)

        for field in updates.model_fields_set:
            value = getattr(updates, field)
            if field == "permissions":
                value = value.model_dump()
            elif field == "role":
                value = AgencyRole(value)
            elif field == "status":
                value = MemberStatus(value)
            setattr(member, field, value)

        await self.db.commit()
        logger.info(
            f"Member {member_id} updated in agency {member.agency_id}: "
            f"{sorted(updates.model_fields_set)}"
        )
        return MemberResponse.from_member(member)

    async def remove_member(self, member_id: str, caller: Optional[Caller]) -> None:
        member = await self._get_mutable_member(member_id, caller, "remove")
        agency_id = member.agency_id
        await authorize(self.db, agency_id, caller, Permission.MANAGE_MEMBERS)

        await self.db.delete(member)
        await self.db.commit()
        logger.info(f"Member {member_id} removed from agency {agency_id}")

    async def leave_agency(self, agency_id: str, caller: Optional[Caller]) -> None:
        """Remove the caller's own membership. The owner cannot leave."""
        if caller is None:
            raise UnauthenticatedError()

        membership = await self.get_membership(agency_id, caller.user_id)
        if not membership:
            raise MemberNotFoundError("You are not a member of this agency")

        if membership.role == AgencyRole.owner:
            raise InvalidOperationError(
                "Owner cannot leave agency. Transfer ownership first."
            )

        await self.db.delete(membership)
        await self.db.commit()
        logger.info(f"User {caller.user_id} left agency {agency_id}")

    async def check_permission(
        self, agency_id: str, permission_name: str, caller: Optional[Caller]
    ) -> bool:
        return await check_permission(self.db, agency_id, caller, permission_name)

    async def _get_mutable_member(
        self, member_id: str, caller: Optional[Caller], action: str
    ) -> Member:
        """Load a member that a mutation targets, rejecting the owner for any caller."""
        if caller is None:
            raise UnauthenticatedError()

        member = await self.db.get(Member, member_id)
        if not member:
            raise MemberNotFoundError()

        if member.role == AgencyRole.owner:
            raise InvalidOperationError(f"Cannot {action} the agency owner")

        return member
