# wayfare/domains/agencies/service.py
import logging
from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from wayfare.db.enums import InvitationStatus, MemberStatus
from wayfare.db.models import Agency, Invitation, Member
from wayfare.domains.agencies.models import (
    AgencyCreate,
    AgencyResponse,
    AgencyStats,
    AgencyUpdate,
    CreateAgencyResponse,
    UserAgencyResponse,
)
from wayfare.domains.auth.models import Caller
from wayfare.domains.members.service import MembershipService
from wayfare.shared.exceptions import (
    AgencyNotFoundError,
    PermissionDeniedError,
    UnauthenticatedError,
)
from wayfare.shared.permissions import Permission, authorize, require_owner

logger = logging.getLogger(__name__)


class AgencyService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_agency(
        self, agency_data: AgencyCreate, caller: Optional[Caller]
    ) -> CreateAgencyResponse:
        """
        Create a new agency and add the caller as its owner.

        The agency row and the owner membership are committed together.
        """
        if caller is None:
            raise UnauthenticatedError()

        agency = Agency(
            owner_id=caller.user_id,
            **agency_data.model_dump(exclude_none=True),
        )
        self.db.add(agency)
        await self.db.flush()

        membership = await MembershipService(self.db).create_owner_membership(
            agency.id, caller.user_id
        )
        await self.db.commit()
        logger.info(f"Agency {agency.id} created by user {caller.user_id}")

        return CreateAgencyResponse(
            agency=AgencyResponse.from_agency(agency),
            role=membership.role.value,
        )

    async def get_agency(
        self, agency_id: str, caller: Optional[Caller]
    ) -> AgencyResponse:
        """Return an agency the caller belongs to."""
        if caller is None:
            raise UnauthenticatedError()

        agency = await self._get_agency_or_404(agency_id)
        membership = await MembershipService(self.db).get_membership(
            agency_id, caller.user_id
        )
        if not membership:
            raise PermissionDeniedError("Access denied to agency")

        return AgencyResponse.from_agency(agency)

    async def list_user_agencies(
        self, caller: Optional[Caller]
    ) -> List[UserAgencyResponse]:
        """Agencies where the caller is an active member, with the caller's role."""
        if caller is None:
            raise UnauthenticatedError()

        result = await self.db.execute(
            select(Agency, Member.role)
            .join(Member, Member.agency_id == Agency.id)
            .where(
                Member.user_id == caller.user_id,
                Member.status == MemberStatus.active,
            )
            .order_by(Agency.name)
        )
        return [
            UserAgencyResponse(
                **AgencyResponse.from_agency(agency).model_dump(), role=role.value
            )
            for agency, role in result.all()
        ]

    async def update_agency(
        self, agency_id: str, updates: AgencyUpdate, caller: Optional[Caller]
    ) -> AgencyResponse:
        agency = await self._get_agency_or_404(agency_id)
        await authorize(self.db, agency_id, caller, Permission.MANAGE_SETTINGS)

        for field, value in updates.model_dump(exclude_unset=True).items():
            setattr(agency, field, value)

        await self.db.commit()
        await self.db.refresh(agency)
        return AgencyResponse.from_agency(agency)

    async def delete_agency(self, agency_id: str, caller: Optional[Caller]) -> None:
        """
        Delete an agency with its members and invitations.

        Only the owner may delete; this bypasses flag-based permissions.
        """
        agency = await self._get_agency_or_404(agency_id)
        require_owner(agency, caller)

        await self.db.execute(delete(Member).where(Member.agency_id == agency_id))
        await self.db.execute(
            delete(Invitation).where(Invitation.agency_id == agency_id)
        )
        await self.db.delete(agency)
        await self.db.commit()
        logger.info(f"Agency {agency_id} deleted by its owner")

    async def get_agency_stats(self, agency_id: str) -> AgencyStats:
        total_members = await self.db.scalar(
            select(func.count(Member.id)).where(
                Member.agency_id == agency_id,
                Member.status == MemberStatus.active,
            )
        )
        pending_invitations = await self.db.scalar(
            select(func.count(Invitation.id)).where(
                Invitation.agency_id == agency_id,
                Invitation.status == InvitationStatus.pending,
            )
        )
        return AgencyStats(
            total_members=total_members or 0,
            pending_invitations=pending_invitations or 0,
        )

    async def _get_agency_or_404(self, agency_id: str) -> Agency:
        agency = await self.db.get(Agency, agency_id)
        if not agency:
            raise AgencyNotFoundError()
        return agency
