from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wayfare.db.enums import MemberStatus
from wayfare.db.models import Agency, Member, User
from wayfare.domains.auth.models import AgencyMembership, SessionState


class SessionService:
    """Service for session-related operations"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_session_state(self, user: User) -> SessionState:
        """
        Get session state for a user including all active agency memberships

        Args:
            user: The authenticated user

        Returns:
            SessionState with user info and agency memberships
        """
        result = await self.db.execute(
            select(Agency, Member.role)
            .join(Member, Member.agency_id == Agency.id)
            .where(Member.user_id == user.id, Member.status == MemberStatus.active)
            .order_by(Agency.name)
        )

        agencies = [
            AgencyMembership(id=agency.id, name=agency.name, role=role.value)
            for agency, role in result.all()
        ]

        return SessionState(
            user_id=user.id,
            user_email=user.email,
            user_display_name=user.name,
            agencies=agencies,
        )
