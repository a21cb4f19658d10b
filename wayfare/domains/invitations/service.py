# wayfare/domains/invitations/service.py
import logging
import secrets
from datetime import timedelta
from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from wayfare.core.settings import settings
from wayfare.db.enums import AgencyRole, InvitationStatus, MemberStatus
from wayfare.db.models import Agency, Invitation, Member, User, utcnow
from wayfare.domains.auth.models import Caller
from wayfare.domains.invitations.exceptions import (
    AlreadyMemberError,
    DuplicateInvitationError,
    InvitationEmailMismatchError,
    InvitationExpiredError,
    InvitationNotFoundError,
    InvitationStateError,
)
from wayfare.domains.invitations.models import (
    CreateInvitationRequest,
    CreateInvitationResponse,
    InvitationAgencyInfo,
    InvitationResponse,
    InviterInfo,
    UserInvitationResponse,
)
from wayfare.domains.members.models import MemberResponse
from wayfare.shared.exceptions import UnauthenticatedError
from wayfare.shared.permissions import Permission, authorize, default_permissions

logger = logging.getLogger(__name__)


def generate_invitation_token() -> str:
    """Single-use, URL-safe invitation credential."""
    return secrets.token_urlsafe(32)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class InvitationService:
    """
    Invitation lifecycle: pending -> accepted | expired | canceled.

    All three target states are terminal. Transitions out of pending are
    compare-and-swap updates, so concurrent redemptions of the same token
    produce exactly one accepted membership.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_invitation(
        self,
        agency_id: str,
        request: CreateInvitationRequest,
        caller: Optional[Caller],
    ) -> CreateInvitationResponse:
        """
        Invite an email address to join an agency.

        Raises:
            PermissionDeniedError: If the caller cannot manage members
            AlreadyMemberError: If a user with this email is already a member
            DuplicateInvitationError: If a pending invitation already exists
        """
        if caller is None:
            raise UnauthenticatedError()
        await authorize(self.db, agency_id, caller, Permission.MANAGE_MEMBERS)
        email = normalize_email(request.email)

        existing_member = await self.db.execute(
            select(Member.id)
            .join(User, User.id == Member.user_id)
            .where(Member.agency_id == agency_id, func.lower(User.email) == email)
            .limit(1)
        )
        if existing_member.first():
            raise AlreadyMemberError()

        existing_invitation = await self.db.execute(
            select(Invitation.id)
            .where(
                Invitation.agency_id == agency_id,
                Invitation.email == email,
                Invitation.status == InvitationStatus.pending,
            )
            .limit(1)
        )
        if existing_invitation.first():
            raise DuplicateInvitationError()

        permissions = request.permissions or default_permissions(request.role)
        now = utcnow()
        invitation = Invitation(
            agency_id=agency_id,
            email=email,
            role=AgencyRole(request.role),
            permissions=permissions.model_dump(),
            invited_by=caller.user_id,
            token=generate_invitation_token(),
            expires_at=now + timedelta(days=settings.INVITATION_TTL_DAYS),
            status=InvitationStatus.pending,
            created_at=now,
        )
        self.db.add(invitation)

        try:
            await self.db.commit()
        except IntegrityError:
            # Lost a race against a concurrent invite for the same email
            await self.db.rollback()
            raise DuplicateInvitationError()

        logger.info(
            f"Invitation {invitation.id} created for agency {agency_id} "
            f"with role {invitation.role.value}"
        )
        return CreateInvitationResponse(
            invitation_id=invitation.id,
            token=invitation.token,
            expires_at=invitation.expires_at.isoformat(),
        )

    async def accept_invitation(
        self, token: str, caller: Optional[Caller]
    ) -> MemberResponse:
        """
        Redeem an invitation token and join the agency.

        Checks run in order: token exists, invitation is pending, invitation
        has not expired, caller's verified email matches. Expiry is persisted
        here, at redemption time.

        Raises:
            InvitationNotFoundError: If no invitation matches the token
            InvitationStateError: If the invitation is not pending
            InvitationExpiredError: If the invitation is past its expiry
            InvitationEmailMismatchError: If the caller's email differs
            AlreadyMemberError: If the caller already belongs to the agency
        """
        if caller is None:
            raise UnauthenticatedError()

        result = await self.db.execute(
            select(Invitation).where(Invitation.token == token)
        )
        invitation = result.scalar_one_or_none()
        if not invitation:
            raise InvitationNotFoundError("Invalid invitation token")

        if invitation.status != InvitationStatus.pending:
            raise InvitationStateError()

        now = utcnow()
        if invitation.is_expired(now):
            expired = await self._transition(invitation.id, InvitationStatus.expired)
            await self.db.commit()
            if not expired:
                raise InvitationStateError()
            logger.warning(f"Invitation {invitation.id} expired on redemption")
            raise InvitationExpiredError()

        if not caller.email or caller.email != normalize_email(invitation.email):
            raise InvitationEmailMismatchError()

        if not await self._transition(invitation.id, InvitationStatus.accepted):
            await self.db.rollback()
            raise InvitationStateError()

        member = Member(
            agency_id=invitation.agency_id,
            user_id=caller.user_id,
            role=invitation.role,
            permissions=dict(invitation.permissions),
            status=MemberStatus.active,
            invited_by=invitation.invited_by,
            invited_at=invitation.created_at,
            joined_at=now,
            last_active_at=now,
        )
        self.db.add(member)

        try:
            await self.db.commit()
        except IntegrityError:
            # Rolls back the accepted transition along with the member insert
            await self.db.rollback()
            raise AlreadyMemberError("You are already a member of this agency")

        logger.info(
            f"Invitation {invitation.id} accepted by user {caller.user_id} "
            f"for agency {invitation.agency_id}"
        )
        return MemberResponse.from_member(member)

    async def cancel_invitation(
        self, invitation_id: str, caller: Optional[Caller]
    ) -> InvitationResponse:
        """
        Cancel a pending invitation.

        Invitations already accepted, expired or canceled keep their status;
        cancelling them is a no-op.
        """
        if caller is None:
            raise UnauthenticatedError()

        invitation = await self.db.get(Invitation, invitation_id)
        if not invitation:
            raise InvitationNotFoundError()

        await authorize(
            self.db, invitation.agency_id, caller, Permission.MANAGE_MEMBERS
        )

        if invitation.status == InvitationStatus.pending:
            if await self._transition(invitation.id, InvitationStatus.canceled):
                logger.info(f"Invitation {invitation.id} canceled by {caller.user_id}")

        await self.db.commit()
        await self.db.refresh(invitation)
        return InvitationResponse.from_invitation(invitation)

    async def list_agency_invitations(self, agency_id: str) -> List[InvitationResponse]:
        result = await self.db.execute(
            select(Invitation)
            .where(Invitation.agency_id == agency_id)
            .order_by(Invitation.created_at.desc())
        )
        now = utcnow()
        return [
            InvitationResponse.from_invitation(invitation, now)
            for invitation in result.scalars().all()
        ]

    async def list_user_invitations(
        self, caller: Optional[Caller]
    ) -> List[UserInvitationResponse]:
        """Pending invitations addressed to the caller's verified email."""
        if caller is None:
            raise UnauthenticatedError()
        if not caller.email:
            return []

        inviter = aliased(User)
        result = await self.db.execute(
            select(Invitation, Agency, inviter)
            .join(Agency, Agency.id == Invitation.agency_id)
            .outerjoin(inviter, inviter.id == Invitation.invited_by)
            .where(
                Invitation.email == caller.email,
                Invitation.status == InvitationStatus.pending,
            )
            .order_by(Invitation.created_at.desc())
        )

        now = utcnow()
        invitations = []
        for invitation, agency, invited_by in result.all():
            base = InvitationResponse.from_invitation(invitation, now)
            invitations.append(
                UserInvitationResponse(
                    **base.model_dump(),
                    agency=InvitationAgencyInfo(name=agency.name, logo=agency.logo),
                    invited_by_user=(
                        InviterInfo(name=invited_by.name, email=invited_by.email)
                        if invited_by
                        else None
                    ),
                )
            )
        return invitations

    async def _transition(
        self, invitation_id: str, status: InvitationStatus
    ) -> bool:
        """Move a pending invitation to ``status``; False if it was no longer pending."""
        result = await self.db.execute(
            update(Invitation)
            .where(
                Invitation.id == invitation_id,
                Invitation.status == InvitationStatus.pending,
            )
            .values(status=status)
        )
        return result.rowcount == 1
