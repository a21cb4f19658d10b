# wayfare/domains/invitations/routes.py
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from wayfare.core.database import get_db
from wayfare.db.models import Member
from wayfare.domains.auth.dependencies import get_caller
from wayfare.domains.auth.models import Caller
from wayfare.domains.invitations.models import (
    AcceptInvitationRequest,
    CreateInvitationRequest,
    CreateInvitationResponse,
    InvitationResponse,
    UserInvitationResponse,
)
from wayfare.domains.invitations.service import InvitationService
from wayfare.domains.members.models import MemberResponse
from wayfare.shared.permissions import Permission, require_permission

router = APIRouter(tags=["Invitations"])


@router.post(
    "/agencies/{agency_id}/invitations",
    response_model=CreateInvitationResponse,
    status_code=status.HTTP_201_CREATED,
    operation_id="createInvitation",
)
async def create_invitation(
    agency_id: str,
    request: CreateInvitationRequest,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
) -> CreateInvitationResponse:
    """
    Invite an email address to join the agency.

    The returned token is the credential the invitee redeems; delivering it
    is the caller's responsibility.
    """
    service = InvitationService(db)
    return await service.create_invitation(agency_id, request, caller)


@router.get(
    "/agencies/{agency_id}/invitations",
    response_model=List[InvitationResponse],
    operation_id="getAgencyInvitations",
)
async def get_agency_invitations(
    agency_id: str,
    membership: Member = Depends(require_permission(Permission.MANAGE_MEMBERS)),
    db: AsyncSession = Depends(get_db),
) -> List[InvitationResponse]:
    """List all invitations of an agency, newest first."""
    service = InvitationService(db)
    return await service.list_agency_invitations(agency_id)


@router.get(
    "/invitations/mine",
    response_model=List[UserInvitationResponse],
    operation_id="getUserInvitations",
)
async def get_user_invitations(
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
) -> List[UserInvitationResponse]:
    """Pending invitations addressed to the caller's verified email."""
    service = InvitationService(db)
    return await service.list_user_invitations(caller)


@router.post(
    "/invitations/accept",
    response_model=MemberResponse,
    operation_id="acceptInvitation",
)
async def accept_invitation(
    request: AcceptInvitationRequest,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
) -> MemberResponse:
    """Redeem an invitation token. Returns the new membership."""
    service = InvitationService(db)
    return await service.accept_invitation(request.token, caller)


@router.post(
    "/invitations/{invitation_id}/cancel",
    response_model=InvitationResponse,
    operation_id="cancelInvitation",
)
async def cancel_invitation(
    invitation_id: str,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
) -> InvitationResponse:
    """Cancel a pending invitation. Terminal invitations are left unchanged."""
    service = InvitationService(db)
    return await service.cancel_invitation(invitation_id, caller)
