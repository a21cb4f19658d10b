# wayfare/domains/invitations/models.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from wayfare.db.models import Invitation, as_utc
from wayfare.domains.members.models import AssignableRole
from wayfare.shared.permissions import PermissionSet


class CreateInvitationRequest(BaseModel):
    email: EmailStr
    role: AssignableRole
    # Falls back to the role template when omitted
    permissions: Optional[PermissionSet] = None


class CreateInvitationResponse(BaseModel):
    invitation_id: str
    token: str
    expires_at: str


class AcceptInvitationRequest(BaseModel):
    token: str = Field(..., min_length=1, description="Invitation token received out of band")


class InvitationResponse(BaseModel):
    id: str
    agency_id: str
    email: str
    role: str
    permissions: PermissionSet
    invited_by: str
    status: str
    expires_at: str
    created_at: Optional[str]
    # Stored status only flips to "expired" on redemption, so listings compare
    # against the clock themselves
    is_expired: bool

    @classmethod
    def from_invitation(
        cls, invitation: Invitation, now: Optional[datetime] = None
    ) -> "InvitationResponse":
        return cls(
            id=invitation.id,
            agency_id=invitation.agency_id,
            email=invitation.email,
            role=invitation.role.value,
            permissions=PermissionSet.from_stored(invitation.permissions),
            invited_by=invitation.invited_by,
            status=invitation.status.value,
            expires_at=as_utc(invitation.expires_at).isoformat(),
            created_at=(
                invitation.created_at.isoformat() if invitation.created_at else None
            ),
            is_expired=invitation.is_expired(now),
        )


class InvitationAgencyInfo(BaseModel):
    name: str
    logo: Optional[str]


class InviterInfo(BaseModel):
    name: Optional[str]
    email: Optional[str]


class UserInvitationResponse(InvitationResponse):
    agency: Optional[InvitationAgencyInfo] = None
    invited_by_user: Optional[InviterInfo] = None
