# wayfare/domains/members/models.py
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, model_validator

from wayfare.db.models import Member, User
from wayfare.shared.permissions import PermissionSet

AssignableRole = Literal["admin", "manager", "agent", "editor", "viewer"]

# Member columns a patch may set but never clear
_NON_NULLABLE_FIELDS = {"role", "permissions", "status"}


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class MemberUserInfo(BaseModel):
    name: Optional[str]
    email: Optional[str]
    image: Optional[str]


class MemberResponse(BaseModel):
    id: str
    agency_id: str
    user_id: str
    role: str
    permissions: PermissionSet
    assigned_regions: Optional[List[str]] = None
    assigned_trip_types: Optional[List[str]] = None
    status: str
    invited_by: Optional[str] = None
    invited_at: Optional[str] = None
    joined_at: Optional[str] = None
    last_active_at: Optional[str] = None
    user: Optional[MemberUserInfo] = None

    @classmethod
    def from_member(
        cls, member: Member, user: Optional[User] = None
    ) -> "MemberResponse":
        return cls(
            id=member.id,
            agency_id=member.agency_id,
            user_id=member.user_id,
            role=member.role.value,
            permissions=PermissionSet.from_stored(member.permissions),
            assigned_regions=member.assigned_regions,
            assigned_trip_types=member.assigned_trip_types,
            status=member.status.value,
            invited_by=member.invited_by,
            invited_at=_iso(member.invited_at),
            joined_at=_iso(member.joined_at),
            last_active_at=_iso(member.last_active_at),
            user=(
                MemberUserInfo(name=user.name, email=user.email, image=user.image)
                if user
                else None
            ),
        )


class UpdateMemberRequest(BaseModel):
    """Partial update; fields left out are not changed."""

    role: Optional[AssignableRole] = None
    permissions: Optional[PermissionSet] = None
    assigned_regions: Optional[List[str]] = None
    assigned_trip_types: Optional[List[str]] = None
    status: Optional[Literal["active", "inactive"]] = None

    @model_validator(mode="after")
    def validate_has_update(self) -> "UpdateMemberRequest":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        cleared = sorted(
            field
            for field in _NON_NULLABLE_FIELDS & self.model_fields_set
            if getattr(self, field) is None
        )
        if cleared:
            raise ValueError(f"Fields cannot be cleared: {', '.join(cleared)}")
        return self


class PermissionCheckResponse(BaseModel):
    permission: str
    allowed: bool


class ActionResponse(BaseModel):
    success: bool = True
