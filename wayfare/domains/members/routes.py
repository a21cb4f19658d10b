# wayfare/domains/members/routes.py
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from wayfare.core.database import get_db
from wayfare.domains.auth.dependencies import get_caller, get_optional_caller
from wayfare.domains.auth.models import Caller
from wayfare.domains.members.models import (
    ActionResponse,
    MemberResponse,
    PermissionCheckResponse,
    UpdateMemberRequest,
)
from wayfare.domains.members.service import MembershipService

router = APIRouter(tags=["Members"])


@router.get(
    "/agencies/{agency_id}/members",
    response_model=List[MemberResponse],
    operation_id="getAgencyMembers",
)
async def get_agency_members(
    agency_id: str,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
) -> List[MemberResponse]:
    """
    Get all members of an agency.

    Any active member of the agency may list its members.
    """
    service = MembershipService(db)
    return await service.list_members(agency_id, caller)


@router.get(
    "/agencies/{agency_id}/membership",
    response_model=MemberResponse,
    operation_id="getMembership",
)
async def get_membership(
    agency_id: str,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
) -> MemberResponse:
    """Get the caller's own membership in an agency."""
    service = MembershipService(db)
    return await service.get_caller_membership(agency_id, caller)


@router.post(
    "/agencies/{agency_id}/leave",
    response_model=ActionResponse,
    operation_id="leaveAgency",
)
async def leave_agency(
    agency_id: str,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
) -> ActionResponse:
    """
    Leave an agency.

    The owner cannot leave; ownership must be transferred first.
    """
    service = MembershipService(db)
    await service.leave_agency(agency_id, caller)
    return ActionResponse()


@router.get(
    "/agencies/{agency_id}/permissions/{permission}",
    response_model=PermissionCheckResponse,
    operation_id="checkPermission",
)
async def check_permission(
    agency_id: str,
    permission: str,
    caller: Optional[Caller] = Depends(get_optional_caller),
    db: AsyncSession = Depends(get_db),
) -> PermissionCheckResponse:
    """
    Check whether the caller holds a permission in an agency.

    Never fails for anonymous callers or unknown permission names; the
    answer is simply false. Intended for UI gating.
    """
    service = MembershipService(db)
    allowed = await service.check_permission(agency_id, permission, caller)
    return PermissionCheckResponse(permission=permission, allowed=allowed)


@router.patch(
    "/members/{member_id}",
    response_model=MemberResponse,
    operation_id="updateMember",
)
async def update_member(
    member_id: str,
    updates: UpdateMemberRequest,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
) -> MemberResponse:
    """
    Update a member's role, permissions, assignments or status.

    Business rules:
    - Caller must hold manage_members in the member's agency
    - The agency owner cannot be modified
    """
    service = MembershipService(db)
    return await service.update_member(member_id, updates, caller)


@router.delete(
    "/members/{member_id}",
    response_model=ActionResponse,
    operation_id="removeMember",
)
async def remove_member(
    member_id: str,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
) -> ActionResponse:
    """Remove a member from their agency. The owner cannot be removed."""
    service = MembershipService(db)
    await service.remove_member(member_id, caller)
    return ActionResponse()
